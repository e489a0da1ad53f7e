import pytest

from megatron.catalog import (
    RelSchema,
    SchemaError,
    find_schema_line,
    load_schema,
    parse_schema_line,
)


def test_parse_fixed_relation():
    schema = parse_schema_line("Housing#price#int#area#float#fijo#0#4")
    assert schema == RelSchema("Housing", ["price", "area"], ["int", "float"], True, 0, 4)
    assert schema.num_columns == 2


def test_parse_variable_relation():
    schema = parse_schema_line("titanic#Name#string#variable#5#9")
    assert schema.fixed_length is False
    assert schema.fields == ["Name"]
    assert (schema.start_cylinder, schema.end_cylinder) == (5, 9)


def test_empty_tokens_are_skipped():
    assert parse_schema_line("T##a#int##fijo#1#2") == parse_schema_line("T#a#int#fijo#1#2")


def test_non_numeric_cylinder_reads_as_zero():
    assert parse_schema_line("T#a#int#fijo#x#3").start_cylinder == 0


@pytest.mark.parametrize(
    "line",
    ["", "###", "T#a", "T#a#int#fijo", "T#a#int#fijo#1"],
)
def test_malformed_lines(line):
    with pytest.raises(SchemaError):
        parse_schema_line(line)


def test_find_schema_line_needs_exact_name(tmp_path):
    schema_file = tmp_path / "schema.txt"
    schema_file.write_text(
        "Housing2#a#int#fijo#0#4\nHousing#price#int#fijo#5#9\n", encoding="utf-8"
    )
    assert find_schema_line(schema_file, "Housing") == "Housing#price#int#fijo#5#9"
    assert find_schema_line(schema_file, "House") is None


def test_find_schema_line_missing_file(tmp_path):
    with pytest.raises(SchemaError):
        find_schema_line(tmp_path / "none.txt", "T")


def test_load_schema(tmp_path):
    schema_file = tmp_path / "schema.txt"
    schema_file.write_text("T#id#int#name#string#variable#0#4\n", encoding="utf-8")
    schema = load_schema(schema_file, "T")
    assert schema.fields == ["id", "name"]
    assert schema.types == ["int", "string"]
    with pytest.raises(SchemaError):
        load_schema(schema_file, "U")