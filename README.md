# megatron

A small database engine built for learning how data is laid out on disk.
The "disk" is an ordinary directory tree: platters, faces, tracks and
sector files. Relations are loaded from CSV files into pages of four
sectors, read back through a small LRU buffer pool, and queried with a
minimal `SELECT` language.

The package uses only the standard library.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Commands

### `megatron-build-disk`

Creates a fresh simulated disk: 2 platters, 2 faces per platter
(`Cara0`, `Cara1`), 10 tracks per face and 16 sector files of 512 blank
bytes per track. Alongside the sector files it writes `header.txt` (the
geometry), `freemap.txt` (one line per sector, `0` for free) and
`index.txt`. The disk goes into `disco` unless another directory is given.

```
megatron-build-disk
megatron-build-disk path/to/disk
```

### `megatron-virtual-disk`

An interactive tool for a resizable disk, in `disco_prueba` unless another
directory is given. Platters have the faces `CaraSuperior` and
`CaraInferior`. The menu lets you:

1. add platters (the first time, it asks for tracks per face, sectors per
   track and sector size);
2. change the number of tracks and sectors; missing tracks and sectors are
   created on every platter;
3. remove a platter, after which the remaining ones are renumbered from
   `Plato0`;
4. show the platter count and the total capacity in bytes;
5. compute the size of a block of a given number of sectors.

The geometry is kept in `config.txt` inside the disk directory. Option `0`
or the end of input leaves the menu.

```
megatron-virtual-disk
```

### `megatron`

The database shell. It first asks for one or more CSV files to load and
whether each one should be stored with fixed-length or variable-length
records. Column names come from the CSV header and column types (`int`,
`float`, `string`) are inferred from the first data row that has as many
values as the header. Fixed-length records are 64 bytes for a relation
named `Housing` and 128 bytes otherwise; a variable-length record may not
exceed one 512-byte sector. The first relation is placed on tracks 0–4,
later ones on tracks 5–9. Each new relation gets a line in the catalogue.

```
megatron
megatron --disk-root ../Disco/disco --schema schema/schema.txt
```

`--disk-root` (default `../Disco/disco`) is the root of a disk such as the
one `megatron-build-disk` creates; `--schema` (default
`schema/schema.txt`) is the catalogue file.

Afterwards a menu offers:

1. a simple query, such as `SELECT * FROM Housing` or
   `SELECT Name, Age FROM titanic` (spaces are ignored, field names match
   without regard to case);
2. a query with a condition, such as
   `SELECT * FROM titanic WHERE Age > "30"`; adding `| result` also writes
   the matching rows to `data/result.txt` and appends a line for `result`
   with its columns to the catalogue;
3. the buffer pool table (pin counts, dirty flags, LRU positions, mode);
4. to 7. inspection of a page header read straight from the sector files,
   after which the shell exits;
0. exit.

Numeric values are compared numerically with `=`, `!=`, `<`, `<=`, `>`
and `>=`; text values only with `=` and `!=` (other operators match no
rows).

## Library use

The pieces behind the commands can be used on their own:

```python
from megatron.query import split, eval_condition
from megatron.catalog import parse_schema_line

split("1#Allen#29", "#")              # ['1', 'Allen', '29']
eval_condition("29", ">=", "18")      # True

schema = parse_schema_line("people#id#int#name#string#fijo#0#4")
schema.fields                         # ['id', 'name']
schema.fixed_length                   # True
```

`eval_condition` raises `ComparisonError` for an ordering operator applied
to text.

Other modules:

- `megatron.pages` — `PageId`, the page headers `FixedHeader` and
  `VariableHeader` with `pack`/`unpack`, the disk geometry constants and
  `sector_path`.
- `megatron.catalog` — `RelSchema`, `find_schema_line`, `load_schema` and
  `SchemaError`.
- `megatron.buffer_manager` — `BufferManager`, an LRU buffer pool of three
  frames by default, with `fix_page`, `unfix_page`, `flush_all` and
  `format_table`; usable as a context manager, it writes dirty pages back
  when closed.
- `megatron.loader` — `Loader` (`load_csv`, `cylinder_range`), the record
  writers `write_fixed_record` and `write_variable_record`, the CSV helpers
  and `LoadError`.
- `megatron.select` — `simple_select`, `conditional_select`, their parsers
  and `QueryError`.
- `megatron.printer` — `TablePrinter`, which draws the result tables.
- `megatron.disk_builder` and `megatron.virtual_disk` — `Disk` and
  `VirtualDisk`, which create the directory trees described above.

## What it does not do

- There is no way to insert, update or delete records once a relation is
  loaded. The shell's menu lists these options, but they only lead to the
  page header inspection.
- A relation saved with `| result` is written to a text file and named in
  the catalogue without storage mode or track range, so it cannot itself be
  queried afterwards.
- `freemap.txt` and `index.txt` are created but not kept up to date by the
  loader.