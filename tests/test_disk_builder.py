from megatron.disk_builder import Disk, build_tree, main


def test_build_tree_creates_blank_sectors(tmp_path):
    root = tmp_path / "disk"
    build_tree(root, 1, 2, 1, 3, 8)
    sectors = sorted(root.glob("Plato*/Cara*/Pista*/Sector*"))
    assert len(sectors) == 1 * 2 * 1 * 3
    assert all(path.read_bytes() == b" " * 8 for path in sectors)
    assert (root / "Plato0" / "Cara1" / "Pista0" / "Sector2").is_file()


def test_build_tree_overwrites_sectors(tmp_path):
    build_tree(tmp_path, 1, 1, 1, 1, 4)
    sector = tmp_path / "Plato0" / "Cara0" / "Pista0" / "Sector0"
    sector.write_bytes(b"data-data")
    build_tree(tmp_path, 1, 1, 1, 1, 4)
    assert sector.read_bytes() == b" " * 4


def test_initialize_writes_header(tmp_path):
    disk = Disk(tmp_path / "disco")
    disk.initialize()
    lines = (disk.root / "header.txt").read_text(encoding="utf-8").splitlines()
    assert lines[0] == f"Platos: {Disk.NUM_PLATTERS}"
    assert lines[-1] == f"Tamaño sector: {Disk.SECTOR_SIZE}"


def test_initialize_writes_freemap_and_index(tmp_path):
    disk = Disk(tmp_path / "disco")
    disk.initialize()
    freemap = (disk.root / "freemap.txt").read_text(encoding="utf-8").splitlines()
    expected = Disk.NUM_PLATTERS * Disk.NUM_FACES * Disk.NUM_TRACKS * Disk.NUM_SECTORS
    assert len(freemap) == expected
    assert set(freemap) == {"0"}
    assert (disk.root / "index.txt").read_text(encoding="utf-8") == "#id\tsector_path\n"


def test_initialize_sector_geometry(tmp_path):
    disk = Disk(tmp_path / "disco")
    disk.initialize()
    last = (
        disk.root
        / f"Plato{Disk.NUM_PLATTERS - 1}"
        / f"Cara{Disk.NUM_FACES - 1}"
        / f"Pista{Disk.NUM_TRACKS - 1}"
        / f"Sector{Disk.NUM_SECTORS - 1}"
    )
    assert last.stat().st_size == Disk.SECTOR_SIZE
    assert not (disk.root / f"Plato{Disk.NUM_PLATTERS}").exists()


def test_initialize_twice_is_stable(tmp_path):
    disk = Disk(tmp_path / "disco")
    disk.initialize()
    first = (disk.root / "freemap.txt").read_text(encoding="utf-8")
    disk.initialize()
    assert (disk.root / "freemap.txt").read_text(encoding="utf-8") == first


def test_main_builds_disk(tmp_path):
    root = tmp_path / "built"
    assert main([str(root)]) == 0
    assert (root / "header.txt").is_file()
    assert (root / "Plato0" / "Cara0" / "Pista0" / "Sector0").is_file()