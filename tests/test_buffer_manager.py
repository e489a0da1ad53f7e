import pytest

from megatron.buffer_manager import BufferManager
from megatron.disk_builder import build_tree
from megatron.pages import PAGE_SIZE, SECTOR_SIZE, PageId, sector_path

A = PageId(0, 0, 0, 0)
B = PageId(0, 0, 0, 4)
C = PageId(0, 0, 0, 8)
D = PageId(0, 0, 0, 12)


@pytest.fixture
def disk(tmp_path):
    build_tree(tmp_path, 1, 1, 2, 16, SECTOR_SIZE)
    return tmp_path


def test_missing_page_is_not_loaded(tmp_path):
    manager = BufferManager(tmp_path)
    assert manager.fix_page(A, False) is None
    assert A not in manager


def test_all_zero_page_is_not_loaded(disk):
    for s in range(4):
        sector_path(disk, 0, 0, 0, s).write_bytes(bytes(SECTOR_SIZE))
    manager = BufferManager(disk)
    assert manager.fix_page(A, False) is None
    assert len(manager) == 0


def test_fix_loads_sector_contents(disk):
    sector_path(disk, 0, 0, 0, 1).write_bytes(b"x" * SECTOR_SIZE)
    manager = BufferManager(disk)
    frame = manager.fix_page(A, False)
    expected = b"".join(sector_path(disk, 0, 0, 0, s).read_bytes() for s in range(4))
    assert bytes(frame.data) == expected
    assert len(frame.data) == PAGE_SIZE
    assert frame.pin_count == 1
    assert frame.dirty is False


def test_fix_twice_shares_frame_and_pins(disk):
    manager = BufferManager(disk)
    first = manager.fix_page(A, False)
    second = manager.fix_page(A, True)
    assert first is second
    assert second.pin_count == 2
    assert second.is_write is True


def test_unfix_lowers_pin_and_marks_dirty(disk):
    manager = BufferManager(disk)
    frame = manager.fix_page(A, False)
    manager.unfix_page(A, True)
    assert frame.pin_count == 0
    assert frame.dirty is True
    manager.unfix_page(A, False)
    assert frame.pin_count == 0


def test_flush_writes_only_exclusive_dirty_frames(disk):
    manager = BufferManager(disk)
    written = manager.fix_page(A, True)
    ignored = manager.fix_page(B, False)
    written.data[0:5] = b"hello"
    ignored.data[0:5] = b"world"
    manager.unfix_page(A, True)
    manager.unfix_page(B, True)
    manager.flush_all()
    assert sector_path(disk, 0, 0, 0, 0).read_bytes()[:5] == b"hello"
    assert sector_path(disk, 0, 0, 0, 4).read_bytes()[:5] == b"     "
    assert written.dirty is False
    assert ignored.dirty is True


def test_least_recently_used_is_evicted(disk):
    manager = BufferManager(disk, 3)
    for page in (A, B, C):
        manager.fix_page(page, False)
        manager.unfix_page(page, False)
    manager.fix_page(A, False)
    manager.unfix_page(A, False)
    manager.fix_page(D, False)
    assert B not in manager
    assert A in manager and C in manager and D in manager
    assert len(manager) == 3


def test_eviction_writes_dirty_page(disk):
    manager = BufferManager(disk, 3)
    frame = manager.fix_page(A, True)
    frame.data[0:5] = b"hello"
    manager.unfix_page(A, True)
    for page in (B, C, D):
        manager.fix_page(page, False)
        manager.unfix_page(page, False)
    assert A not in manager
    assert sector_path(disk, 0, 0, 0, 0).read_bytes()[:5] == b"hello"


def test_pinned_pages_are_not_evicted(disk):
    manager = BufferManager(disk, 3)
    for page in (A, B, C, D):
        assert manager.fix_page(page, False) is not None
    assert all(page in manager for page in (A, B, C, D))
    assert len(manager) == 4


def test_context_manager_flushes(disk):
    with BufferManager(disk) as manager:
        frame = manager.fix_page(B, True)
        frame.data[SECTOR_SIZE:SECTOR_SIZE + 3] = b"abc"
        manager.unfix_page(B, True)
    assert sector_path(disk, 0, 0, 0, 5).read_bytes()[:3] == b"abc"
    assert len(manager) == 0


def test_format_table_lists_frames(disk):
    manager = BufferManager(disk)
    manager.fix_page(A, True)
    manager.unfix_page(A, True)
    manager.fix_page(B, False)
    table = manager.format_table()
    rows = [line for line in table.splitlines() if "0,0,0," in line]
    assert len(rows) == 2
    row_a = next(r for r in rows if "0,0,0,0" in r)
    row_b = next(r for r in rows if "0,0,0,4" in r)
    assert "Yes" in row_a and " W " in row_a
    assert "No" in row_b and " L " in row_b
    assert table.startswith("┌")