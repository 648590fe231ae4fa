import pytest

from tinyfs.blocks import (
    BLOCK_SIZE,
    FREE_BLOCK_SIZE,
    MAGIC_NUMBER,
    BlockType,
    ExtentBlock,
    InodeBlock,
    SuperBlock,
    block_header,
)
from tinyfs.disk import Disk
from tinyfs.errors import CorruptError, DiskIOError
from tinyfs.safedisk import (
    block_size,
    check_block_number,
    safe_read_block,
    safe_write_block,
)

BLOCKS = 6


@pytest.fixture
def disk(tmp_path):
    with Disk.create(tmp_path / "safe.disk", BLOCKS * BLOCK_SIZE) as d:
        safe_write_block(d, 0, SuperBlock(num_blocks=BLOCKS).pack(), BlockType.SUPER)
        for b in range(1, BLOCKS):
            safe_write_block(d, b, bytes(4), BlockType.FREE)
        yield d


def test_block_size_per_kind():
    assert block_size(BlockType.SUPER, 0) == BLOCK_SIZE
    assert block_size(BlockType.INODE, 3) == InodeBlock.SIZE
    assert block_size(BlockType.FREE, 3) == FREE_BLOCK_SIZE
    assert block_size(BlockType.FILE_EXTENT, 3) == BLOCK_SIZE
    assert block_size(BlockType.GENERIC, 3) == BLOCK_SIZE


def test_block_size_combined_takes_largest():
    assert block_size(BlockType.INODE | BlockType.FREE, 2) == InodeBlock.SIZE
    combined = BlockType.INODE | BlockType.FREE | BlockType.FILE_EXTENT
    assert block_size(combined, 2) == BLOCK_SIZE


def test_block_size_errors():
    with pytest.raises(DiskIOError):
        block_size(BlockType.GENERIC, 2, writing=True)
    with pytest.raises(DiskIOError):
        block_size(BlockType.SUPER, 1)
    with pytest.raises(DiskIOError):
        block_size(0, 1)


def test_check_block_number_zero_only_for_superblock(disk):
    check_block_number(disk, 0, BlockType.SUPER)
    with pytest.raises(DiskIOError):
        check_block_number(disk, 0, BlockType.INODE)


def test_check_block_number_bounds(disk):
    check_block_number(disk, BLOCKS - 1, BlockType.FREE)
    with pytest.raises(DiskIOError):
        check_block_number(disk, -1, BlockType.FREE)
    with pytest.raises(DiskIOError):
        check_block_number(disk, BLOCKS, BlockType.FREE)


def test_check_block_number_uses_superblock_size(disk):
    safe_write_block(disk, 0, SuperBlock(num_blocks=2).pack(), BlockType.SUPER)
    with pytest.raises(DiskIOError):
        check_block_number(disk, 3, BlockType.FREE)


def test_extent_round_trip(disk):
    block = ExtentBlock(next_block=4, data=b"hello")
    safe_write_block(disk, 2, block.pack(), BlockType.FILE_EXTENT)
    raw = safe_read_block(disk, 2, BlockType.FILE_EXTENT)
    assert len(raw) == BLOCK_SIZE
    back = ExtentBlock.unpack(raw)
    assert back.next_block == 4
    assert back.data.rstrip(b"\0") == b"hello"
    assert back.magic == MAGIC_NUMBER
    assert back.block_id == BlockType.FILE_EXTENT


def test_write_stamps_header(disk):
    payload = bytes([99, 99, 5, 7]) + b"x" * 10
    safe_write_block(disk, 1, payload, BlockType.FILE_EXTENT)
    header = block_header(disk.read_block(1))
    assert header.block_id == BlockType.FILE_EXTENT
    assert header.magic == MAGIC_NUMBER
    assert header.next_block == 5
    assert header.padding == 0


def test_inode_write_zero_fills_tail(disk):
    safe_write_block(disk, 3, b"\xff" * BLOCK_SIZE, BlockType.INODE)
    raw = disk.read_block(3)
    assert raw[InodeBlock.SIZE:] == bytes(BLOCK_SIZE - InodeBlock.SIZE)
    assert len(safe_read_block(disk, 3, BlockType.INODE)) == InodeBlock.SIZE


def test_read_wrong_type_is_corrupt(disk):
    with pytest.raises(CorruptError):
        safe_read_block(disk, 1, BlockType.INODE)


def test_read_accepts_any_of_combined_types(disk):
    raw = safe_read_block(disk, 1, BlockType.INODE | BlockType.FREE)
    assert block_header(raw).block_id == BlockType.FREE


def test_generic_read_returns_whole_block(disk):
    raw = safe_read_block(disk, 1, BlockType.GENERIC)
    assert len(raw) == BLOCK_SIZE
    assert block_header(raw).block_id == BlockType.FREE


def test_bad_magic_is_corrupt(disk):
    disk.write_block(2, bytes(BLOCK_SIZE))
    with pytest.raises(CorruptError):
        safe_read_block(disk, 2, BlockType.GENERIC)


def test_bad_padding_is_corrupt(disk):
    disk.write_block(2, bytes([BlockType.FREE, MAGIC_NUMBER, 0, 1]).ljust(BLOCK_SIZE, b"\0"))
    with pytest.raises(CorruptError):
        safe_read_block(disk, 2, BlockType.FREE)


def test_generic_write_refused(disk):
    with pytest.raises(DiskIOError):
        safe_write_block(disk, 2, bytes(BLOCK_SIZE), BlockType.GENERIC)