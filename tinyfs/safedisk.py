"""Block reads and writes that check bounds, block kind, magic number and padding."""

from .blocks import (
    BLOCK_SIZE,
    FREE_BLOCK_SIZE,
    HEADER_SIZE,
    MAGIC_NUMBER,
    BlockType,
    ExtentBlock,
    InodeBlock,
    SuperBlock,
    block_header,
)
from .errors import CorruptError, DiskIOError

_SIZED_KINDS = (
    (BlockType.INODE, InodeBlock.SIZE),
    (BlockType.FREE, FREE_BLOCK_SIZE),
    (BlockType.FILE_EXTENT, ExtentBlock.SIZE),
)


def check_block_number(disk, bnum, block_type):
    """Raise DiskIOError unless ``bnum`` lies within the disk its superblock describes.

    Block 0 is only reachable as a superblock.
    """
    if bnum == 0:
        if int(block_type) != BlockType.SUPER:
            raise DiskIOError("block 0 holds the superblock only")
        return
    if bnum < 0:
        raise DiskIOError(f"block number {bnum} is negative")
    try:
        raw = disk.read_block(0)
    except DiskIOError as exc:
        raise DiskIOError(f"cannot read superblock: {exc}") from exc
    num_blocks = SuperBlock.unpack(raw).num_blocks
    if num_blocks <= bnum:
        raise DiskIOError(
            f"block {bnum} beyond the {num_blocks} blocks recorded in the superblock"
        )


def block_size(block_type, bnum, writing=False):
    """Number of meaningful bytes of a block of ``block_type`` at ``bnum``."""
    kind = int(block_type)
    if writing and kind == BlockType.GENERIC:
        raise DiskIOError("a write must name the kind of block being written")
    size = None
    if kind & BlockType.SUPER == BlockType.SUPER:
        size = SuperBlock.SIZE
        if bnum != 0:
            raise DiskIOError("a superblock can only live in block 0")
    for flag, flag_size in _SIZED_KINDS:
        if kind & flag == flag:
            size = flag_size if size is None else max(size, flag_size)
    if kind == BlockType.GENERIC:
        size = BLOCK_SIZE
    if size is None:
        raise DiskIOError(f"unrecognised block type {kind}")
    return size


def safe_read_block(disk, bnum, block_type):
    """Read block ``bnum``, verifying its header, and return its meaningful bytes."""
    check_block_number(disk, bnum, block_type)
    size = block_size(block_type, bnum, writing=False)
    raw = disk.read_block(bnum)
    header = block_header(raw)
    if header.magic != MAGIC_NUMBER or header.padding != 0:
        raise CorruptError(f"block {bnum} has a bad magic number or padding")
    kind = int(block_type)
    if kind != BlockType.GENERIC and (kind & header.block_id) != header.block_id:
        raise CorruptError(
            f"block {bnum} is of type {header.block_id}, expected {kind}"
        )
    return bytes(raw[:size])


def safe_write_block(disk, bnum, data, block_type):
    """Write ``data`` as a ``block_type`` block, stamping its type, magic and padding.

    The next-block link in byte 2 is left as given; bytes beyond the kind's
    size are written as zeros.
    """
    check_block_number(disk, bnum, block_type)
    size = block_size(block_type, bnum, writing=True)
    buf = bytearray(bytes(data)[:size]).ljust(HEADER_SIZE, b"\0")
    buf[0] = int(block_type)
    buf[1] = MAGIC_NUMBER
    buf[3] = 0
    disk.write_block(bnum, bytes(buf[:BLOCK_SIZE]).ljust(BLOCK_SIZE, b"\0"))