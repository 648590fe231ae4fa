"""Fragment map, defragmentation, directory listing, renaming, permissions and file info."""

from .blocks import (
    DATA_PER_BLOCK,
    NO_BLOCK_LINK,
    BlockType,
    ExtentBlock,
    InodeBlock,
    ReadMode,
    SuperBlock,
    Timestamp,
    block_header,
)
from .errors import (
    CorruptError,
    InvalidParameterError,
    NoSpaceError,
    NotFoundError,
    OutOfRangeError,
    PermissionDeniedError,
    TinyFSError,
)
from .helpers import (
    disk_block_count,
    find_free_block,
    format_name,
    search_superblock,
    set_block_free,
)
from .safedisk import safe_read_block, safe_write_block

_YEAR_OFFSET = 1900
_ANY_CHAIN_BLOCK = BlockType.FILE_EXTENT | BlockType.FREE | BlockType.INODE


def _read_superblock(disk):
    return SuperBlock.unpack(safe_read_block(disk, 0, BlockType.SUPER))


def _read_inode(disk, index):
    return InodeBlock.unpack(safe_read_block(disk, index, BlockType.INODE))


def _read_extent(disk, index):
    return ExtentBlock.unpack(safe_read_block(disk, index, BlockType.FILE_EXTENT))


def _open_file(table, fd):
    file = table.find_by_fd(fd)
    if file is None:
        raise NotFoundError(f"file descriptor {fd} is not open")
    return file


def _decode_name(raw):
    return bytes(raw).split(b"\0", 1)[0].decode("utf-8", errors="replace")


def display_fragments(disk):
    """Map every block to its owner: 0 free, 1 superblock, 2 and up one number per file.

    Files are numbered in the order the superblock links them.  If a file's
    chain cannot be read, the map built so far is returned.
    """
    sb = _read_superblock(disk)
    fragments = [0] * sb.num_blocks
    fragments[0] = BlockType.SUPER.value
    file_id = 2
    for first in sb.inode_indices[:sb.num_blocks]:
        if first == NO_BLOCK_LINK:
            continue
        block = first
        while block != NO_BLOCK_LINK:
            fragments[block] = file_id
            try:
                raw = safe_read_block(disk, block, _ANY_CHAIN_BLOCK)
            except TinyFSError:
                return fragments
            block = block_header(raw).next_block
        file_id = (file_id + 1) & 0xFF
    return fragments


def swap_inode(disk, link_index, inode_index, free_index):
    """Move the inode at ``inode_index`` into the free block ``free_index``."""
    sb = _read_superblock(disk)
    sb.inode_indices[link_index] = free_index
    inode = _read_inode(disk, inode_index)
    safe_write_block(disk, free_index, inode.pack(), BlockType.INODE)
    safe_write_block(disk, 0, sb.pack(), BlockType.SUPER)
    set_block_free(disk, inode_index)


def swap_file_extent(disk, prev_index, extent_index, free_index):
    """Move the extent at ``extent_index`` to ``free_index`` and relink ``prev_index`` to it."""
    prev = bytearray(safe_read_block(disk, prev_index, BlockType.GENERIC))
    extent = _read_extent(disk, extent_index)
    safe_write_block(disk, free_index, extent.pack(), BlockType.FILE_EXTENT)
    prev[2] = free_index
    safe_write_block(disk, prev_index, bytes(prev), BlockType(block_header(prev).block_id))
    set_block_free(disk, extent_index)


def _compact_extents(disk, extent_index, prev_index, free_index, num_blocks):
    """Pull a file's extents down into free blocks; return the next free block."""
    while extent_index != NO_BLOCK_LINK:
        extent = _read_extent(disk, extent_index)
        if extent_index > free_index:
            swap_file_extent(disk, prev_index, extent_index, free_index)
            prev_index = free_index
            free_index = find_free_block(disk, num_blocks, free_index)
        else:
            prev_index = extent_index
        extent_index = extent.next_block
    return free_index


def defrag(disk):
    """Move inodes and extents towards the start so free blocks gather at the end."""
    num_blocks = disk_block_count(disk)
    try:
        free_index = find_free_block(disk, num_blocks, 0)
    except NoSpaceError:
        return
    sb = _read_superblock(disk)
    for link, inode_index in enumerate(sb.inode_indices[:sb.num_blocks]):
        if inode_index == NO_BLOCK_LINK:
            continue
        inode = _read_inode(disk, inode_index)
        if inode_index > free_index:
            swap_inode(disk, link, inode_index, free_index)
            inode_index = free_index
            free_index = find_free_block(disk, sb.num_blocks, free_index)
        free_index = _compact_extents(
            disk, inode.next_block, inode_index, free_index, sb.num_blocks
        )


def list_directory(disk):
    """Names of all files, in the order the superblock links them."""
    sb = _read_superblock(disk)
    return [
        _decode_name(_read_inode(disk, index).file_name)
        for index in sb.inode_indices[:sb.num_blocks]
        if index != NO_BLOCK_LINK
    ]


def rename_file(disk, table, fd, new_name):
    """Give the open file ``fd`` a new name, stamping its modification and access times."""
    sb = _read_superblock(disk)
    file = _open_file(table, fd)
    index = sb.inode_indices[file.inode_link_index]
    inode = _read_inode(disk, index)
    formatted = format_name(new_name)
    now = Timestamp.now()
    inode.file_name = formatted
    inode.modification_time = now
    inode.access_time = now
    safe_write_block(disk, index, inode.pack(), BlockType.INODE)
    file.name = formatted


def check_permission(disk, file):
    """Raise PermissionDeniedError if ``file``'s inode is marked read-only."""
    sb = _read_superblock(disk)
    raw = disk.read_block(sb.inode_indices[file.inode_link_index])
    if InodeBlock.unpack(raw).read_mode == ReadMode.READ_ONLY:
        raise PermissionDeniedError()


def change_permissions(disk, table, name, mode):
    """Set the read mode of the file called ``name``, opening it briefly if needed."""
    if name is None:
        raise InvalidParameterError("file name is missing")
    formatted = format_name(name)
    sb = _read_superblock(disk)
    temp_fd = None
    file = table.find_by_name(formatted)
    if file is None:
        found = search_superblock(sb, disk, table, formatted)
        if found.fd is None:
            raise NotFoundError(f"no file named {_decode_name(formatted)!r}")
        temp_fd = found.fd
        file = table.find_by_fd(temp_fd)
    try:
        index = sb.inode_indices[file.inode_link_index]
        raw = bytearray(disk.read_block(index))
        inode = InodeBlock.unpack(raw)
        inode.read_mode = ReadMode(mode)
        raw[:InodeBlock.SIZE] = inode.pack()
        disk.write_block(index, bytes(raw))
    finally:
        if temp_fd is not None:
            table.remove(temp_fd)


def _as_byte(value):
    if isinstance(value, str):
        value = value.encode("latin-1")
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 1:
            raise InvalidParameterError("exactly one byte is needed")
        return value[0]
    if isinstance(value, int) and 0 <= value <= 0xFF:
        return value
    raise InvalidParameterError(f"{value!r} is not a byte")


def write_byte(disk, table, fd, byte):
    """Overwrite the byte at the file's current position; the position does not move."""
    value = _as_byte(byte)
    file = _open_file(table, fd)
    check_permission(disk, file)
    offset = file.location
    if offset > file.file_size:
        raise OutOfRangeError()
    block = file.next_block
    while offset >= DATA_PER_BLOCK:
        if block == NO_BLOCK_LINK:
            raise CorruptError("file chain ends before its recorded size")
        block = _read_extent(disk, block).next_block
        offset -= DATA_PER_BLOCK
    extent = _read_extent(disk, block)
    data = bytearray(extent.data)
    data[offset] = value
    extent.data = bytes(data)
    safe_write_block(disk, block, extent.pack(), BlockType.FILE_EXTENT)


def read_file_info(disk, table, fd):
    """Return the inode of the open file ``fd``."""
    sb = _read_superblock(disk)
    file = _open_file(table, fd)
    return _read_inode(disk, sb.inode_indices[file.inode_link_index])


def format_time(ts):
    """Render a timestamp as time of day and month:day:year."""
    return (
        f"time of day: {ts.second // 3600}:{(ts.second % 3600) // 60}:{ts.second % 60}, "
        f"date: {ts.month}:{ts.day}:{ts.year + _YEAR_OFFSET}"
    )


def format_file_info(inode):
    """Render an inode's name, size, permission and times as a printable report."""
    status = (
        ", readStatus=readOnly"
        if inode.read_mode == ReadMode.READ_ONLY
        else ", readStatus= read and write"
    )
    return (
        "\nPrinting File Info\n"
        f"fileName: {_decode_name(inode.file_name)}, size: {inode.file_size}{status}\n"
        f"Creation: \t\t{format_time(inode.creation_time)}\n"
        f"last Modification: \t{format_time(inode.modification_time)}\n"
        f"Last Access: \t\t{format_time(inode.access_time)}\n"
        "\n"
    )