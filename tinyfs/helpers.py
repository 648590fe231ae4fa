"""Inode, free-block and superblock operations shared by the file system calls."""

from typing import NamedTuple, Optional

from .blocks import (
    HEADER_SIZE,
    MAX_BLOCK_COUNT,
    MAX_FILE_NAME_LENGTH,
    NO_BLOCK_LINK,
    BlockType,
    InodeBlock,
    ReadMode,
    SuperBlock,
    Timestamp,
    block_header,
)
from .errors import (
    CorruptError,
    DiskIOError,
    InvalidParameterError,
    NoSpaceError,
    NotFoundError,
    TinyFSError,
)
from .safedisk import safe_read_block, safe_write_block


class SuperblockSearch(NamedTuple):
    """Outcome of a superblock search: the opened descriptor, or a free link slot."""

    fd: Optional[int]
    free_link: Optional[int]


def format_name(name):
    """Return ``name`` as stored in an inode: at most 8 bytes, NUL padded."""
    if name is None:
        raise InvalidParameterError("file name is missing")
    if isinstance(name, str):
        name = name.encode()
    name = bytes(name).split(b"\0", 1)[0]
    return name[:MAX_FILE_NAME_LENGTH].ljust(MAX_FILE_NAME_LENGTH, b"\0")


def find_free_block(disk, disk_length, start):
    """Index of the first free block after ``start``; NoSpaceError if there is none."""
    if disk_length > MAX_BLOCK_COUNT:
        raise CorruptError(f"disk claims {disk_length} blocks, more than allowed")
    for index in range(start + 1, disk_length):
        raw = safe_read_block(disk, index, BlockType.GENERIC)
        if block_header(raw).block_id == BlockType.FREE:
            return index
    raise NoSpaceError()


def set_block_free(disk, block):
    """Overwrite ``block`` with an unlinked free block."""
    safe_write_block(disk, block, bytes(HEADER_SIZE), BlockType.FREE)


def _read_superblock(disk):
    return SuperBlock.unpack(safe_read_block(disk, 0, BlockType.SUPER))


def _read_inode(disk, index):
    return InodeBlock.unpack(safe_read_block(disk, index, BlockType.INODE))


def search_superblock(sb, disk, table, name):
    """Look for the file ``name`` among the superblock's inode links.

    If found, the file is opened in ``table`` and its descriptor returned in
    ``fd``; otherwise ``fd`` is None and ``free_link`` is the first unused link.
    """
    if sb.magic != 68 and sb.magic != _magic():
        raise CorruptError("superblock has a bad magic number")
    if sb.num_blocks == MAX_BLOCK_COUNT:
        raise NoSpaceError()
    free_link = None
    for link, inode_index in enumerate(sb.inode_indices[:sb.num_blocks]):
        if inode_index != NO_BLOCK_LINK:
            inode = _read_inode(disk, inode_index)
            if inode.file_name == name:
                fd = table.add(inode.file_size, name, link, inode.next_block)
                return SuperblockSearch(fd=fd, free_link=free_link)
        elif free_link is None:
            free_link = link
    if free_link is None:
        raise NoSpaceError("no free inode link left in the superblock")
    return SuperblockSearch(fd=None, free_link=free_link)


def _magic():
    from .blocks import MAGIC_NUMBER

    return MAGIC_NUMBER


def update_inode_access(disk, file):
    """Stamp the current time as the access time of ``file``'s inode."""
    sb = _read_superblock(disk)
    index = sb.inode_indices[file.inode_link_index]
    inode = _read_inode(disk, index)
    inode.access_time = Timestamp.now()
    safe_write_block(disk, index, inode.pack(), BlockType.INODE)


def update_inode(disk, file, next_block, size):
    """Rewrite ``file``'s inode with a new first data block, size and fresh times."""
    sb = _read_superblock(disk)
    now = Timestamp.now()
    inode = InodeBlock(
        file_name=file.name,
        file_size=size,
        next_block=next_block,
        creation_time=now,
        access_time=now,
        modification_time=now,
        read_mode=ReadMode.READ_WRITE,
    )
    try:
        safe_write_block(
            disk, sb.inode_indices[file.inode_link_index], inode.pack(), BlockType.INODE
        )
    except TinyFSError as exc:
        raise DiskIOError(f"cannot write inode: {exc}") from exc
    file.next_block = next_block
    file.file_size = size


def initiate_inode(disk, block, name):
    """Write an empty, read-write inode called ``name`` into ``block``."""
    now = Timestamp.now()
    inode = InodeBlock(
        file_name=name,
        file_size=0,
        next_block=NO_BLOCK_LINK,
        creation_time=now,
        access_time=now,
        modification_time=now,
        read_mode=ReadMode.READ_WRITE,
    )
    try:
        safe_write_block(disk, block, inode.pack(), BlockType.INODE)
    except TinyFSError as exc:
        raise DiskIOError(f"cannot write inode: {exc}") from exc


def create_inode(disk, table, sb, link_index, name):
    """Create the file ``name`` linked at ``link_index``, open it and return its fd."""
    block = find_free_block(disk, sb.num_blocks, 0)
    initiate_inode(disk, block, name)
    sb.inode_indices[link_index] = block
    try:
        safe_write_block(disk, 0, sb.pack(), BlockType.SUPER)
    except TinyFSError as exc:
        raise DiskIOError(f"cannot write superblock: {exc}") from exc
    return table.add(0, name, link_index, NO_BLOCK_LINK)


def erase_file_data(disk, file):
    """Free every data block of ``file``; its inode and cached size are untouched."""
    if file is None:
        raise NotFoundError()
    index = file.next_block
    any_kind = BlockType.FILE_EXTENT | BlockType.INODE | BlockType.FREE
    while index != NO_BLOCK_LINK:
        following = block_header(safe_read_block(disk, index, any_kind)).next_block
        try:
            set_block_free(disk, index)
        except TinyFSError as exc:
            raise DiskIOError(f"cannot free block {index}: {exc}") from exc
        index = following


def remove_inode(disk, file):
    """Unlink ``file``'s inode from the superblock and free its block."""
    try:
        sb = _read_superblock(disk)
    except TinyFSError as exc:
        raise DiskIOError(f"cannot read superblock: {exc}") from exc
    index = sb.inode_indices[file.inode_link_index]
    sb.inode_indices[file.inode_link_index] = NO_BLOCK_LINK
    try:
        safe_write_block(disk, 0, sb.pack(), BlockType.SUPER)
    except TinyFSError as exc:
        raise DiskIOError(f"cannot write superblock: {exc}") from exc
    set_block_free(disk, index)


def disk_block_count(disk):
    """Number of blocks recorded in the disk's superblock."""
    try:
        return _read_superblock(disk).num_blocks
    except TinyFSError as exc:
        raise DiskIOError(f"cannot read superblock: {exc}") from exc