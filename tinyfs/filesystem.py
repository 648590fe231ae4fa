"""The tinyFS file system: formatting, mounting and the file API."""

from .blocks import (
    BLOCK_SIZE,
    DATA_PER_BLOCK,
    MAX_BLOCK_COUNT,
    NO_BLOCK_LINK,
    BlockType,
    ExtentBlock,
    ReadMode,
    SuperBlock,
)
from .disk import Disk
from .errors import (
    AlreadyMountedError,
    CorruptError,
    DiskIOError,
    InvalidParameterError,
    NoDeviceError,
    NoSpaceError,
    NotFoundError,
    OutOfRangeError,
    TinyFSError,
)
from . import extras
from .helpers import (
    create_inode,
    disk_block_count,
    erase_file_data,
    find_free_block,
    format_name,
    remove_inode,
    search_superblock,
    set_block_free,
    update_inode,
    update_inode_access,
)
from .openfiles import OpenFileTable
from .safedisk import safe_read_block, safe_write_block


def mkfs(path, nbytes):
    """Create a blank tinyFS disk at ``path`` of ``nbytes`` rounded down to whole blocks."""
    if nbytes < BLOCK_SIZE:
        raise NoSpaceError("not enough room for a superblock")
    disk = Disk.create(path, nbytes)
    try:
        num_blocks = nbytes // BLOCK_SIZE
        if num_blocks > MAX_BLOCK_COUNT:
            raise NoSpaceError(f"a disk holds at most {MAX_BLOCK_COUNT} blocks")
        try:
            safe_write_block(disk, 0, SuperBlock(num_blocks=num_blocks).pack(), BlockType.SUPER)
        except TinyFSError as exc:
            raise DiskIOError(f"cannot write superblock: {exc}") from exc
        for block in range(1, num_blocks):
            try:
                set_block_free(disk, block)
            except TinyFSError as exc:
                raise CorruptError(f"cannot write free block {block}: {exc}") from exc
    finally:
        if not disk.closed:
            disk.close()


def _as_bytes(data):
    if isinstance(data, str):
        return data.encode()
    return bytes(data)


class TinyFS:
    """A tinyFS file system; at most one disk is mounted at a time."""

    def __init__(self):
        self._disk = None
        self._table = OpenFileTable()

    @property
    def mounted(self):
        return self._disk is not None

    def _require_disk(self):
        if self._disk is None:
            raise NoDeviceError()
        return self._disk

    def _require_file(self, fd):
        file = self._table.find_by_fd(fd)
        if file is None:
            raise NotFoundError(f"file descriptor {fd} is not open")
        return file

    def mount(self, path):
        """Mount the existing disk at ``path``."""
        if self._disk is not None:
            raise AlreadyMountedError()
        try:
            self._disk = Disk.open(path)
        except DiskIOError as exc:
            raise NotFoundError(f"cannot open disk {path}") from exc

    def unmount(self):
        """Unmount the current disk, forgetting every open file."""
        if self._disk is not None:
            try:
                self._disk.close()
            except DiskIOError as exc:
                raise DiskIOError(f"cannot close disk: {exc}") from exc
            self._table.reset()
        self._disk = None

    def open_file(self, name):
        """Open the file ``name``, creating it if missing, and return its descriptor."""
        disk = self._require_disk()
        if name is None:
            raise InvalidParameterError("file name is missing")
        formatted = format_name(name)
        file = self._table.find_by_name(formatted)
        if file is not None:
            return file.fd
        sb = SuperBlock.unpack(safe_read_block(disk, 0, BlockType.SUPER))
        found = search_superblock(sb, disk, self._table, formatted)
        if found.fd is not None:
            return found.fd
        return create_inode(disk, self._table, sb, found.free_link, formatted)

    def close_file(self, fd):
        """Close the open file ``fd``."""
        self._require_disk()
        self._table.remove(fd)

    def write_file(self, fd, data):
        """Replace the whole content of the file ``fd`` with ``data``."""
        disk = self._require_disk()
        data = _as_bytes(data)
        disk_size = disk_block_count(disk)
        file = self._require_file(fd)
        extras.check_permission(disk, file)
        try:
            erase_file_data(disk, file)
        except TinyFSError as exc:
            raise DiskIOError(f"cannot erase file data: {exc}") from exc
        block = find_free_block(disk, disk_size, 0)
        update_inode(disk, file, block, len(data))
        file.location = 0
        position = 0
        while position < len(data):
            chunk = data[position:position + DATA_PER_BLOCK]
            remaining = len(data) - position
            if remaining <= DATA_PER_BLOCK:
                following = NO_BLOCK_LINK
            else:
                following = find_free_block(disk, disk_size, block)
            extent = ExtentBlock(next_block=following, data=chunk)
            try:
                safe_write_block(disk, block, extent.pack(), BlockType.FILE_EXTENT)
            except TinyFSError as exc:
                raise DiskIOError(f"cannot write block {block}: {exc}") from exc
            position += len(chunk)
            block = following

    def delete_file(self, fd):
        """Delete the open file ``fd`` and free its blocks."""
        disk = self._require_disk()
        file = self._require_file(fd)
        try:
            erase_file_data(disk, file)
        except TinyFSError as exc:
            raise DiskIOError(f"cannot erase file data: {exc}") from exc
        try:
            remove_inode(disk, file)
        except TinyFSError as exc:
            raise DiskIOError(f"cannot remove inode: {exc}") from exc
        try:
            self._table.remove(fd)
        except NotFoundError as exc:
            raise CorruptError("open file table lost a file") from exc

    def read_byte(self, fd):
        """Read one byte at the file's position, advancing it; returns a 1-byte bytes."""
        disk = self._require_disk()
        file = self._require_file(fd)
        update_inode_access(disk, file)
        offset = file.location
        if offset > file.file_size:
            raise OutOfRangeError()
        block = file.next_block
        while offset >= DATA_PER_BLOCK:
            if block == NO_BLOCK_LINK:
                raise CorruptError("file chain ends before its recorded size")
            raw = safe_read_block(disk, block, BlockType.FILE_EXTENT)
            block = ExtentBlock.unpack(raw).next_block
            offset -= DATA_PER_BLOCK
        extent = ExtentBlock.unpack(safe_read_block(disk, block, BlockType.FILE_EXTENT))
        file.location += 1
        return extent.data[offset:offset + 1]

    def seek(self, fd, offset):
        """Move the file's position to the absolute ``offset``."""
        self._require_disk()
        file = self._require_file(fd)
        if offset < 0 or offset > file.file_size:
            raise OutOfRangeError()
        file.location = offset

    def display_fragments(self):
        """Map of block owners: 0 free, 1 superblock, 2 and up per file."""
        return extras.display_fragments(self._require_disk())

    def defrag(self):
        """Gather all free blocks at the end of the disk."""
        extras.defrag(self._require_disk())

    def rename(self, fd, new_name):
        """Rename the open file ``fd``."""
        extras.rename_file(self._require_disk(), self._table, fd, new_name)

    def readdir(self):
        """Names of all files on the disk."""
        return extras.list_directory(self._require_disk())

    def make_read_only(self, name):
        """Mark the file ``name`` read-only."""
        extras.change_permissions(self._require_disk(), self._table, name, ReadMode.READ_ONLY)

    def make_read_write(self, name):
        """Mark the file ``name`` writable."""
        extras.change_permissions(self._require_disk(), self._table, name, ReadMode.READ_WRITE)

    def write_byte(self, fd, byte):
        """Overwrite the byte at the file's current position."""
        extras.write_byte(self._require_disk(), self._table, fd, byte)

    def read_file_info(self, fd):
        """Return the inode of the open file ``fd``."""
        return extras.read_file_info(self._require_disk(), self._table, fd)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.unmount()
        return None


def print_file_info(inode):
    """Print an inode's name, size, permission and times."""
    print(extras.format_file_info(inode), end="")