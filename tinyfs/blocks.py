"""On-disk block layouts of a tinyFS disk and their binary encoding."""

import enum
import struct
import time
from dataclasses import dataclass, field
from typing import ClassVar, NamedTuple

BLOCK_SIZE = 256
DEFAULT_DISK_SIZE = 40 * BLOCK_SIZE
DEFAULT_DISK_NAME = "tinyFSDisk"
MAGIC_NUMBER = 68
MAX_FILE_NAME_LENGTH = 8
NO_BLOCK_LINK = 0
MAX_BLOCK_COUNT = 255
MAX_DISK_SIZE = BLOCK_SIZE * MAX_BLOCK_COUNT
MAX_FILES = BLOCK_SIZE - 5
HEADER_SIZE = 4
FREE_BLOCK_SIZE = HEADER_SIZE
DATA_PER_BLOCK = BLOCK_SIZE - HEADER_SIZE

_HEADER = struct.Struct("<BBBB")


class BlockType(enum.IntFlag):
    """Kind of a block, stored in its first byte; values may be combined for reads."""

    SUPER = 1
    INODE = 2
    FILE_EXTENT = 4
    FREE = 8
    GENERIC = 16


class ReadMode(enum.IntEnum):
    """Permission stored in an inode."""

    READ_ONLY = 1
    READ_WRITE = 2


class BlockHeader(NamedTuple):
    block_id: int
    magic: int
    next_block: int
    padding: int


def block_header(data):
    """Decode the four header bytes shared by every block kind."""
    if len(data) < HEADER_SIZE:
        raise ValueError(f"block header needs {HEADER_SIZE} bytes, got {len(data)}")
    return BlockHeader(*_HEADER.unpack_from(data))


def _require(data, size, what):
    if len(data) < size:
        raise ValueError(f"{what} needs {size} bytes, got {len(data)}")


@dataclass(frozen=True)
class Timestamp:
    """Local time: seconds into the day, day of month, month (0-11), years since 1900."""

    second: int = 0
    day: int = 0
    month: int = 0
    year: int = 0

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("<IBBH")
    SIZE: ClassVar[int] = _FORMAT.size

    @classmethod
    def now(cls):
        t = time.localtime()
        return cls(
            second=t.tm_sec + 60 * t.tm_min + 3600 * t.tm_hour,
            day=t.tm_mday,
            month=t.tm_mon - 1,
            year=t.tm_year - 1900,
        )

    def pack(self):
        try:
            return self._FORMAT.pack(self.second, self.day, self.month, self.year)
        except struct.error as exc:
            raise ValueError(f"timestamp field out of range: {exc}") from exc

    @classmethod
    def unpack(cls, data):
        _require(data, cls.SIZE, "timestamp")
        return cls(*cls._FORMAT.unpack_from(data))


@dataclass
class SuperBlock:
    """Block 0: disk size in blocks and the table of inode links."""

    num_blocks: int = 0
    inode_indices: list = field(default_factory=lambda: [NO_BLOCK_LINK] * MAX_FILES)
    block_id: int = BlockType.SUPER
    magic: int = MAGIC_NUMBER
    padding: int = 0

    _HEAD: ClassVar[struct.Struct] = struct.Struct("<BBHB")
    SIZE: ClassVar[int] = BLOCK_SIZE

    def pack(self):
        if len(self.inode_indices) > MAX_FILES:
            raise ValueError(f"at most {MAX_FILES} inode links fit in a superblock")
        try:
            head = self._HEAD.pack(self.block_id, self.magic, self.padding, self.num_blocks)
        except struct.error as exc:
            raise ValueError(f"superblock field out of range: {exc}") from exc
        return (head + bytes(self.inode_indices)).ljust(self.SIZE, b"\0")

    @classmethod
    def unpack(cls, data):
        _require(data, cls.SIZE, "superblock")
        block_id, magic, padding, num_blocks = cls._HEAD.unpack_from(data)
        start = cls._HEAD.size
        return cls(
            num_blocks=num_blocks,
            inode_indices=list(data[start:start + MAX_FILES]),
            block_id=block_id,
            magic=magic,
            padding=padding,
        )


@dataclass
class InodeBlock:
    """A file's inode: name, size, first data block, times and permission."""

    file_name: bytes = bytes(MAX_FILE_NAME_LENGTH)
    file_size: int = 0
    next_block: int = NO_BLOCK_LINK
    creation_time: Timestamp = field(default_factory=Timestamp)
    access_time: Timestamp = field(default_factory=Timestamp)
    modification_time: Timestamp = field(default_factory=Timestamp)
    read_mode: int = ReadMode.READ_WRITE
    block_id: int = BlockType.INODE
    magic: int = MAGIC_NUMBER
    padding: int = 0

    _FORMAT: ClassVar[struct.Struct] = struct.Struct(
        f"<BBBB{MAX_FILE_NAME_LENGTH}sI{Timestamp.SIZE}s{Timestamp.SIZE}s{Timestamp.SIZE}sB"
    )
    SIZE: ClassVar[int] = _FORMAT.size

    def pack(self):
        if len(self.file_name) > MAX_FILE_NAME_LENGTH:
            raise ValueError(f"file name longer than {MAX_FILE_NAME_LENGTH} bytes")
        try:
            return self._FORMAT.pack(
                self.block_id,
                self.magic,
                self.next_block,
                self.padding,
                bytes(self.file_name),
                self.file_size,
                self.creation_time.pack(),
                self.access_time.pack(),
                self.modification_time.pack(),
                self.read_mode,
            )
        except struct.error as exc:
            raise ValueError(f"inode field out of range: {exc}") from exc

    @classmethod
    def unpack(cls, data):
        _require(data, cls.SIZE, "inode")
        (block_id, magic, next_block, padding, name, size,
         created, accessed, modified, read_mode) = cls._FORMAT.unpack_from(data)
        return cls(
            file_name=name,
            file_size=size,
            next_block=next_block,
            creation_time=Timestamp.unpack(created),
            access_time=Timestamp.unpack(accessed),
            modification_time=Timestamp.unpack(modified),
            read_mode=read_mode,
            block_id=block_id,
            magic=magic,
            padding=padding,
        )


@dataclass
class ExtentBlock:
    """A data block of a file, linked to the next one; also a whole-block view."""

    next_block: int = NO_BLOCK_LINK
    data: bytes = b""
    block_id: int = BlockType.FILE_EXTENT
    magic: int = MAGIC_NUMBER
    padding: int = 0

    SIZE: ClassVar[int] = BLOCK_SIZE

    def pack(self):
        if len(self.data) > DATA_PER_BLOCK:
            raise ValueError(f"at most {DATA_PER_BLOCK} data bytes fit in a block")
        try:
            head = _HEADER.pack(self.block_id, self.magic, self.next_block, self.padding)
        except struct.error as exc:
            raise ValueError(f"extent header field out of range: {exc}") from exc
        return head + bytes(self.data).ljust(DATA_PER_BLOCK, b"\0")

    @classmethod
    def unpack(cls, data):
        _require(data, cls.SIZE, "extent block")
        header = block_header(data)
        return cls(
            next_block=header.next_block,
            data=bytes(data[HEADER_SIZE:cls.SIZE]),
            block_id=header.block_id,
            magic=header.magic,
            padding=header.padding,
        )