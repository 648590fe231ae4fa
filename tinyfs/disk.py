"""Emulated block device backed by a regular file."""

import os

from .blocks import BLOCK_SIZE
from .errors import DiskIOError


class Disk:
    """A disk file divided into fixed-size blocks."""

    def __init__(self, path, handle, num_blocks):
        self.path = path
        self.num_blocks = num_blocks
        self._handle = handle

    @classmethod
    def create(cls, path, nbytes):
        """Create (or truncate) a disk of ``nbytes`` rounded down to whole blocks."""
        if nbytes < BLOCK_SIZE:
            raise DiskIOError(f"disk must hold at least {BLOCK_SIZE} bytes")
        nbytes -= nbytes % BLOCK_SIZE
        try:
            handle = open(path, "w+b", buffering=0)
        except OSError as exc:
            raise DiskIOError(f"cannot create disk {path}: {exc}") from exc
        try:
            handle.truncate(nbytes)
        except OSError as exc:
            handle.close()
            raise DiskIOError(f"cannot size disk {path}: {exc}") from exc
        return cls(path, handle, nbytes // BLOCK_SIZE)

    @classmethod
    def open(cls, path):
        """Open an existing disk file; its size must be a whole number of blocks."""
        try:
            handle = open(path, "r+b", buffering=0)
        except OSError as exc:
            raise DiskIOError(f"cannot open disk {path}: {exc}") from exc
        try:
            size = handle.seek(0, os.SEEK_END)
        except OSError as exc:
            handle.close()
            raise DiskIOError(f"cannot size disk {path}: {exc}") from exc
        if size % BLOCK_SIZE:
            handle.close()
            raise DiskIOError(f"disk {path} is not a whole number of blocks")
        return cls(path, handle, size // BLOCK_SIZE)

    @property
    def closed(self):
        return self._handle.closed

    def _seek(self, bnum):
        if self.closed:
            raise DiskIOError("disk is not open")
        if not 0 <= bnum < self.num_blocks:
            raise DiskIOError(f"block {bnum} outside disk of {self.num_blocks} blocks")
        try:
            self._handle.seek(bnum * BLOCK_SIZE)
        except OSError as exc:
            raise DiskIOError(f"seek to block {bnum} failed: {exc}") from exc

    def read_block(self, bnum):
        """Return the ``BLOCK_SIZE`` bytes of block ``bnum``."""
        self._seek(bnum)
        try:
            data = self._handle.read(BLOCK_SIZE)
        except OSError as exc:
            raise DiskIOError(f"read of block {bnum} failed: {exc}") from exc
        if data is None or len(data) != BLOCK_SIZE:
            raise DiskIOError(f"short read of block {bnum}")
        return data

    def write_block(self, bnum, data):
        """Write exactly ``BLOCK_SIZE`` bytes to block ``bnum``."""
        data = bytes(data)
        if len(data) != BLOCK_SIZE:
            raise DiskIOError(f"block data must be {BLOCK_SIZE} bytes, got {len(data)}")
        self._seek(bnum)
        try:
            written = self._handle.write(data)
        except OSError as exc:
            raise DiskIOError(f"write of block {bnum} failed: {exc}") from exc
        if written != BLOCK_SIZE:
            raise DiskIOError(f"short write of block {bnum}")

    def close(self):
        if self.closed:
            raise DiskIOError("disk is not open")
        self._handle.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if not self.closed:
            self.close()
        return None