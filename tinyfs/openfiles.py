"""Table of files currently open on the mounted file system."""

from dataclasses import dataclass

from .blocks import MAX_FILE_NAME_LENGTH
from .errors import NotFoundError


def _fixed_name(name):
    if isinstance(name, str):
        name = name.encode()
    return bytes(name)[:MAX_FILE_NAME_LENGTH].ljust(MAX_FILE_NAME_LENGTH, b"\0")


@dataclass
class OpenFile:
    """State of one open file: its descriptor, position and cached inode details."""

    fd: int
    name: bytes
    inode_link_index: int
    next_block: int
    file_size: int
    location: int = 0


class OpenFileTable:
    """Open files, newest first; descriptors count up from 1 until reset."""

    def __init__(self):
        self._files = []
        self._next_fd = 1

    def add(self, file_size, name, inode_link_index, next_block):
        """Record a newly opened file and return its descriptor."""
        entry = OpenFile(
            fd=self._next_fd,
            name=_fixed_name(name),
            inode_link_index=inode_link_index,
            next_block=next_block,
            file_size=file_size,
        )
        self._next_fd += 1
        self._files.append(entry)
        return entry.fd

    def find_by_name(self, name):
        """Return the most recently opened file with this name, or None."""
        key = _fixed_name(name)
        return next((f for f in reversed(self._files) if f.name == key), None)

    def find_by_fd(self, fd):
        """Return the open file with descriptor ``fd``, or None."""
        return next((f for f in reversed(self._files) if f.fd == fd), None)

    def remove(self, fd):
        """Forget the file with descriptor ``fd``; NotFoundError if it is not open."""
        for position, entry in enumerate(self._files):
            if entry.fd == fd:
                del self._files[position]
                return
        raise NotFoundError(f"file descriptor {fd} is not open")

    def reset(self):
        """Drop every open file and restart descriptors at 1."""
        self._files.clear()
        self._next_fd = 1

    def __len__(self):
        return len(self._files)

    def __iter__(self):
        return reversed(self._files)