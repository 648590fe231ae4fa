# tinyfs

A tiny file system that lives inside a single ordinary file. The emulated
disk is split into 256-byte blocks: a superblock at block 0, inode blocks
holding a file's name, size, timestamps and read-only flag, and linked
extent blocks holding the data (252 bytes each). A disk holds at most 255
blocks, and file names are stored in at most 8 bytes; longer names are cut
short.

Besides creating, writing, reading, seeking and deleting files, tinyfs can
map how the disk is fragmented, defragment it, list and rename files, mark
files read-only or read-write, overwrite single bytes in place, and report
creation, modification and access times.

No third-party libraries are needed.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Usage

```python
from tinyfs.filesystem import TinyFS, mkfs, print_file_info

mkfs("my.disk", 256 * 30)          # a 30-block disk; size rounded down to whole blocks

with TinyFS() as fs:                # leaving the block unmounts the disk
    fs.mount("my.disk")
    fd = fs.open_file("notes")      # opens, or creates if missing
    fs.write_file(fd, b"hello world")
    fs.seek(fd, 6)
    print(fs.read_byte(fd))         # b'w', and the position moves on by one

    fs.rename(fd, "memo")
    print(fs.readdir())             # ['memo']

    fs.make_read_only("memo")
    print(fs.display_fragments())   # 0 = free, 1 = superblock, 2.. = one number per file
    fs.defrag()                     # gathers the free blocks at the end of the disk

    print_file_info(fs.read_file_info(fd))
```

The main calls of `TinyFS`:

- `mount(path)` / `unmount()` — one disk at a time; unmounting closes every
  open file descriptor.
- `open_file(name)` returns a descriptor, creating the file if it does not
  exist; `close_file(fd)` forgets the descriptor.
- `write_file(fd, data)` replaces the whole file and resets its position;
  `delete_file(fd)` frees its blocks.
- `read_byte(fd)` and `seek(fd, offset)` read byte by byte from any offset
  within the file.
- `write_byte(fd, byte)` overwrites the byte at the current position without
  moving it.
- `make_read_only(name)` / `make_read_write(name)` set the permission stored
  in the inode; writes to a read-only file raise `PermissionDeniedError`.
- `read_file_info(fd)` returns the file's `InodeBlock`;
  `tinyfs.extras.format_file_info` renders it as text and `print_file_info`
  prints it.

Errors are raised as subclasses of `tinyfs.errors.TinyFSError`, each with a
numeric `code`: for example `NoSpaceError` when the disk is full,
`OutOfRangeError` for an offset past the end of a file, `NotFoundError` for a
descriptor that is not open or a disk that cannot be opened,
`AlreadyMountedError` and `NoDeviceError` for mounting mistakes, and
`CorruptError` when a block's magic number, padding or type is wrong.

Lower layers are usable on their own: `tinyfs.disk.Disk` reads and writes
raw blocks of a disk file, `tinyfs.safedisk` adds bounds and header checks,
and `tinyfs.blocks` packs and unpacks the on-disk structures.

## Demonstration

A walk-through that builds a disk, fragments it, defragments it and
exercises every feature, printing the block map as it goes:

```
tinyfs-demo
```

It creates its disk file, `fragD`, in the current directory; another path
can be given as an argument. `--pause SECONDS` (default 3) sets the wait
before renaming, so that the changed timestamps are visible.

## What it does not do

tinyfs is a library working on its own disk files. It does not mount a
disk into the operating system's file tree, has a single flat directory
with no sub-directories, and keeps no journal: an interrupted write can
leave a file half written.