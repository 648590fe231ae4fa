"""Walk-through of the tinyFS features on a small demonstration disk."""

import argparse
import time

from .blocks import BLOCK_SIZE
from .errors import TinyFSError
from .filesystem import TinyFS, mkfs, print_file_info

ALPHABET = "abcdefghijklmnopqrstuvwxyz"
AB = "AB"
NUMBERS = "123456789"
NAME_SOURCE = "abcdefghijklmnopqrstuvwxyz123456789"


def fill_block(text, size):
    """Return ``size`` bytes made of ``text`` repeated, the last copy cut short."""
    if isinstance(text, str):
        text = text.encode()
    if size < 0:
        raise ValueError("size must not be negative")
    if size and not text:
        raise ValueError("cannot fill a block from empty text")
    repeats = -(-size // len(text)) if size else 0
    return (text * repeats)[:size]


def print_fragments(fs):
    """Print the fragment map of the mounted disk and return it, or None on error."""
    print("fragMap:")
    try:
        fragments = fs.display_fragments()
    except TinyFSError as exc:
        print(f"display Err: {exc.code}", end="")
        return None
    print("".join(f" {owner} " for owner in fragments))
    return fragments


def _code(action, *args):
    """Run ``action`` and return 0, or the error code it raised."""
    try:
        action(*args)
    except TinyFSError as exc:
        return exc.code
    return 0


def _read_bytes(fs, fd, count):
    data = bytearray()
    for index in range(count):
        try:
            data += fs.read_byte(fd)
        except TinyFSError as exc:
            print(f"Read failed at byte {index} with err {exc.code}")
            break
    return bytes(data)


def _as_text(data):
    return data.split(b"\0", 1)[0].decode("latin-1")


def _show_info(fs, fd):
    try:
        print_file_info(fs.read_file_info(fd))
    except TinyFSError as exc:
        print(f"file info error: {exc.code}")


def _print_dir(fs):
    try:
        names = fs.readdir()
    except TinyFSError as exc:
        print(f"readdir error: {exc.code}")
        return
    print("Home Directory")
    for name in names:
        print(name)


def _parse_args(argv):
    parser = argparse.ArgumentParser(
        prog="tinyfs-demo", description="Exercise a tinyFS disk and print what happens."
    )
    parser.add_argument("disk", nargs="?", default="fragD", help="disk file to create")
    parser.add_argument(
        "--pause", type=float, default=3.0,
        help="seconds to wait before changes that update timestamps",
    )
    return parser.parse_args(argv)


def main(argv=None):
    args = _parse_args(argv)
    try:
        return _run(args.disk, args.pause)
    except TinyFSError as exc:
        print(f"tinyFS error {exc.code}: {exc}")
        return 1


def _run(disk_path, pause):
    alphabet_long = fill_block(ALPHABET, BLOCK_SIZE * 11)
    num_short = fill_block(NUMBERS, BLOCK_SIZE)
    num_long = fill_block(NUMBERS, BLOCK_SIZE * 3)
    ab_short = fill_block(AB, BLOCK_SIZE)

    mkfs(disk_path, BLOCK_SIZE * 30)
    fs = TinyFS()
    fs.mount(disk_path)
    print("starting directory is empty")
    print_fragments(fs)

    print("\nadd two files, then write to them to cause some fragmentation")
    ab_fd = fs.open_file("ABShort")
    num_fd = fs.open_file("numShort")
    fs.write_file(ab_fd, ab_short)
    fs.write_file(num_fd, num_short)
    fs.delete_file(ab_fd)
    print("should now have: super 0 numS_Inode 0 0 numS numS 0 ...")
    print_fragments(fs)

    print("\nadd a larger file causing fragmentation before, in between, and after file 2")
    alpha_fd = fs.open_file("AlphLong")
    fs.write_file(alpha_fd, alphabet_long[:BLOCK_SIZE * 3])
    print_fragments(fs)
    print("\nremove the large file, then add small AB files until the disk is full")
    fs.delete_file(alpha_fd)

    spammed = []
    for start in range(len(NAME_SOURCE)):
        try:
            fd = fs.open_file(NAME_SOURCE[start:])
        except TinyFSError as exc:
            spammed.append(exc.code)
            break
        spammed.append(fd)
        if _code(fs.write_file, fd, ab_short):
            break
    print_fragments(fs)

    print("\nclose two of the AB files, re-open them, and read their first 5 bytes")
    fs.close_file(spammed[3])
    fs.close_file(spammed[0])
    spammed[3] = fs.open_file(NAME_SOURCE[3:])
    spammed[0] = fs.open_file(NAME_SOURCE)
    first = bytearray()
    fourth = bytearray()
    for _ in range(5):
        first += fs.read_byte(spammed[0])
        fourth += fs.read_byte(spammed[3])
    print(f"the resulting bytes we read are: {_as_text(bytes(first))} and {_as_text(bytes(fourth))}")

    print("\nremove every other AB file and write one long file in their place")
    for fd in spammed[::2]:
        if _code(fs.delete_file, fd):
            print("error")
            return 1
    alpha_fd = fs.open_file("AlphLong")
    fs.write_file(alpha_fd, alphabet_long)
    print_fragments(fs)

    print("\nunmount, remount, and read the long file back byte by byte")
    fs.unmount()
    fs.mount(disk_path)
    alpha_fd = fs.open_file("AlphLong")
    content = _read_bytes(fs, alpha_fd, BLOCK_SIZE * 11)
    print(f"file contents:\n\n{_as_text(content)}\n")

    fs.seek(alpha_fd, 5)
    byte = fs.read_byte(alpha_fd)
    print(f"byte at index 5: {byte.decode('latin-1')}")

    print("\ncurrent file system:")
    print_fragments(fs)
    print("\ndeleting files whose descriptors were lost by the remount:")
    for index in (1, 5):
        err = _code(fs.delete_file, spammed[index])
        if err:
            print(f"err{err}")
    print("re-open them and delete them again:")
    spammed[1] = fs.open_file(NAME_SOURCE[1:])
    spammed[5] = fs.open_file(NAME_SOURCE[5:])
    for index in (1, 5):
        err = _code(fs.delete_file, spammed[index])
        if err:
            print(f"err{err}")
    print("here is our new FS:")
    print_fragments(fs)
    print("\ndefragmentation yields:")
    fs.defrag()
    print_fragments(fs)

    print("\ndirectory listing:")
    _print_dir(fs)
    num_fd = fs.open_file("numShort")
    spammed[3] = fs.open_file(NAME_SOURCE[3:])
    spammed[7] = fs.open_file(NAME_SOURCE[7:])
    for fd in (alpha_fd, num_fd, spammed[3], spammed[7]):
        _show_info(fs, fd)

    if pause > 0:
        time.sleep(pause)
    print("add a file named \"mochi\", and rename two files to \"philip\" and \"nico\"")
    mochi_fd = fs.open_file("mochi")
    err = _code(fs.rename, spammed[3], "philip")
    if err:
        print(f"err: {err}")
    _code(fs.rename, spammed[7], "nico")
    _print_dir(fs)

    fs.read_byte(alpha_fd)
    fs.read_byte(num_fd)
    for fd in (alpha_fd, num_fd, spammed[3], spammed[7], mochi_fd):
        _show_info(fs, fd)

    print("\nmake nico read only, then try to write both philip and nico")
    if _code(fs.make_read_only, "nico"):
        print("error making nico RO\n")
    print("*changed Nico to RO")
    print(f"errW?: {_code(fs.write_file, spammed[3], num_long)}")
    print(f"errW?: {_code(fs.write_file, spammed[7], num_long)}")
    _code(fs.seek, spammed[3], BLOCK_SIZE * 3 - 5)
    _code(fs.seek, spammed[7], BLOCK_SIZE * 3 - 5)
    print(f"errW?: {_code(fs.write_byte, spammed[3], 'A')}")
    print(f"errW?: {_code(fs.write_byte, spammed[7], 'A')}")
    _code(fs.seek, spammed[3], 0)
    _code(fs.seek, spammed[7], 0)

    print("reading nico, which was read only")
    nico = _read_bytes(fs, spammed[7], BLOCK_SIZE * 3)
    print(f"Nico reads: \n{_as_text(nico)}")
    print("reading philip")
    philip = _read_bytes(fs, spammed[3], BLOCK_SIZE * 3)
    print(f"Philip reads: \n{_as_text(philip)}")

    fs.unmount()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())