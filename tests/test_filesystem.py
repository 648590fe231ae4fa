import pytest

from tinyfs.blocks import BLOCK_SIZE, MAX_BLOCK_COUNT, BlockType, ReadMode
from tinyfs.errors import (
    AlreadyMountedError,
    InvalidParameterError,
    NoDeviceError,
    NoSpaceError,
    NotFoundError,
    OutOfRangeError,
    PermissionDeniedError,
)
from tinyfs.filesystem import TinyFS, mkfs, print_file_info

ALPHABET = b"abcdefghijklmnopqrstuvwxyz"
NUMBERS = b"123456789"


def fill(text, size):
    return (text * (size // len(text) + 1))[:size]


def read_all(fs, fd, count):
    return b"".join(fs.read_byte(fd) for _ in range(count))


@pytest.fixture
def disk_path(tmp_path):
    path = tmp_path / "test.disk"
    mkfs(str(path), BLOCK_SIZE * 30)
    return str(path)


@pytest.fixture
def fs(disk_path):
    filesystem = TinyFS()
    filesystem.mount(disk_path)
    yield filesystem
    filesystem.unmount()


def test_new_disk_is_empty(fs):
    fragments = fs.display_fragments()
    assert len(fragments) == 30
    assert fragments[0] == BlockType.SUPER
    assert set(fragments[1:]) == {0}
    assert fs.readdir() == []


def test_mkfs_too_small(tmp_path):
    with pytest.raises(NoSpaceError):
        mkfs(str(tmp_path / "d"), BLOCK_SIZE - 1)


def test_mkfs_too_large(tmp_path):
    with pytest.raises(NoSpaceError):
        mkfs(str(tmp_path / "d"), BLOCK_SIZE * (MAX_BLOCK_COUNT + 1))


def test_mount_twice(fs, disk_path):
    with pytest.raises(AlreadyMountedError):
        fs.mount(disk_path)


def test_mount_missing(tmp_path):
    with pytest.raises(NotFoundError):
        TinyFS().mount(str(tmp_path / "missing.disk"))


@pytest.mark.parametrize(
    "call",
    [
        lambda f: f.open_file("a"),
        lambda f: f.close_file(1),
        lambda f: f.write_file(1, b"x"),
        lambda f: f.delete_file(1),
        lambda f: f.read_byte(1),
        lambda f: f.seek(1, 0),
        lambda f: f.display_fragments(),
        lambda f: f.defrag(),
        lambda f: f.readdir(),
        lambda f: f.make_read_only("a"),
    ],
)
def test_unmounted_calls(call):
    with pytest.raises(NoDeviceError):
        call(TinyFS())


def test_open_none(fs):
    with pytest.raises(InvalidParameterError):
        fs.open_file(None)


def test_open_same_name_gives_same_fd(fs):
    first = fs.open_file("ABShort")
    other = fs.open_file("numShort")
    assert first == 1
    assert fs.open_file("ABShort") == first
    assert other != first
    assert fs.readdir() == ["ABShort", "numShort"]


def test_write_read_round_trip(fs):
    data = fill(ALPHABET, BLOCK_SIZE * 3)
    fd = fs.open_file("AlphLong")
    fs.write_file(fd, data)
    assert read_all(fs, fd, len(data)) == data
    assert fs.read_file_info(fd).file_size == len(data)


def test_data_persists_across_mounts(fs, disk_path):
    data = fill(NUMBERS, BLOCK_SIZE * 2)
    fd = fs.open_file("numLong")
    fs.write_file(fd, data)
    fs.unmount()
    fs.mount(disk_path)
    fd = fs.open_file("numLong")
    assert read_all(fs, fd, len(data)) == data


def test_seek_and_read(fs):
    data = fill(ALPHABET, BLOCK_SIZE * 2)
    fd = fs.open_file("f")
    fs.write_file(fd, data)
    fs.seek(fd, 5)
    assert fs.read_byte(fd) == data[5:6]
    fs.seek(fd, BLOCK_SIZE + 7)
    assert fs.read_byte(fd) == data[BLOCK_SIZE + 7:BLOCK_SIZE + 8]


@pytest.mark.parametrize("offset", [-1, BLOCK_SIZE + 1])
def test_seek_out_of_range(fs, offset):
    fd = fs.open_file("f")
    fs.write_file(fd, fill(AB := b"AB", BLOCK_SIZE))
    with pytest.raises(OutOfRangeError):
        fs.seek(fd, offset)


def test_read_past_end(fs):
    fd = fs.open_file("nico")
    fs.write_file(fd, fill(b"AB", BLOCK_SIZE))
    fs.seek(fd, BLOCK_SIZE)
    assert fs.read_byte(fd) == b"\0"
    with pytest.raises(OutOfRangeError):
        fs.read_byte(fd)


def test_fragmentation_example(fs):
    ab = fs.open_file("ABShort")
    num = fs.open_file("numShort")
    fs.write_file(ab, fill(b"AB", BLOCK_SIZE))
    fs.write_file(num, fill(NUMBERS, BLOCK_SIZE))
    fs.delete_file(ab)
    assert fs.display_fragments()[:7] == [1, 0, 2, 0, 0, 2, 2]
    assert fs.readdir() == ["numShort"]


def test_delete_unknown_fd(fs):
    with pytest.raises(NotFoundError):
        fs.delete_file(42)


def test_close_file(fs):
    fd = fs.open_file("f")
    fs.close_file(fd)
    with pytest.raises(NotFoundError):
        fs.read_byte(fd)
    with pytest.raises(NotFoundError):
        fs.close_file(fd)


def test_fill_disk_raises_no_space(tmp_path):
    path = str(tmp_path / "small.disk")
    mkfs(path, BLOCK_SIZE * 10)
    with TinyFS() as fs:
        fs.mount(path)
        with pytest.raises(NoSpaceError):
            for name in "abcdefghijklmnopqrst":
                fd = fs.open_file(name)
                fs.write_file(fd, fill(b"AB", BLOCK_SIZE))


def test_defrag_compacts_and_keeps_data(fs):
    a = fs.open_file("a")
    b = fs.open_file("b")
    fs.write_file(a, fill(b"AB", BLOCK_SIZE))
    fs.write_file(b, fill(NUMBERS, BLOCK_SIZE))
    fs.delete_file(a)
    data = fill(ALPHABET, BLOCK_SIZE * 3)
    c = fs.open_file("c")
    fs.write_file(c, data)
    fs.delete_file(b)
    before = fs.display_fragments()
    fs.close_file(c)
    fs.defrag()
    after = fs.display_fragments()
    used = sum(1 for v in after if v)
    assert used == sum(1 for v in before if v)
    assert all(after[:used]) and not any(after[used:])
    c = fs.open_file("c")
    assert read_all(fs, c, len(data)) == data


def test_rename(fs):
    fd = fs.open_file("old")
    fs.rename(fd, "philip")
    assert fs.readdir() == ["philip"]
    assert fs.open_file("philip") == fd
    assert fs.read_file_info(fd).file_name.rstrip(b"\0") == b"philip"


def test_read_only_blocks_writes(fs):
    fd = fs.open_file("nico")
    original = fill(b"AB", BLOCK_SIZE)
    fs.write_file(fd, original)
    fs.make_read_only("nico")
    assert fs.read_file_info(fd).read_mode == ReadMode.READ_ONLY
    with pytest.raises(PermissionDeniedError):
        fs.write_file(fd, fill(NUMBERS, BLOCK_SIZE * 3))
    with pytest.raises(PermissionDeniedError):
        fs.write_byte(fd, b"A")
    fs.seek(fd, 0)
    assert read_all(fs, fd, len(original)) == original
    fs.make_read_write("nico")
    fs.write_file(fd, b"xyz")
    fs.seek(fd, 0)
    assert read_all(fs, fd, 3) == b"xyz"


def test_make_read_only_of_closed_file(fs):
    fd = fs.open_file("mochi")
    fs.close_file(fd)
    fs.make_read_only("mochi")
    fd = fs.open_file("mochi")
    assert fs.read_file_info(fd).read_mode == ReadMode.READ_ONLY


def test_make_read_only_missing(fs):
    with pytest.raises(NotFoundError):
        fs.make_read_only("ghost")


def test_write_byte(fs):
    data = fill(NUMBERS, BLOCK_SIZE * 3)
    fd = fs.open_file("philip")
    fs.write_file(fd, data)
    position = BLOCK_SIZE * 3 - 5
    fs.seek(fd, position)
    fs.write_byte(fd, b"A")
    fs.seek(fd, 0)
    expected = data[:position] + b"A" + data[position + 1:]
    assert read_all(fs, fd, len(data)) == expected


def test_print_file_info(fs, capsys):
    fd = fs.open_file("mochi")
    fs.write_file(fd, b"hello")
    print_file_info(fs.read_file_info(fd))
    out = capsys.readouterr().out
    assert "fileName: mochi, size: 5" in out
    assert "readStatus= read and write" in out


def test_context_manager_unmounts(disk_path):
    with TinyFS() as fs:
        fs.mount(disk_path)
        fs.open_file("a")
    with pytest.raises(NoDeviceError):
        fs.open_file("a")