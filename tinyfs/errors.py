"""Exceptions raised by the tinyFS file system, one per error condition."""


class TinyFSError(Exception):
    """Base class for every tinyFS failure; ``code`` is the numeric error code."""

    code = 0
    default_message = "tinyFS error"

    def __init__(self, message=None):
        super().__init__(message if message is not None else self.default_message)


class NoSpaceError(TinyFSError):
    """Not enough space on the disk for the requested operation."""

    code = -1
    default_message = "not enough space on the disk"


class OutOfRangeError(TinyFSError):
    """A byte offset lies outside the bytes stored in the file."""

    code = -2
    default_message = "offset outside the file"


class DiskIOError(TinyFSError):
    """Opening, reading, writing or closing the underlying disk failed."""

    code = -3
    default_message = "disk I/O failure"


class NotFoundError(TinyFSError):
    """A file or disk could not be found."""

    code = -4
    default_message = "file or disk not found"


class AlreadyMountedError(TinyFSError):
    """A file system is already mounted."""

    code = -5
    default_message = "a file system is already mounted"


class NoDeviceError(TinyFSError):
    """No file system is currently mounted."""

    code = -6
    default_message = "no file system is mounted"


class CorruptError(TinyFSError):
    """The file system is in an invalid state, such as a bad magic number."""

    code = -7
    default_message = "file system is corrupt"


class InvalidParameterError(TinyFSError):
    """An invalid argument was passed to the file system API."""

    code = -8
    default_message = "invalid parameter"


class PermissionDeniedError(TinyFSError):
    """A write was attempted on a read-only file."""

    code = -9
    default_message = "permission denied"