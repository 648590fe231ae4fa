"""A tiny block-based file system stored inside an ordinary file."""

__version__ = "0.1.0"
__all__ = [
    "blocks",
    "demo",
    "disk",
    "errors",
    "extras",
    "filesystem",
    "helpers",
    "openfiles",
    "safedisk",
]