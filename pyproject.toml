[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tinyfs"
version = "0.1.0"
description = "A tiny block-based file system stored inside an ordinary file"
requires-python = ">=3.10"
dependencies = []
keywords = ["filesystem", "disk", "emulation", "blocks", "defragmentation"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
tinyfs-demo = "tinyfs.demo:main"

[tool.hatch.build.targets.wheel]
packages = ["tinyfs"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
