import gzip
import os
from enum import StrEnum
from pathlib import PurePath


class BinaryOpenMode(StrEnum):
    READ = "rb"
    WRITE = "wb"


def assert_mkdir(directory: str | PurePath):
    if not os.path.exists(directory):
        os.mkdir(directory)
    elif not os.path.isdir(directory):
        raise OSError(f"Path exists but is not a directory!: {directory}")


def fs_open(
    filename: str | PurePath,
    make_parents=False,
    mode: BinaryOpenMode = BinaryOpenMode.READ,
):
    """
    Opens a file with path `filename`. If `filename` ends in .gz, opens as gzip.

    If `make_parents` is True, creates parent directories if they do not exist.
    """
    filename = str(filename)
    if make_parents:
        for parent in reversed(PurePath(filename).parents):
            assert_mkdir(parent)
    if filename.endswith(".gz"):
        return gzip.open(filename, mode)
    return open(filename, mode=mode)  # pylint: disable=W1514
