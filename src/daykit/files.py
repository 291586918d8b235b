"""
String File Store and Folder Listing
====================================
Persists a list of strings to a binary file and reads it back, and lists
every file under a folder.

File layout: a 4-byte big-endian count, then for each string a 2-byte
big-endian byte length and the modified UTF-8 bytes (DataOutput.writeUTF).
"""

import logging
import os
import struct
from collections import deque
from pathlib import Path
from typing import BinaryIO, Iterable, List, Union

from . import mutf8
from .config import MAX_ENCODED_STRING_LENGTH

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

COUNT = struct.Struct(">i")
LENGTH = struct.Struct(">H")


class StringFileError(IOError):
    """Raised when a string file is truncated, malformed or cannot hold a string."""


# ============================================================================
# STRING FILES
# ============================================================================

def write_strings(strings: Iterable[str], path: PathLike) -> None:
    """
    Write all strings into the file at path, replacing its contents

    First writes the number of strings as an int, followed by each string in
    writeUTF form. The file is meant to be read back with read_strings().

    Args:
        strings: The strings to write, in order
        path: Path of the file to write

    Raises:
        TypeError: If an item is not a str
        StringFileError: If a string encodes to more than 65535 bytes
        OSError: If the file cannot be written
    """
    strings = list(strings)

    with open(path, "wb") as stream:
        stream.write(COUNT.pack(len(strings)))

        for index, string in enumerate(strings):
            if not isinstance(string, str):
                raise TypeError(f"Item {index} is {type(string).__name__}, not str")

            length = mutf8.encoded_length(string)
            if length > MAX_ENCODED_STRING_LENGTH:
                raise StringFileError(
                    f"String {index} encodes to {length:,} bytes, limit is {MAX_ENCODED_STRING_LENGTH:,}"
                )
            stream.write(LENGTH.pack(length))
            stream.write(mutf8.encode(string))

    logger.debug("Wrote %d strings to %s", len(strings), path)


def _read_exactly(stream: BinaryIO, size: int, path: PathLike, what: str) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise StringFileError(f"{path}: unexpected end of file while reading {what}")
    return data


def read_strings(path: PathLike) -> List[str]:
    """
    Read the strings previously written to path by write_strings()

    Args:
        path: Path of the file to read

    Returns:
        The strings in their original order

    Raises:
        FileNotFoundError: If the file does not exist
        StringFileError: If the file is truncated, malformed, or holds more
            data than its declared count
        OSError: If the file cannot be read
    """
    with open(path, "rb") as stream:
        (size,) = COUNT.unpack(_read_exactly(stream, COUNT.size, path, "string count"))
        if size < 0:
            raise StringFileError(f"{path}: negative string count {size}")

        strings = []
        for index in range(size):
            (length,) = LENGTH.unpack(_read_exactly(stream, LENGTH.size, path, f"length of string {index}"))
            data = _read_exactly(stream, length, path, f"string {index}")
            try:
                strings.append(mutf8.decode(data))
            except mutf8.MalformedInput as e:
                raise StringFileError(f"{path}: string {index} is malformed: {e}") from e

        if stream.read(1):
            raise StringFileError(f"{path}: data found after the declared {size} strings")

    logger.debug("Read %d strings from %s", len(strings), path)
    return strings


# ============================================================================
# FOLDER LISTING
# ============================================================================

def list_files_recursive(folder_path: PathLike) -> List[Path]:
    """
    List the files under a folder and all of its subfolders

    Folders are walked breadth-first with a queue; folders themselves are not
    part of the result. Symlinked folders are followed, and link cycles are
    not detected.

    Args:
        folder_path: The folder to read

    Returns:
        Paths in order of discovery, or an empty list if folder_path is not
        an existing folder
    """
    # Path("") would mean the current folder
    if os.fspath(folder_path) == "":
        return []

    directory = Path(folder_path)

    if not directory.is_dir():
        logger.debug("Not a folder, nothing to list: %s", directory)
        return []

    files = []
    pending = deque(directory.iterdir())

    while pending:
        path = pending.popleft()

        if path.is_dir():
            pending.extend(path.iterdir())
            continue

        files.append(path)

    logger.debug("Found %d files under %s", len(files), directory)
    return files
