"""Fixed-size record file access.

Every function takes a path, opens the file, performs a single read,
write, seek or resize and closes the handle before returning.  The only
exception is :func:`append`, whose handle is owned by the caller.

Record files are headerless: their length must be an exact multiple of
the record size, and that is checked before any offset read.
"""

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, BinaryIO, Iterable, Iterator, Optional

from recordfs.common.constants import DEFAULT_SEARCH_PATTERN
from recordfs.common.errors import UnalignedFileError
from recordfs.common.fileutil import PathLike, fd_size, ftruncate, open_fd, read_exact, write_exact
from recordfs.common.models import RecordFileInfo
from recordfs.common.records import RecordLayout, decode_many, encode_many
from recordfs.config import load_settings

logger = logging.getLogger("recordfs.files")


def read_all_chars(path: PathLike, encoding: Optional[str] = None) -> list[str]:
    """Read the whole text file and return it as a list of characters.

    Line endings are kept as stored. When *encoding* is omitted the
    configured ``encoding`` setting is used; its default, ``utf-8-sig``,
    drops a leading byte-order mark.
    """
    if encoding is None:
        encoding = load_settings().encoding
    with open(path, "r", encoding=encoding, newline="") as f:
        return list(f.read())


def read_all(path: PathLike, layout: RecordLayout) -> list:
    """Read every record in the file, in file order.

    Raises:
        FileNotFoundError: If *path* does not exist
        UnalignedFileError: If the file ends with a partial record
    """
    with open(path, "rb") as f:
        data = f.read()
    try:
        return decode_many(layout, data)
    except UnalignedFileError as e:
        e.path = str(path)
        raise


def write_all(path: PathLike, layout: RecordLayout, values: Iterable[Any]) -> None:
    """Replace the file content with the encoded *values*."""
    with open(path, "wb") as f:
        f.write(encode_many(layout, values))


@contextmanager
def _open_validated(path: PathLike, element_size: int) -> Iterator[Optional[int]]:
    """Validate alignment and yield a read-only descriptor.

    Yields ``None`` when the file is missing or empty.

    Raises:
        UnalignedFileError: If the file length is not a multiple of *element_size*
    """
    if not os.path.isfile(path):
        yield None
        return
    file_size = get_size(path)
    if file_size % element_size != 0:
        logger.debug("%s: size %d is not a multiple of %d", path, file_size, element_size)
        raise UnalignedFileError(element_size, path=str(path), file_size=file_size)
    if file_size == 0:
        yield None
        return
    with open_fd(path, os.O_RDONLY) as fd:
        yield fd


def _read_record(fd: int, layout: RecordLayout, index: int) -> Any:
    return layout.decode(read_exact(fd, layout.size, index * layout.size))


def read_first_or_default(path: PathLike, layout: RecordLayout) -> Any:
    """Return the first record, or the layout's zero value for a missing or empty file."""
    with _open_validated(path, layout.size) as fd:
        if fd is None:
            return layout.default()
        return _read_record(fd, layout, 0)


def read_last_or_default(path: PathLike, layout: RecordLayout) -> Any:
    """Return the last record, or the layout's zero value for a missing or empty file."""
    with _open_validated(path, layout.size) as fd:
        if fd is None:
            return layout.default()
        total_records = fd_size(fd) // layout.size
        return _read_record(fd, layout, total_records - 1)


def read_at(path: PathLike, layout: RecordLayout, index: int) -> Any:
    """Return the record at *index*; negative indexes count from the end.

    Raises:
        IndexError: If *index* is outside the file's records
        UnalignedFileError: If the file length is not a multiple of the record size
    """
    with _open_validated(path, layout.size) as fd:
        total_records = 0 if fd is None else fd_size(fd) // layout.size
        position = index + total_records if index < 0 else index
        if fd is None or not 0 <= position < total_records:
            raise IndexError(f"Record index {index} out of range for {total_records} records in {path}")
        return _read_record(fd, layout, position)


def count_records(path: PathLike, layout: RecordLayout) -> int:
    """Return the number of records, 0 for a missing file.

    Raises:
        UnalignedFileError: If the file length is not a multiple of the record size
    """
    size = get_size(path)
    if size % layout.size != 0:
        raise UnalignedFileError(layout.size, path=str(path), file_size=size)
    return size // layout.size


def write_first(path: PathLike, layout: RecordLayout, value: Any) -> None:
    """Overwrite the first record, creating the file if needed.

    Bytes after the first record are left untouched.
    """
    data = layout.encode(value)
    with open_fd(path, os.O_WRONLY | os.O_CREAT) as fd:
        write_exact(fd, data, 0)


def append(path: PathLike) -> BinaryIO:
    """Open *path* for appending, creating it if absent.

    The caller owns the returned handle and must close it, typically
    with a ``with`` block.
    """
    return open(path, "ab")


def append_records(path: PathLike, layout: RecordLayout, values: Iterable[Any]) -> int:
    """Append encoded *values* to the file and return how many were written."""
    count = 0
    with append(path) as f:
        for value in values:
            f.write(layout.encode(value))
            count += 1
    return count


def get_size(path: PathLike) -> int:
    """Return the file size in bytes, or 0 if the file does not exist."""
    if not os.path.isfile(path):
        return 0
    return os.path.getsize(path)


def set_size(path: PathLike, size: int) -> None:
    """Truncate or zero-extend the file to exactly *size* bytes.

    The file is created if missing.  Nothing is written when it already
    has the requested size.
    """
    if size < 0:
        raise ValueError(f"File size must be non-negative, got {size}")
    with open_fd(path, os.O_RDWR | os.O_CREAT) as fd:
        current = fd_size(fd)
        if current != size:
            logger.debug("Resizing %s from %d to %d bytes", path, current, size)
            ftruncate(fd, size)


def delete_all(
    directory: PathLike,
    search_pattern: str = DEFAULT_SEARCH_PATTERN,
    recurse_subdirectories: bool = False,
) -> int:
    """Delete every file in *directory* whose name matches *search_pattern*.

    Subdirectories are only searched when *recurse_subdirectories* is set;
    directories themselves are never removed.

    Returns:
        Number of files deleted

    Raises:
        FileNotFoundError: If *directory* does not exist
        NotADirectoryError: If *directory* is not a directory
    """
    root = Path(directory)
    if not root.exists():
        raise FileNotFoundError(f"Directory not found: {directory}")
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")

    matches = root.rglob(search_pattern) if recurse_subdirectories else root.glob(search_pattern)
    # Materialise before deleting so removal does not disturb the directory scan.
    files = [p for p in matches if p.is_file()]
    for file_path in files:
        file_path.unlink()
        logger.debug("Deleted %s", file_path)
    return len(files)


def describe(path: PathLike, layout: RecordLayout) -> RecordFileInfo:
    """Summarise a record file without raising on misalignment."""
    return RecordFileInfo(
        path=str(path),
        exists=os.path.isfile(path),
        size=get_size(path),
        record_size=layout.size,
    )
