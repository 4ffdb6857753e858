"""Cross-platform low-level file I/O utilities.

Provides ``pread``, ``pwrite``, and ``ftruncate`` that work on all platforms
including Windows where ``os.pread`` / ``os.pwrite`` / ``os.ftruncate`` are
not available, plus :func:`open_fd` for scoped raw descriptors.
"""

import os
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

PathLike = Union[str, "os.PathLike[str]"]

# O_BINARY only exists on Windows; 0 elsewhere keeps the flags portable.
O_BINARY = getattr(os, "O_BINARY", 0)

if sys.platform == "win32":

    def pread(fd: int, length: int, offset: int) -> bytes:
        """Positional read — emulated on Windows via seek + read."""
        os.lseek(fd, offset, os.SEEK_SET)
        return os.read(fd, length)

    def pwrite(fd: int, data: bytes, offset: int) -> int:
        """Positional write — emulated on Windows via seek + write."""
        os.lseek(fd, offset, os.SEEK_SET)
        return os.write(fd, data)

    def ftruncate(fd: int, length: int) -> None:
        """Resize file to *length* bytes — emulated on Windows via _chsize_s."""
        import ctypes

        ucrt = ctypes.cdll.msvcrt
        ret = ucrt._chsize_s(fd, ctypes.c_int64(length))
        if ret != 0:
            raise OSError(f"_chsize_s failed with errno {ret}")

else:
    pread = os.pread
    pwrite = os.pwrite
    ftruncate = os.ftruncate


@contextmanager
def open_fd(path: PathLike, flags: int, mode: int = 0o644) -> Iterator[int]:
    """Open a raw descriptor and close it on every exit path.

    Args:
        path: File to open
        flags: ``os.O_*`` flags; ``O_BINARY`` is added automatically
        mode: Permission bits used when ``O_CREAT`` creates the file

    Yields:
        The open file descriptor
    """
    fd = os.open(str(Path(path)), flags | O_BINARY, mode)
    try:
        yield fd
    finally:
        os.close(fd)


def fd_size(fd: int) -> int:
    """Return the current byte length of an open descriptor."""
    return os.fstat(fd).st_size


def read_exact(fd: int, length: int, offset: int) -> bytes:
    """Read exactly *length* bytes at *offset*, looping over short reads.

    Raises:
        EOFError: If the file ends before *length* bytes were read
    """
    chunks = []
    remaining = length
    while remaining > 0:
        chunk = pread(fd, remaining, offset + (length - remaining))
        if not chunk:
            raise EOFError(f"Expected {length} bytes at offset {offset}, got {length - remaining}")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def write_exact(fd: int, data: bytes, offset: int) -> int:
    """Write all of *data* at *offset*, looping over short writes."""
    view = memoryview(data)
    written = 0
    while written < len(view):
        written += pwrite(fd, view[written:], offset + written)
    return written
