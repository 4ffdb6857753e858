"""Exceptions raised by recordfs."""

from typing import Optional


class RecordFSError(Exception):
    """Base error for record file operations."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        self.message = message
        self.path = path
        super().__init__(message)


class UnalignedFileError(RecordFSError, ValueError):
    """A record file's length is not a multiple of the record size."""

    def __init__(self, element_size: int, path: Optional[str] = None, file_size: Optional[int] = None) -> None:
        self.element_size = element_size
        self.file_size = file_size
        super().__init__(f"File is not aligned to elements with size {element_size}.", path=path)
