"""recordfs - fixed-size record files and small console helpers."""

__version__ = "0.1.0"

from recordfs.common.errors import RecordFSError, UnalignedFileError  # noqa: E402
from recordfs.common.records import StructRecord  # noqa: E402
from recordfs.files import (  # noqa: E402
    append,
    append_records,
    count_records,
    delete_all,
    describe,
    get_size,
    read_all,
    read_all_chars,
    read_at,
    read_first_or_default,
    read_last_or_default,
    set_size,
    write_all,
    write_first,
)

__all__ = [
    "RecordFSError",
    "StructRecord",
    "UnalignedFileError",
    "__version__",
    "append",
    "append_records",
    "count_records",
    "delete_all",
    "describe",
    "get_size",
    "read_all",
    "read_all_chars",
    "read_at",
    "read_first_or_default",
    "read_last_or_default",
    "set_size",
    "write_all",
    "write_first",
]
