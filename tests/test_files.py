#!/usr/bin/env python3
"""
Unit tests — fixed-size record file access.

Run:
    python -m pytest tests/test_files.py -v
"""

import struct
import sys
from collections import namedtuple
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from recordfs import config as config_mod  # noqa: E402
from recordfs import files  # noqa: E402
from recordfs.common.errors import RecordFSError, UnalignedFileError  # noqa: E402
from recordfs.common.records import INT32, INT64, StructRecord  # noqa: E402

Point = namedtuple("Point", ["x", "y", "weight"])
POINT = StructRecord("<iid", factory=Point)


def _write_int64(path: Path, *values: int) -> None:
    path.write_bytes(b"".join(struct.pack("<q", v) for v in values))


# ── read_all / write_all ──────────────────────────────────────


def test_read_all_round_trip_scalars(tmp_path):
    path = tmp_path / "ints.bin"
    values = [0, 1, -1, 2**62, -(2**63)]
    files.write_all(path, INT64, values)
    assert files.read_all(path, INT64) == values
    assert files.get_size(path) == len(values) * 8


def test_read_all_round_trip_structs(tmp_path):
    path = tmp_path / "points.bin"
    points = [Point(1, 2, 0.5), Point(-3, 4, 1.25), Point(0, 0, -2.0)]
    files.write_all(path, POINT, points)
    assert files.read_all(path, POINT) == points


def test_read_all_empty_file(tmp_path):
    path = tmp_path / "empty.bin"
    path.write_bytes(b"")
    assert files.read_all(path, INT64) == []


def test_read_all_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        files.read_all(tmp_path / "missing.bin", INT64)


def test_read_all_partial_record(tmp_path):
    path = tmp_path / "partial.bin"
    path.write_bytes(bytes(8 * 2 + 3))
    with pytest.raises(UnalignedFileError) as exc_info:
        files.read_all(path, INT64)
    assert exc_info.value.element_size == 8
    assert exc_info.value.path == str(path)


def test_write_all_truncates_previous_content(tmp_path):
    path = tmp_path / "ints.bin"
    files.write_all(path, INT64, [1, 2, 3])
    files.write_all(path, INT64, [9])
    assert files.read_all(path, INT64) == [9]


# ── read_all_chars ────────────────────────────────────────────


@pytest.fixture
def default_settings(monkeypatch, tmp_path):
    """Keep user config files and RECORDFS_* variables out of settings lookups."""
    monkeypatch.delenv("RECORDFS_CONFIG", raising=False)
    monkeypatch.delenv("RECORDFS_ENCODING", raising=False)
    monkeypatch.setattr(config_mod, "_CONFIG_SEARCH_PATHS", [])
    monkeypatch.chdir(tmp_path)


def test_read_all_chars(tmp_path, default_settings):
    path = tmp_path / "text.txt"
    path.write_bytes("héllo\n".encode("utf-8"))
    assert files.read_all_chars(path) == ["h", "é", "l", "l", "o", "\n"]


def test_read_all_chars_keeps_crlf(tmp_path, default_settings):
    path = tmp_path / "text.txt"
    path.write_bytes(b"a\r\nb\rc")
    assert files.read_all_chars(path) == ["a", "\r", "\n", "b", "\r", "c"]


def test_read_all_chars_strips_utf8_bom(tmp_path, default_settings):
    path = tmp_path / "text.txt"
    path.write_bytes(b"\xef\xbb\xbfhi")
    assert files.read_all_chars(path) == ["h", "i"]


def test_read_all_chars_encoding(tmp_path, default_settings):
    path = tmp_path / "text.txt"
    path.write_bytes("ñ".encode("latin-1"))
    assert files.read_all_chars(path, encoding="latin-1") == ["ñ"]


def test_read_all_chars_encoding_from_env(tmp_path, default_settings, monkeypatch):
    path = tmp_path / "text.txt"
    path.write_bytes("ñ".encode("latin-1"))
    monkeypatch.setenv("RECORDFS_ENCODING", "latin-1")
    assert files.read_all_chars(path) == ["ñ"]


def test_read_all_chars_encoding_from_config_file(tmp_path, default_settings, monkeypatch):
    path = tmp_path / "text.txt"
    path.write_bytes("ñ".encode("latin-1"))
    cfg = tmp_path / "recordfs.yaml"
    cfg.write_text("files:\n  encoding: latin-1\n")
    monkeypatch.setenv("RECORDFS_CONFIG", str(cfg))
    assert files.read_all_chars(path) == ["ñ"]


def test_read_all_chars_missing_file(tmp_path, default_settings):
    with pytest.raises(FileNotFoundError):
        files.read_all_chars(tmp_path / "missing.txt")


# ── read_first_or_default / read_last_or_default ──────────────


def test_first_missing_file_returns_default(tmp_path):
    path = tmp_path / "missing.bin"
    assert files.read_first_or_default(path, INT64) == 0
    assert files.read_first_or_default(path, POINT) == Point(0, 0, 0.0)
    assert files.get_size(path) == 0
    assert not path.exists()


def test_last_missing_file_returns_default(tmp_path):
    assert files.read_last_or_default(tmp_path / "missing.bin", INT64) == 0


def test_first_and_last_empty_file_return_default(tmp_path):
    path = tmp_path / "empty.bin"
    path.write_bytes(b"")
    assert files.read_first_or_default(path, INT64) == 0
    assert files.read_last_or_default(path, POINT) == Point(0, 0, 0.0)


def test_first_and_last(tmp_path):
    path = tmp_path / "ints.bin"
    _write_int64(path, 10, 20, 30)
    assert files.read_first_or_default(path, INT64) == 10
    assert files.read_last_or_default(path, INT64) == 30


def test_last_single_record(tmp_path):
    path = tmp_path / "one.bin"
    _write_int64(path, 42)
    assert files.read_last_or_default(path, INT64) == 42
    assert files.read_first_or_default(path, INT64) == 42


def test_last_struct_record(tmp_path):
    path = tmp_path / "points.bin"
    points = [Point(1, 1, 1.0), Point(2, 2, 2.0)]
    files.write_all(path, POINT, points)
    assert files.read_last_or_default(path, POINT) == Point(2, 2, 2.0)


@pytest.mark.parametrize("reader", [files.read_first_or_default, files.read_last_or_default])
def test_unaligned_file_raises(tmp_path, reader):
    path = tmp_path / "bad.bin"
    path.write_bytes(bytes(8 * 3 + 5))
    with pytest.raises(UnalignedFileError) as exc_info:
        reader(path, INT64)
    err = exc_info.value
    assert err.element_size == 8
    assert err.file_size == 29
    assert str(err) == "File is not aligned to elements with size 8."
    assert isinstance(err, RecordFSError)
    assert isinstance(err, ValueError)


def test_unaligned_shorter_than_one_record(tmp_path):
    path = tmp_path / "short.bin"
    path.write_bytes(b"\x01\x02\x03")
    with pytest.raises(UnalignedFileError):
        files.read_first_or_default(path, INT32)


# ── read_at / count_records ───────────────────────────────────


def test_read_at_positive_and_negative(tmp_path):
    path = tmp_path / "ints.bin"
    _write_int64(path, 5, 6, 7)
    assert files.read_at(path, INT64, 1) == 6
    assert files.read_at(path, INT64, -1) == 7
    assert files.read_at(path, INT64, -3) == 5


@pytest.mark.parametrize("index", [3, -4])
def test_read_at_out_of_range(tmp_path, index):
    path = tmp_path / "ints.bin"
    _write_int64(path, 5, 6, 7)
    with pytest.raises(IndexError):
        files.read_at(path, INT64, index)


def test_read_at_missing_file(tmp_path):
    with pytest.raises(IndexError):
        files.read_at(tmp_path / "missing.bin", INT64, 0)


def test_count_records(tmp_path):
    path = tmp_path / "ints.bin"
    assert files.count_records(path, INT64) == 0
    _write_int64(path, 1, 2, 3, 4)
    assert files.count_records(path, INT64) == 4
    assert files.count_records(path, INT32) == 8


def test_count_records_unaligned(tmp_path):
    path = tmp_path / "bad.bin"
    path.write_bytes(bytes(9))
    with pytest.raises(UnalignedFileError):
        files.count_records(path, INT64)


# ── write_first ───────────────────────────────────────────────


def test_write_first_then_read_first(tmp_path):
    path = tmp_path / "ints.bin"
    files.write_first(path, INT64, 99)
    assert files.read_first_or_default(path, INT64) == 99
    assert files.get_size(path) == 8


def test_write_first_preserves_rest(tmp_path):
    path = tmp_path / "ints.bin"
    _write_int64(path, 1, 2, 3)
    files.write_first(path, INT64, -7)
    assert files.read_all(path, INT64) == [-7, 2, 3]


def test_write_first_struct(tmp_path):
    path = tmp_path / "points.bin"
    files.write_all(path, POINT, [Point(1, 1, 1.0), Point(2, 2, 2.0)])
    files.write_first(path, POINT, Point(9, 8, 7.5))
    assert files.read_all(path, POINT) == [Point(9, 8, 7.5), Point(2, 2, 2.0)]


def test_write_first_unencodable_value_leaves_no_file(tmp_path):
    path = tmp_path / "ints.bin"
    with pytest.raises(struct.error):
        files.write_first(path, INT64, "not a number")
    assert not path.exists()


def test_write_first_unencodable_value_keeps_existing_bytes(tmp_path):
    path = tmp_path / "ints.bin"
    _write_int64(path, 1, 2)
    with pytest.raises(struct.error):
        files.write_first(path, INT64, "not a number")
    assert files.read_all(path, INT64) == [1, 2]


# ── append / append_records ───────────────────────────────────


def test_append_creates_and_positions_at_end(tmp_path):
    path = tmp_path / "ints.bin"
    with files.append(path) as f:
        f.write(INT64.encode(1))
    with files.append(path) as f:
        f.write(INT64.encode(2))
        f.write(INT64.encode(3))
    assert files.read_all(path, INT64) == [1, 2, 3]


def test_append_handle_is_write_only(tmp_path):
    path = tmp_path / "ints.bin"
    with files.append(path) as f:
        assert f.writable()
        assert not f.readable()


def test_append_records(tmp_path):
    path = tmp_path / "ints.bin"
    _write_int64(path, 1)
    assert files.append_records(path, INT64, [2, 3]) == 2
    assert files.read_last_or_default(path, INT64) == 3
    assert files.count_records(path, INT64) == 3


# ── get_size / set_size ───────────────────────────────────────


def test_get_size_missing_file(tmp_path):
    assert files.get_size(tmp_path / "missing.bin") == 0


def test_get_size_directory_is_zero(tmp_path):
    assert files.get_size(tmp_path) == 0


def test_set_size_creates_and_extends_with_zeros(tmp_path):
    path = tmp_path / "new.bin"
    files.set_size(path, 16)
    assert files.get_size(path) == 16
    assert path.read_bytes() == bytes(16)


def test_set_size_truncates(tmp_path):
    path = tmp_path / "ints.bin"
    _write_int64(path, 1, 2, 3)
    files.set_size(path, 8)
    assert files.read_all(path, INT64) == [1]


def test_set_size_twice_resizes_once(tmp_path, monkeypatch):
    path = tmp_path / "ints.bin"
    _write_int64(path, 1, 2, 3)

    calls = []
    real_ftruncate = files.ftruncate

    def counting_ftruncate(fd, length):
        calls.append(length)
        real_ftruncate(fd, length)

    monkeypatch.setattr(files, "ftruncate", counting_ftruncate)
    files.set_size(path, 16)
    files.set_size(path, 16)
    assert calls == [16]
    assert files.get_size(path) == 16
    assert files.read_all(path, INT64) == [1, 2]


def test_set_size_negative(tmp_path):
    with pytest.raises(ValueError):
        files.set_size(tmp_path / "x.bin", -1)


# ── delete_all ────────────────────────────────────────────────


def _make_tree(root: Path) -> None:
    (root / "a.tmp").write_text("a")
    (root / "b.tmp").write_text("b")
    (root / "keep.txt").write_text("k")
    sub = root / "sub"
    sub.mkdir()
    (sub / "c.tmp").write_text("c")
    (sub / "keep.txt").write_text("k")


def test_delete_all_top_level_only(tmp_path):
    _make_tree(tmp_path)
    assert files.delete_all(tmp_path, "*.tmp") == 2
    assert not (tmp_path / "a.tmp").exists()
    assert not (tmp_path / "b.tmp").exists()
    assert (tmp_path / "keep.txt").exists()
    assert (tmp_path / "sub" / "c.tmp").exists()


def test_delete_all_recursive(tmp_path):
    _make_tree(tmp_path)
    assert files.delete_all(tmp_path, "*.tmp", recurse_subdirectories=True) == 3
    assert not (tmp_path / "sub" / "c.tmp").exists()
    assert (tmp_path / "keep.txt").exists()
    assert (tmp_path / "sub" / "keep.txt").exists()


def test_delete_all_default_pattern_keeps_directories(tmp_path):
    _make_tree(tmp_path)
    assert files.delete_all(tmp_path) == 3
    assert sorted(p.name for p in tmp_path.iterdir()) == ["sub"]
    assert sorted(p.name for p in (tmp_path / "sub").iterdir()) == ["c.tmp", "keep.txt"]


def test_delete_all_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        files.delete_all(tmp_path / "nope")


def test_delete_all_not_a_directory(tmp_path):
    path = tmp_path / "file.txt"
    path.write_text("x")
    with pytest.raises(NotADirectoryError):
        files.delete_all(path)


# ── describe ──────────────────────────────────────────────────


def test_describe_aligned(tmp_path):
    path = tmp_path / "ints.bin"
    _write_int64(path, 1, 2)
    info = files.describe(path, INT64)
    assert info.exists
    assert info.size == 16
    assert info.record_count == 2
    assert info.aligned


def test_describe_unaligned_does_not_raise(tmp_path):
    path = tmp_path / "bad.bin"
    path.write_bytes(bytes(19))
    info = files.describe(path, INT64)
    assert info.record_count == 2
    assert info.remainder == 3
    assert not info.aligned


def test_describe_missing(tmp_path):
    info = files.describe(tmp_path / "missing.bin", INT64)
    assert not info.exists
    assert info.size == 0
    assert info.aligned
