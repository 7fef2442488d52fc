"""Tests for the zsh history reader."""

import os

import pytest

from please.errors import HistoryLogTruncated, HistoryLogUnreadable
from please.kernel.history import (
    HistoryMarker,
    ZshHistoryReader,
    parse_entry,
    parse_history,
    unmetafy,
)


def test_parse_extended_entries():
    data = b": 1700000001:0;echo hi\n: 1700000002:3;make build\n"
    records = parse_history(data)
    assert [r.text for r in records] == ["echo hi", "make build"]
    assert records[0].timestamp == 1700000001
    assert records[1].duration == 3


def test_parse_plain_entries_have_no_timestamp():
    records = parse_history(b"ls -la\ncd /tmp\n")
    assert [r.text for r in records] == ["ls -la", "cd /tmp"]
    assert all(r.timestamp is None for r in records)


def test_mixed_plain_and_extended_keep_file_order():
    data = b"old plain\n: 1700000005:0;newer\n: 1700000001:0;clock went back\n"
    records = parse_history(data)
    assert [r.text for r in records] == ["old plain", "newer", "clock went back"]


def test_continuation_line_joined_into_one_record():
    """A command written across two physical lines is one logical command."""
    data = b": 1700000001:0;for i in 1 2\\\ndo echo $i; done\n: 1700000002:0;echo after\n"
    records = parse_history(data)
    assert len(records) == 2
    assert records[0].text == "for i in 1 2\ndo echo $i; done"
    assert records[1].text == "echo after"


def test_escaped_backslash_continuation_keeps_original_backslash():
    # Typed: `echo a \` newline `b`; zsh adds one backslash before the newline.
    data = b": 1700000001:0;echo a \\\\\nb\n"
    records = parse_history(data)
    assert len(records) == 1
    assert records[0].text == "echo a \\\nb"


def test_incomplete_trailing_entry_is_kept():
    records = parse_history(b": 1700000001:0;echo one\n: 1700000002:0;echo tw")
    assert [r.text for r in records] == ["echo one", "echo tw"]


def test_blank_lines_are_skipped():
    records = parse_history(b"\n: 1700000001:0;echo hi\n\n")
    assert [r.text for r in records] == ["echo hi"]


def test_parse_entry_with_spaces_in_marker():
    record = parse_entry(":  1700000001:0;git status")
    assert record.text == "git status"
    assert record.timestamp == 1700000001


def test_unmetafy_restores_multibyte_text():
    raw = "echo héllo".encode("utf-8")
    # Metafy every byte >= 0x83 the way zsh does.
    metafied = bytearray()
    for byte in raw:
        if byte >= 0x83:
            metafied += bytes([0x83, byte ^ 0x20])
        else:
            metafied.append(byte)
    assert unmetafy(bytes(metafied)) == raw
    assert parse_history(b": 1:0;" + bytes(metafied) + b"\n")[0].text == "echo héllo"


def test_missing_file_reads_as_empty(tmp_path):
    reader = ZshHistoryReader(tmp_path / "nope")
    assert reader.read_all() == []
    assert reader.position_marker() == HistoryMarker(record_count=0, size=0)


def test_records_after_marker(history, config):
    history.extend("echo one", "echo two")
    reader = ZshHistoryReader(config.history_file)
    marker = reader.position_marker()
    assert marker.record_count == 2
    history.extend("echo three", "echo four")
    assert [r.text for r in reader.records_after(marker)] == ["echo three", "echo four"]


def test_slice_independent_of_prior_history(history, config):
    """Slices depend only on what came after the marker."""
    reader = ZshHistoryReader(config.history_file)
    for i in range(50):
        history.append(f"echo unrelated {i}")
    marker = reader.position_marker()
    history.extend("a", "b")
    assert [r.text for r in reader.records_after(marker)] == ["a", "b"]


def test_marker_taken_before_file_exists(history, config):
    reader = ZshHistoryReader(config.history_file)
    marker = reader.position_marker()
    history.extend("echo first")
    assert [r.text for r in reader.records_after(marker)] == ["echo first"]


def test_shrunk_log_raises_truncated(history, config):
    history.extend("a", "b", "c")
    reader = ZshHistoryReader(config.history_file)
    marker = reader.position_marker()
    config.history_file.write_text(": 1:0;a\n", encoding="utf-8")
    with pytest.raises(HistoryLogTruncated):
        reader.records_after(marker)


def test_fewer_records_than_marker_raises_truncated(history, config):
    history.extend("a", "b")
    reader = ZshHistoryReader(config.history_file)
    marker = reader.position_marker()
    # Same byte size, but one long entry instead of two.
    size = config.history_file.stat().st_size
    config.history_file.write_text(": 1:0;" + "x" * (size - 7) + "\n", encoding="utf-8")
    with pytest.raises(HistoryLogTruncated):
        reader.records_after(marker)


@pytest.mark.skipif(os.name != "posix" or os.geteuid() == 0, reason="needs non-root POSIX permissions")
def test_unreadable_file_raises(history, config):
    history.extend("a")
    config.history_file.chmod(0)
    try:
        with pytest.raises(HistoryLogUnreadable):
            ZshHistoryReader(config.history_file).read_all()
    finally:
        config.history_file.chmod(0o600)


def test_directory_in_place_of_file_raises(tmp_path):
    (tmp_path / "hist").mkdir()
    with pytest.raises(HistoryLogUnreadable):
        ZshHistoryReader(tmp_path / "hist").read_all()


def test_invalid_utf8_bytes_are_preserved():
    """Commands from a non-UTF-8 locale come back byte for byte."""
    record = parse_history(b": 1:0;echo caf\xe9\n")[0]
    assert record.text.encode("utf-8", "surrogateescape") == b"echo caf\xe9"
