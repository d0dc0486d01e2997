"""Tests for the development log store."""

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from devlog.store.config import DevlogConfig
from devlog.store.logstore import (
    NO_MATCHES,
    InvalidInputError,
    LogNotFoundError,
    LogStore,
    LogWriteError,
    append,
    ensure_exists,
    format_timestamp,
    resolve_path,
    search,
    tail,
)


class TestResolvePath:
    def test_nested_under_project_folder(self):
        path = resolve_path(Path("/work/app"), DevlogConfig(project_folder="devlog"))
        assert path == Path("/work/app/devlog/DEVLOG.md")

    def test_auto_uses_cwd_when_named_like_project_folder(self):
        path = resolve_path(Path("/work/devlog"), DevlogConfig(project_folder="devlog"))
        assert path == Path("/work/devlog/DEVLOG.md")

    def test_nested_layout_ignores_folder_name(self):
        config = DevlogConfig(project_folder="devlog", layout="nested")
        path = resolve_path(Path("/work/devlog"), config)
        assert path == Path("/work/devlog/devlog/DEVLOG.md")

    def test_inline_layout(self):
        path = resolve_path(Path("/work/app"), DevlogConfig(layout="inline", file_name="log.md"))
        assert path == Path("/work/app/log.md")

    def test_explicit_log_file_wins(self):
        config = DevlogConfig(log_file="/var/notes/log.txt", layout="inline")
        assert resolve_path(Path("/work/app"), config) == Path("/var/notes/log.txt")

    def test_relative_log_file_is_relative_to_cwd(self):
        config = DevlogConfig(log_file="notes/log.txt")
        assert resolve_path(Path("/work/app"), config) == Path("/work/app/notes/log.txt")

    def test_deterministic(self):
        config = DevlogConfig()
        assert resolve_path(Path("/a/b"), config) == resolve_path(Path("/a/b"), config)


class TestEnsureExists:
    def test_creates_header_and_bootstrap_entry(self, log_path, fixed_now, stamp):
        result = ensure_exists(log_path, now=fixed_now)
        assert result == log_path

        lines = log_path.read_text(encoding="utf-8").split("\n")
        assert len(lines) == 5
        assert "Development Log" in lines[0]
        assert lines[1] == ""
        assert lines[2]
        assert lines[3] == ""
        assert lines[4].startswith(stamp + " ")

    def test_idempotent(self, log_path, fixed_now):
        ensure_exists(log_path, now=fixed_now)
        first = log_path.read_bytes()

        later = lambda: datetime(2030, 1, 1, tzinfo=timezone.utc)
        ensure_exists(log_path, now=later)
        assert log_path.read_bytes() == first

    def test_keeps_existing_content(self, log_path):
        log_path.parent.mkdir(parents=True)
        log_path.write_text("my own notes", encoding="utf-8")
        ensure_exists(log_path)
        assert log_path.read_text(encoding="utf-8") == "my own notes"

    def test_uncreatable_raises_write_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        with pytest.raises(LogWriteError):
            ensure_exists(blocker / "DEVLOG.md")


class TestTail:
    def test_fresh_log_returns_whole_file(self, store):
        content = store.path.read_text(encoding="utf-8")
        assert store.tail(20) == content

    def test_returns_last_n_in_order(self, store):
        for i in range(10):
            store.append(f"message {i}")

        result = store.tail(3).split("\n")
        assert len(result) == 3
        assert result[0].endswith("message 7")
        assert result[-1].endswith("message 9")

    def test_min_of_n_and_length(self, store):
        all_lines = store.path.read_text(encoding="utf-8").split("\n")
        for n in (1, 2, len(all_lines), len(all_lines) + 5, 1000):
            result = store.tail(n).split("\n")
            assert result == all_lines[-min(n, len(all_lines)):]

    @pytest.mark.parametrize("n", [0, -1, -20])
    def test_rejects_non_positive(self, store, n):
        with pytest.raises(InvalidInputError):
            store.tail(n)

    @pytest.mark.parametrize("n", ["5", 2.5, True, None])
    def test_rejects_non_integer(self, store, n):
        with pytest.raises(InvalidInputError):
            store.tail(n)

    def test_missing_file_raises_not_found(self, tmp_path):
        with pytest.raises(LogNotFoundError):
            tail(tmp_path / "gone.md", 5)

    def test_deleted_after_creation(self, store):
        store.path.unlink()
        with pytest.raises(LogNotFoundError):
            store.tail(5)


class TestAppend:
    def test_append_then_tail_one(self, store, stamp):
        store.append("Fixed bug #123")
        assert store.tail(1) == f"{stamp} Fixed bug #123"

    def test_monotonic(self, store):
        original = store.path.read_text(encoding="utf-8")
        messages = ["first", "second", "third"]
        for message in messages:
            store.append(message)

        content = store.path.read_text(encoding="utf-8")
        assert content.startswith(original)

        added = content[len(original):].split("\n")
        assert added[0] == ""
        new_lines = added[1:]
        assert len(new_lines) == len(messages)
        for line, message in zip(new_lines, messages):
            assert line.startswith("[")
            assert line.endswith(message)

    def test_timestamp_is_utc_second_precision(self, log_path):
        local = timezone(timedelta(hours=5))
        moment = datetime(2026, 1, 2, 8, 30, 15, 999999, tzinfo=local)
        ensure_exists(log_path)
        append(log_path, "note", now=lambda: moment)
        assert tail(log_path, 1) == "[2026-01-02 03:30:15] note"

    def test_multiline_text_gets_one_timestamp(self, store, stamp):
        store.append("line one\nline two")
        assert store.tail(2) == f"{stamp} line one\nline two"

    @pytest.mark.parametrize("text", ["", None, 42])
    def test_rejects_invalid_text(self, store, text):
        before = store.path.read_bytes()
        with pytest.raises(InvalidInputError):
            store.append(text)
        assert store.path.read_bytes() == before

    def test_rejects_unencodable_text(self, store):
        before = store.path.read_bytes()
        with pytest.raises(InvalidInputError, match="UTF-8"):
            store.append("bad \ud800")
        assert store.path.read_bytes() == before

    def test_missing_directory_raises_write_error(self, tmp_path):
        with pytest.raises(LogWriteError):
            append(tmp_path / "no" / "such" / "dir" / "log.md", "hello")


class TestSearch:
    def test_case_insensitive(self, store):
        store.append("ERROR: disk full")
        store.append("all good")
        store.append("recovered from error")

        upper = store.search("ERROR")
        assert upper == store.search("error")
        assert upper.split("\n") == [
            line for line in store.path.read_text(encoding="utf-8").split("\n")
            if "error" in line.lower()
        ]
        assert len(upper.split("\n")) == 2

    def test_no_matches_sentinel(self, store):
        assert store.search("nothing like this") == NO_MATCHES

    @pytest.mark.parametrize("query", ["", None])
    def test_rejects_empty_query(self, store, query):
        with pytest.raises(InvalidInputError):
            store.search(query)

    def test_no_regex(self, store):
        store.append("value a.b")
        store.append("value axb")
        assert store.search("a.b").endswith("value a.b")

    def test_does_not_mutate(self, store):
        before = store.path.read_bytes()
        store.search("log")
        store.tail(3)
        assert store.path.read_bytes() == before

    def test_missing_file_raises_not_found(self, tmp_path):
        with pytest.raises(LogNotFoundError):
            search(tmp_path / "gone.md", "x")


class TestLogStore:
    def test_path_resolved_once(self, tmp_path):
        store = LogStore(str(tmp_path))
        first = store.path
        assert store.path is first

    def test_info(self, store):
        store.append("one")
        info = store.info()
        assert info.path == store.path
        assert info.lines == 6
        assert info.entries == 2
        assert info.size_bytes == store.path.stat().st_size
        assert info.to_dict()["path"] == str(store.path)

    def test_default_layout_in_fresh_directory(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = LogStore(tmpdir)
            path = store.ensure_exists()
            assert path == Path(tmpdir).resolve() / "devlog" / "DEVLOG.md"
            assert "Development Log" in store.tail(20)


def test_format_timestamp_naive():
    assert format_timestamp(datetime(2026, 5, 6, 7, 8, 9)) == "2026-05-06 07:08:09"
