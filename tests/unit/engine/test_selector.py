"""Unit tests for FileSelector.

Tests age and pattern filtering, recursion, symlink handling,
exclusion of erased paths, and reporting of unreadable entries.
"""

import os
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from tidyctl.engine.selector import (
    CandidateFile,
    FileSelector,
    Selection,
    UnreadableEntry,
    to_epoch_ns,
)
from tidyctl.errors import NotFoundError


def _names(selection: Iterable[Selection]) -> list[str]:
    """Collect base names of the CandidateFile items in a selection."""
    return [entry.path.name for entry in selection if isinstance(entry, CandidateFile)]


class TestRootValidation:
    """Tests for root directory checks."""

    def test_missing_root_raises_not_found(self, tmp_path: Path) -> None:
        """A nonexistent root raises NotFoundError at call time."""
        selector = FileSelector()
        with pytest.raises(NotFoundError) as exc_info:
            selector.select(tmp_path / "missing")
        assert exc_info.value.path == str(tmp_path / "missing")

    def test_file_root_raises_not_found(self, tmp_path: Path) -> None:
        """A root that is a regular file raises NotFoundError."""
        target = tmp_path / "file.txt"
        target.write_text("x")

        with pytest.raises(NotFoundError):
            FileSelector().select(target)

    def test_negative_age_rejected(self, tmp_path: Path) -> None:
        """Negative age thresholds are rejected."""
        with pytest.raises(ValueError, match="non-negative"):
            FileSelector().select(tmp_path, "*", -1)


class TestAgeFilter:
    """Tests for age threshold semantics."""

    def test_file_exactly_at_cutoff_is_not_selected(
        self,
        tmp_path: Path,
        clock: Callable[[], datetime],
        make_file: Callable[..., Path],
    ) -> None:
        """A file modified exactly at now - ndays is excluded (strict inequality)."""
        make_file(tmp_path / "boundary.log", age_days=30)

        selection = FileSelector(clock=clock).select(tmp_path, "*", 30)

        assert _names(selection) == []

    def test_file_one_second_before_cutoff_is_selected(
        self,
        tmp_path: Path,
        now: datetime,
        clock: Callable[[], datetime],
    ) -> None:
        """A file modified one second before the cutoff is selected."""
        target = tmp_path / "older.log"
        target.write_text("x")
        mtime_ns = to_epoch_ns(now - timedelta(days=30, seconds=1))
        os.utime(target, ns=(mtime_ns, mtime_ns))

        selection = FileSelector(clock=clock).select(tmp_path, "*", 30)

        assert _names(selection) == ["older.log"]

    def test_young_files_excluded(
        self,
        tmp_path: Path,
        clock: Callable[[], datetime],
        make_file: Callable[..., Path],
    ) -> None:
        """Files newer than the threshold are excluded."""
        make_file(tmp_path / "old.tmp", age_days=40)
        make_file(tmp_path / "new.tmp", age_days=5)

        selection = FileSelector(clock=clock).select(tmp_path, "*", 30)

        assert _names(selection) == ["old.tmp"]

    def test_zero_days_selects_everything(
        self,
        tmp_path: Path,
        clock: Callable[[], datetime],
        make_file: Callable[..., Path],
    ) -> None:
        """ndays=0 selects every file, including ones dated in the future."""
        make_file(tmp_path / "a.dat", age_days=0)
        make_file(tmp_path / "b.dat", age_days=-2)
        make_file(tmp_path / "c.dat", age_days=100)

        selection = FileSelector(clock=clock).select(tmp_path, "*", 0)

        assert _names(selection) == ["a.dat", "b.dat", "c.dat"]


class TestNamePattern:
    """Tests for glob filtering on base names."""

    def test_glob_filters_by_name(
        self, tmp_path: Path, clock: Callable[[], datetime], make_file: Callable[..., Path]
    ) -> None:
        """Only names matching the glob are selected."""
        make_file(tmp_path / "a.tmp")
        make_file(tmp_path / "b.log")
        make_file(tmp_path / "sub" / "c.tmp")

        selection = FileSelector(clock=clock).select(tmp_path, "*.tmp")

        assert _names(selection) == ["a.tmp", "c.tmp"]

    def test_question_mark_matches_single_character(
        self, tmp_path: Path, clock: Callable[[], datetime], make_file: Callable[..., Path]
    ) -> None:
        """'?' matches exactly one character."""
        make_file(tmp_path / "log1.txt")
        make_file(tmp_path / "log12.txt")

        selection = FileSelector(clock=clock).select(tmp_path, "log?.txt")

        assert _names(selection) == ["log1.txt"]

    def test_empty_pattern_matches_all(
        self, tmp_path: Path, clock: Callable[[], datetime], make_file: Callable[..., Path]
    ) -> None:
        """An empty pattern behaves like '*'."""
        make_file(tmp_path / "x")
        make_file(tmp_path / "y.z")

        selection = FileSelector(clock=clock).select(tmp_path, "")

        assert _names(selection) == ["x", "y.z"]

    def test_pattern_is_not_a_regex(
        self, tmp_path: Path, clock: Callable[[], datetime], make_file: Callable[..., Path]
    ) -> None:
        """Regex syntax has no special meaning."""
        make_file(tmp_path / "a.tmp")

        selection = FileSelector(clock=clock).select(tmp_path, ".*\\.tmp")

        assert _names(selection) == []


class TestTreeWalk:
    """Tests for recursion, symlinks and exclusions."""

    def test_recurses_full_subtree(
        self, tmp_path: Path, clock: Callable[[], datetime], make_file: Callable[..., Path]
    ) -> None:
        """Files in nested directories are selected."""
        make_file(tmp_path / "top.dat")
        make_file(tmp_path / "a" / "b" / "deep.dat")

        selection = FileSelector(clock=clock).select(tmp_path)

        assert sorted(_names(selection)) == ["deep.dat", "top.dat"]

    def test_non_recursive_stays_at_root(
        self, tmp_path: Path, clock: Callable[[], datetime], make_file: Callable[..., Path]
    ) -> None:
        """recursive=False ignores subdirectories."""
        make_file(tmp_path / "top.dat")
        make_file(tmp_path / "a" / "nested.dat")

        selection = FileSelector(clock=clock).select(tmp_path, recursive=False)

        assert _names(selection) == ["top.dat"]

    def test_symlinks_are_not_candidates(
        self, tmp_path: Path, clock: Callable[[], datetime], make_file: Callable[..., Path]
    ) -> None:
        """Symlinks to files and directories are skipped."""
        outside = tmp_path / "outside"
        real = make_file(outside / "real.dat")
        root = tmp_path / "root"
        root.mkdir()
        (root / "link.dat").symlink_to(real)
        (root / "linkdir").symlink_to(outside)

        selection = FileSelector(clock=clock).select(root)

        assert _names(selection) == []

    def test_excluded_paths_are_skipped(
        self, tmp_path: Path, clock: Callable[[], datetime], make_file: Callable[..., Path]
    ) -> None:
        """Paths in the exclusion set are never yielded."""
        keep = make_file(tmp_path / "keep.dat")
        make_file(tmp_path / "gone.dat")
        excluded = {str((tmp_path / "gone.dat").resolve())}

        selection = FileSelector(clock=clock, exclude=excluded).select(tmp_path)

        assert _names(selection) == [keep.name]

    def test_candidate_fields(
        self,
        tmp_path: Path,
        now: datetime,
        clock: Callable[[], datetime],
        make_file: Callable[..., Path],
    ) -> None:
        """CandidateFile carries absolute path, size and UTC mtime."""
        make_file(tmp_path / "file.bin", content=b"12345", age_days=2)

        (candidate,) = list(FileSelector(clock=clock).select(tmp_path))

        assert isinstance(candidate, CandidateFile)
        assert candidate.path.is_absolute()
        assert candidate.name == "file.bin"
        assert candidate.size == 5
        assert candidate.mtime == now - timedelta(days=2)

    def test_selection_is_lazy(
        self, tmp_path: Path, clock: Callable[[], datetime], make_file: Callable[..., Path]
    ) -> None:
        """Entries are produced on demand."""
        make_file(tmp_path / "a.dat")
        make_file(tmp_path / "b.dat")

        selection = FileSelector(clock=clock).select(tmp_path)
        first = next(selection)

        assert isinstance(first, CandidateFile)
        assert first.name == "a.dat"


class TestUnreadableEntries:
    """Tests for entries that cannot be inspected."""

    def test_unlistable_directory_is_reported_and_scan_continues(
        self,
        tmp_path: Path,
        clock: Callable[[], datetime],
        make_file: Callable[..., Path],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """A directory that cannot be listed yields UnreadableEntry; siblings still scan."""
        make_file(tmp_path / "locked" / "hidden.dat")
        make_file(tmp_path / "open" / "visible.dat")

        original_iterdir = Path.iterdir

        def fake_iterdir(self: Path):  # type: ignore[no-untyped-def]
            if self.name == "locked":
                raise PermissionError("Permission denied")
            return original_iterdir(self)

        monkeypatch.setattr(Path, "iterdir", fake_iterdir)

        selection = list(FileSelector(clock=clock).select(tmp_path))

        unreadable = [entry for entry in selection if isinstance(entry, UnreadableEntry)]
        assert len(unreadable) == 1
        assert unreadable[0].path.endswith("locked")
        assert "Permission denied" in unreadable[0].error
        assert _names(selection) == ["visible.dat"]

    def test_unstattable_file_is_reported(
        self,
        tmp_path: Path,
        clock: Callable[[], datetime],
        make_file: Callable[..., Path],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """A file whose status cannot be read yields UnreadableEntry."""
        make_file(tmp_path / "bad.dat")
        make_file(tmp_path / "good.dat")

        original_lstat = Path.lstat

        def fake_lstat(self: Path):  # type: ignore[no-untyped-def]
            if self.name == "bad.dat":
                raise OSError("I/O error")
            return original_lstat(self)

        monkeypatch.setattr(Path, "lstat", fake_lstat)

        selection = list(FileSelector(clock=clock).select(tmp_path))

        unreadable = [entry for entry in selection if isinstance(entry, UnreadableEntry)]
        assert [entry.path.endswith("bad.dat") for entry in unreadable] == [True]
        assert _names(selection) == ["good.dat"]
