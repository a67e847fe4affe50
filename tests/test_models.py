"""
Tests for data models: configuration validation, group aggregates, protected paths.
"""
import os

import pytest

from dupfinder.core.models import (
    DEFAULT_EXCLUDED_COMPONENTS, DuplicateGroup, FileRecord, KeepStrategy, RemovalResult,
    ScanConfiguration, ScanSession, ScanState, UndoEntry, is_protected_path)


class TestFileRecord:

    def test_name_and_extension_derived_from_path(self):
        record = FileRecord(path="/photos/Holiday.JPG", size=10)
        assert record.name == "Holiday.JPG"
        assert record.extension == "jpg"

    def test_file_without_extension(self):
        assert FileRecord(path="/data/Makefile", size=1).extension == ""

    def test_ids_are_unique(self):
        assert FileRecord(path="/a", size=1).id != FileRecord(path="/a", size=1).id


class TestDuplicateGroup:

    def test_reclaimable_bytes(self):
        files = [FileRecord(path=f"/f{i}", size=100) for i in range(3)]
        group = DuplicateGroup(files=files, size_per_file=100)
        assert group.reclaimable_bytes == 200

    def test_single_member_reclaims_nothing(self):
        group = DuplicateGroup(files=[FileRecord(path="/f", size=100)], size_per_file=100)
        assert group.reclaimable_bytes == 0

    def test_kept_file_and_files_to_remove(self):
        a, b = FileRecord(path="/a", size=5), FileRecord(path="/b", size=5, kept=True)
        group = DuplicateGroup(files=[a, b], size_per_file=5)
        assert group.kept_file is b
        assert group.files_to_remove == [a]


class TestScanConfiguration:
    """Validation happens at construction time."""

    def test_requires_a_root(self):
        with pytest.raises(ValueError, match="At least one root"):
            ScanConfiguration(roots=())

    def test_blank_roots_do_not_count(self):
        with pytest.raises(ValueError):
            ScanConfiguration(roots=("", "  "))

    def test_rejects_negative_min_size(self):
        with pytest.raises(ValueError, match="negative"):
            ScanConfiguration(roots=("/tmp",), min_size=-1)

    def test_rejects_negative_threshold(self):
        with pytest.raises(ValueError, match="negative"):
            ScanConfiguration(roots=("/tmp",), distance_threshold=-0.1)

    def test_extensions_normalized(self):
        config = ScanConfiguration(roots=("/tmp",), extensions=frozenset({".JPG", "png", " "}))
        assert config.extensions == frozenset({"jpg", "png"})

    def test_defaults(self):
        config = ScanConfiguration(roots=("/tmp",))
        assert config.skip_hidden is True
        assert config.verify_bytes is False
        assert config.extensions is None
        assert config.excluded_components == DEFAULT_EXCLUDED_COMPONENTS

    def test_from_human_readable(self):
        config = ScanConfiguration.from_human_readable(
            roots=["/tmp"], min_size_str="1KB", extensions_str=".jpg, PNG", extra_excluded=["build"])
        assert config.min_size == 1024
        assert config.extensions == frozenset({"jpg", "png"})
        assert "build" in config.excluded_components
        assert ".git" in config.excluded_components

    def test_from_human_readable_without_extensions(self):
        config = ScanConfiguration.from_human_readable(roots=["/tmp"])
        assert config.extensions is None
        assert config.min_size == 0

    def test_is_protected_uses_configured_prefixes(self):
        config = ScanConfiguration(roots=("/tmp",), protected_prefixes=("/srv/keep",))
        assert config.is_protected("/srv/keep/file")
        assert not config.is_protected("/srv/other/file")


class TestProtectedPaths:

    def test_prefix_itself_and_children(self):
        assert is_protected_path("/usr", ("/usr",))
        assert is_protected_path("/usr/lib/libc.so", ("/usr",))

    def test_plain_prefix_covers_sibling_names(self):
        """Prefixes match as strings, so "/usr" also covers "/usrdata"."""
        assert is_protected_path("/usrdata/file", ("/usr",))
        assert is_protected_path("/usr/../usrdata/file", ("/usr",))
        assert not is_protected_path("/us/file", ("/usr",))

    def test_case_folded_where_platform_folds_case(self, monkeypatch):
        monkeypatch.setattr(os.path, "normcase", lambda p: p.lower())
        assert is_protected_path("/WINDOWS/System32/kernel32.dll", ("/Windows",))

    def test_no_prefixes(self):
        assert not is_protected_path("/usr/bin/ls", ())


class TestSmallModels:

    def test_scan_session_defaults(self):
        session = ScanSession()
        assert session.state == ScanState.IDLE
        assert not session.is_scanning
        assert session.groups == ()

    def test_active_states(self):
        assert ScanState.ENUMERATING.is_active
        assert ScanState.GROUPING.is_active
        assert not ScanState.DONE.is_active
        assert not ScanState.CANCELLED.is_active

    def test_removal_result_undo_entries(self):
        result = RemovalResult(trashed={"/a": "/trash/a"}, removed=["/a", "/b"])
        assert result.undo_entries == [UndoEntry(original_path="/a", trash_path="/trash/a")]

    def test_keep_strategy_values(self):
        assert KeepStrategy("shortest-path") == KeepStrategy.SHORTEST_PATH
