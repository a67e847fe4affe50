"""
Tests for FileEnumeratorImpl — filters, multi-root handling and cancellation.
"""
import os
from pathlib import Path

import pytest

from conftest import make_config
from dupfinder.core.scanner import FileEnumeratorImpl


def names(records):
    return sorted(Path(r.path).name for r in records)


class TestBasicEnumeration:

    def test_skips_empty_and_hidden_files(self, test_files, temp_dir):
        records = FileEnumeratorImpl().enumerate(make_config(temp_dir / "root"))
        found = names(records)
        assert "empty.txt" not in found
        assert ".hidden.txt" not in found
        assert found == sorted([
            "dup1_a.txt", "dup1_b.txt", "dup2_a.txt", "dup2_b.txt",
            "unique1.txt", "unique2.txt", "dup_in_subdir.txt",
        ])

    def test_include_hidden(self, test_files, temp_dir):
        records = FileEnumeratorImpl().enumerate(make_config(temp_dir / "root", skip_hidden=False))
        assert ".hidden.txt" in names(records)

    def test_records_carry_metadata(self, test_files, temp_dir):
        records = FileEnumeratorImpl().enumerate(make_config(temp_dir / "root"))
        record = next(r for r in records if r.name == "dup2_a.txt")
        assert record.size == 2048
        assert record.extension == "txt"
        assert record.modified == pytest.approx(os.stat(test_files["dup2_a"]).st_mtime)
        assert os.path.isabs(record.path)
        assert record.content_hash is None
        assert record.kept is False

    def test_visible_files_inside_dot_directory_are_found(self, temp_dir):
        """Only the entry's own hidden flag counts; a dot-named parent is still walked."""
        dot_dir = temp_dir / ".cfg"
        dot_dir.mkdir()
        (dot_dir / "visible.txt").write_bytes(b"x" * 10)
        (dot_dir / ".secret").write_bytes(b"y" * 10)
        records = FileEnumeratorImpl().enumerate(make_config(temp_dir))
        assert names(records) == ["visible.txt"]


class TestFilters:

    def test_min_size(self, test_files, temp_dir):
        records = FileEnumeratorImpl().enumerate(make_config(temp_dir / "root", min_size=2000))
        assert names(records) == ["dup2_a.txt", "dup2_b.txt", "unique2.txt"]

    def test_extension_allow_list(self, temp_dir):
        (temp_dir / "photo.JPG").write_bytes(b"1")
        (temp_dir / "image.png").write_bytes(b"2")
        (temp_dir / "notes.txt").write_bytes(b"3")
        (temp_dir / "README").write_bytes(b"4")
        config = make_config(temp_dir, extensions=frozenset({"jpg", "png"}))
        assert names(FileEnumeratorImpl().enumerate(config)) == ["image.png", "photo.JPG"]

    def test_excluded_components(self, temp_dir):
        for name in ("node_modules", ".git", "keep"):
            folder = temp_dir / name
            folder.mkdir()
            (folder / "file.bin").write_bytes(b"data")
        config = make_config(temp_dir, skip_hidden=False)
        records = FileEnumeratorImpl().enumerate(config)
        assert [Path(r.path).parent.name for r in records] == ["keep"]

    def test_custom_excluded_component(self, temp_dir):
        (temp_dir / "build").mkdir()
        (temp_dir / "build" / "out.o").write_bytes(b"obj")
        (temp_dir / "src.c").write_bytes(b"code")
        config = make_config(temp_dir, excluded_components=frozenset({"build"}))
        assert names(FileEnumeratorImpl().enumerate(config)) == ["src.c"]

    def test_protected_prefix_skipped(self, temp_dir):
        protected = temp_dir / "system"
        protected.mkdir()
        (protected / "kernel.bin").write_bytes(b"k")
        (temp_dir / "user.bin").write_bytes(b"u")
        config = make_config(temp_dir, protected_prefixes=(str(protected),))
        assert names(FileEnumeratorImpl().enumerate(config)) == ["user.bin"]

    def test_protected_prefix_is_a_plain_string_prefix(self, temp_dir):
        """A protected prefix also covers siblings that share its leading characters."""
        (temp_dir / "data").mkdir()
        (temp_dir / "datastore").mkdir()
        (temp_dir / "datastore" / "x.txt").write_bytes(b"x")
        (temp_dir / "other.txt").write_bytes(b"o")
        config = make_config(temp_dir, protected_prefixes=(str(temp_dir / "data"),))
        assert names(FileEnumeratorImpl().enumerate(config)) == ["other.txt"]

    def test_symlinks_are_skipped(self, temp_dir):
        target = temp_dir / "real.txt"
        target.write_bytes(b"content")
        try:
            (temp_dir / "link.txt").symlink_to(target)
            (temp_dir / "linkdir").symlink_to(temp_dir, target_is_directory=True)
        except (OSError, NotImplementedError):
            pytest.skip("Symlinks not supported")
        assert names(FileEnumeratorImpl().enumerate(make_config(temp_dir))) == ["real.txt"]


class TestRoots:

    def test_multiple_roots(self, temp_dir):
        for name in ("one", "two"):
            (temp_dir / name).mkdir()
            (temp_dir / name / f"{name}.dat").write_bytes(b"x")
        records = FileEnumeratorImpl().enumerate(make_config(temp_dir / "one", temp_dir / "two"))
        assert names(records) == ["one.dat", "two.dat"]

    def test_overlapping_roots_report_each_file_once(self, test_files, temp_dir):
        root = temp_dir / "root"
        records = FileEnumeratorImpl().enumerate(make_config(root, root / "subdir"))
        assert names(records).count("dup_in_subdir.txt") == 1

    def test_missing_root_is_skipped(self, test_files, temp_dir):
        records = FileEnumeratorImpl().enumerate(make_config(temp_dir / "missing", temp_dir / "root"))
        assert len(records) == 7


class TestCancellation:

    def test_cancelled_returns_empty(self, test_files, temp_dir):
        records = FileEnumeratorImpl().enumerate(make_config(temp_dir / "root"), stopped_flag=lambda: True)
        assert records == []
