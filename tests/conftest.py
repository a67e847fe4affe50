"""
Shared fixtures for dupfinder tests.
Creates isolated temporary directories with controlled test files.
"""
import os
import tempfile
from pathlib import Path
from typing import Dict, Sequence

import pytest

from dupfinder.core.models import ScanConfiguration
from dupfinder.services.file_service import DirectoryTrash
from dupfinder.services.removal_service import RemovalManager


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_files(temp_dir) -> Dict[str, Path]:
    """
    Creates controlled test files under temp_dir/root:
    - 2 identical files (duplicates, 1KB of 'A') plus a third copy in a subdirectory
    - 2 identical files (duplicates, 2KB of 'B')
    - 2 unique files (different content)
    - 1 empty file (filtered by the enumerator)
    - 1 hidden file with duplicate content (filtered by default)
    """
    root = temp_dir / "root"
    root.mkdir()
    files = {}

    content_a = b"A" * 1024
    files["dup1_a"] = root / "dup1_a.txt"
    files["dup1_b"] = root / "dup1_b.txt"
    files["dup1_a"].write_bytes(content_a)
    files["dup1_b"].write_bytes(content_a)

    content_b = b"B" * 2048
    files["dup2_a"] = root / "dup2_a.txt"
    files["dup2_b"] = root / "dup2_b.txt"
    files["dup2_a"].write_bytes(content_b)
    files["dup2_b"].write_bytes(content_b)

    files["unique1"] = root / "unique1.txt"
    files["unique1"].write_bytes(b"C" * 1500)
    files["unique2"] = root / "unique2.txt"
    files["unique2"].write_bytes(b"D" * 2500)

    files["empty"] = root / "empty.txt"
    files["empty"].write_bytes(b"")

    files["hidden"] = root / ".hidden.txt"
    files["hidden"].write_bytes(content_a)

    subdir = root / "subdir"
    subdir.mkdir()
    files["sub_dup"] = subdir / "dup_in_subdir.txt"
    files["sub_dup"].write_bytes(content_a)

    return files


def make_config(*roots, **kwargs) -> ScanConfiguration:
    """ScanConfiguration with no protected prefixes, so temp paths are never refused."""
    kwargs.setdefault("protected_prefixes", ())
    return ScanConfiguration(roots=tuple(str(r) for r in roots), **kwargs)


def set_mtime(path: Path, timestamp: float) -> None:
    os.utime(path, (timestamp, timestamp))


class FakeEmbeddingProvider:
    """
    Embeds by looking the raw bytes up in a table; distance is Euclidean.
    Bytes missing from the table raise, like an undecodable image.
    """
    default_threshold = 0.5

    def __init__(self, table: Dict[bytes, Sequence[float]]):
        self.table = table

    def embed(self, data: bytes):
        if data not in self.table:
            raise ValueError("cannot decode image")
        return tuple(self.table[data])

    def distance(self, a, b) -> float:
        return sum((x - y) ** 2 for x, y in zip(a, b)) ** 0.5


@pytest.fixture
def trash_dir(temp_dir) -> Path:
    return temp_dir / "trash"


@pytest.fixture
def removal_manager(trash_dir) -> RemovalManager:
    """RemovalManager moving files into a plain directory instead of the system trash."""
    return RemovalManager(trash_backend=DirectoryTrash(str(trash_dir)), protected_prefixes=())
