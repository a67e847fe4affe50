"""
Tests for ContentHasher — streaming digests and byte-for-byte comparison.
"""
import hashlib

import xxhash

from dupfinder.core.hasher import (
    HASH_ALGORITHMS, ContentHasher, Sha256AlgorithmImpl, XXHashAlgorithmImpl)
from dupfinder.core.models import CHUNK_SIZE, FileRecord


class TestComputeHash:

    def test_sha256_matches_hashlib(self, temp_dir):
        path = temp_dir / "data.bin"
        content = b"0123456789" * 20000  # spans several chunks
        path.write_bytes(content)
        record = FileRecord(path=str(path), size=len(content))

        digest = ContentHasher().compute_hash(record)

        assert digest == hashlib.sha256(content).hexdigest()
        assert record.content_hash == digest

    def test_xxh128_matches_xxhash(self, temp_dir):
        path = temp_dir / "data.bin"
        path.write_bytes(b"hello world")
        digest = ContentHasher(XXHashAlgorithmImpl()).hash_path(str(path))
        assert digest == xxhash.xxh3_128(b"hello world").hexdigest()

    def test_cached_hash_is_not_recomputed(self, temp_dir):
        path = temp_dir / "data.bin"
        path.write_bytes(b"abc")
        record = FileRecord(path=str(path), size=3, content_hash="cached")
        assert ContentHasher().compute_hash(record) == "cached"

    def test_missing_file_raises(self, temp_dir):
        record = FileRecord(path=str(temp_dir / "missing.bin"), size=3)
        try:
            ContentHasher().compute_hash(record)
            assert False, "Expected OSError"
        except OSError:
            pass
        assert record.content_hash is None

    def test_registry(self):
        assert isinstance(HASH_ALGORITHMS["sha256"], Sha256AlgorithmImpl)
        assert isinstance(HASH_ALGORITHMS["xxh128"], XXHashAlgorithmImpl)


class TestFilesEqual:

    def test_identical_files(self, temp_dir):
        content = b"x" * (CHUNK_SIZE * 2 + 17)
        (temp_dir / "a").write_bytes(content)
        (temp_dir / "b").write_bytes(content)
        assert ContentHasher().files_equal(str(temp_dir / "a"), str(temp_dir / "b"))

    def test_difference_in_last_chunk(self, temp_dir):
        content = b"x" * (CHUNK_SIZE * 2)
        (temp_dir / "a").write_bytes(content + b"1")
        (temp_dir / "b").write_bytes(content + b"2")
        assert not ContentHasher().files_equal(str(temp_dir / "a"), str(temp_dir / "b"))

    def test_different_lengths(self, temp_dir):
        (temp_dir / "a").write_bytes(b"abc")
        (temp_dir / "b").write_bytes(b"abcd")
        assert not ContentHasher().files_equal(str(temp_dir / "a"), str(temp_dir / "b"))

    def test_unreadable_counts_as_mismatch(self, temp_dir):
        (temp_dir / "a").write_bytes(b"abc")
        assert not ContentHasher().files_equal(str(temp_dir / "a"), str(temp_dir / "missing"))
