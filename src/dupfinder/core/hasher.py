"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/hasher.py
Implements streaming content hashing and byte-for-byte verification.

The ContentHasher reads files sequentially in fixed 64 KiB chunks and feeds them
into a pluggable HashAlgorithm. SHA-256 is the default; xxHash128 is offered as a
faster non-cryptographic alternative with negligible accidental-collision odds.
"""

import hashlib
import logging
from typing import Dict

import xxhash

from dupfinder.core.interfaces import HashAlgorithm, HashObject
from dupfinder.core.models import CHUNK_SIZE, FileRecord

logger = logging.getLogger(__name__)


# Use the same way to implement and use any other hashing algorithm
class Sha256AlgorithmImpl(HashAlgorithm):
    name = "sha256"

    def new(self) -> HashObject:
        return hashlib.sha256()


class XXHashAlgorithmImpl(HashAlgorithm):
    name = "xxh128"

    def new(self) -> HashObject:
        return xxhash.xxh3_128()


HASH_ALGORITHMS: Dict[str, HashAlgorithm] = {
    Sha256AlgorithmImpl.name: Sha256AlgorithmImpl(),
    XXHashAlgorithmImpl.name: XXHashAlgorithmImpl(),
}


class ContentHasher:
    """
    Computes whole-file digests and compares files byte for byte.
    Caches the digest in FileRecord.content_hash to avoid recomputation.
    """

    def __init__(self, algorithm: HashAlgorithm = None, chunk_size: int = CHUNK_SIZE):
        self.algorithm = algorithm or Sha256AlgorithmImpl()
        self.chunk_size = chunk_size

    def compute_hash(self, file: FileRecord) -> str:
        """
        Computes and caches the hex digest of the entire file.

        Raises:
            OSError: If the file cannot be opened or read.
        """
        if file.content_hash is not None:
            return file.content_hash
        digest = self.hash_path(file.path)
        file.content_hash = digest
        return digest

    def hash_path(self, path: str) -> str:
        """Streams the file at path through the algorithm, start to end."""
        hasher = self.algorithm.new()
        with open(path, 'rb') as f:
            while True:
                chunk = f.read(self.chunk_size)
                if not chunk:
                    break
                hasher.update(chunk)
        return hasher.hexdigest()

    def files_equal(self, first: str, second: str) -> bool:
        """
        Reads both files in lockstep and compares them chunk by chunk.
        Any I/O error counts as a mismatch.
        """
        try:
            with open(first, 'rb') as f1, open(second, 'rb') as f2:
                while True:
                    chunk1 = f1.read(self.chunk_size)
                    chunk2 = f2.read(self.chunk_size)
                    if chunk1 != chunk2:
                        return False
                    if not chunk1:
                        return True
        except OSError as e:
            logger.debug(f"Verification failed for {first} vs {second}: {e}")
            return False
