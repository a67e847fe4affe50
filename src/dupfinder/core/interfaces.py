"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/interfaces.py

Defines core interfaces (Protocols) used throughout the deduplication system.
These protocols use structural typing so that concrete implementations
(including test doubles) can be swapped in without inheritance.

Key Components:
---------------
- HashAlgorithm: Factory for incremental hash objects (SHA-256, xxHash, ...).
- FileEnumerator: Walks configured roots and returns candidate FileRecords.
- DuplicateDetector: Turns candidate FileRecords into DuplicateGroups.
- ImageEmbeddingProvider: Maps image bytes to a fixed-length numeric vector.
- TrashBackend: Moves a file into a reversible trash location.
"""

from typing import Callable, List, Optional, Protocol, Sequence

from dupfinder.core.models import DuplicateGroup, FileRecord, ScanConfiguration, UndoEntry

StoppedFlag = Callable[[], bool]
ProgressCallback = Callable[[float, str], None]
Embedding = Sequence[float]


class HashObject(Protocol):
    def update(self, data: bytes) -> None: ...
    def hexdigest(self) -> str: ...


class HashAlgorithm(Protocol):
    """
    Interface for generic incremental hash algorithms.

    Allows plugging in different hashing functions like SHA-256 or xxHash
    without affecting the rest of the deduplication logic.
    """
    name: str

    def new(self) -> HashObject:
        """Returns a fresh incremental hash object."""
        ...


class FileEnumerator(Protocol):
    def enumerate(
        self,
        config: ScanConfiguration,
        stopped_flag: Optional[StoppedFlag] = None,
    ) -> List[FileRecord]:
        """
        Return every file under config.roots that passes all filters.

        Args:
            config: Scan configuration with roots and filters.
            stopped_flag: Function that returns True if operation should be cancelled.

        Returns:
            Matching files in walk order, empty if cancelled.
        """
        ...


class DuplicateDetector(Protocol):
    def find_groups(
        self,
        files: List[FileRecord],
        stopped_flag: Optional[StoppedFlag] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> List[DuplicateGroup]:
        ...


class ImageEmbeddingProvider(Protocol):
    """
    Opaque feature extractor for images.

    embed() raises (any Exception) when the bytes cannot be turned into a vector;
    distance() is symmetric and lower means more similar.
    """
    default_threshold: float

    def embed(self, data: bytes) -> Embedding: ...

    def distance(self, a: Embedding, b: Embedding) -> float: ...


class TrashBackend(Protocol):
    def trash(self, path: str) -> Optional[str]:
        """
        Move path to the trash.

        Returns:
            The location the file now lives at, or None when it cannot be resolved.

        Raises:
            OSError or RuntimeError when the file could not be trashed.
        """
        ...

    def restore(self, entry: UndoEntry) -> None:
        """Move entry.trash_path back to entry.original_path. Raises OSError on failure."""
        ...
