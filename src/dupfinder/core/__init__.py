"""
Core deduplication engine — enumerator, hasher, detectors and selection.

This package contains the performance-critical foundation of dupfinder:
- FileEnumeratorImpl: multi-root directory traversal with hidden/excluded/protected/size/extension filters
- ContentHasher + Sha256AlgorithmImpl / XXHashAlgorithmImpl: streaming digests and byte-for-byte checks
- ExactDuplicateDetector: size buckets → content hash → optional verification
- SimilarityDetector + PerceptualHashEmbedder: near-duplicate image clustering
- SelectionPolicy: keep-one strategies over duplicate groups
- Models: FileRecord, DuplicateGroup, ScanConfiguration, ScanSession

All components are pure Python with no GUI dependencies — suitable for CLI and server usage.
"""

from .models import (
    FileRecord, DuplicateGroup, ScanConfiguration, ScanSession, ScanState, ScanMode,
    KeepStrategy, UndoEntry, RemovalResult, DEFAULT_EXCLUDED_COMPONENTS, IMAGE_EXTENSIONS,
    PROTECTED_PATH_PREFIXES, is_protected_path)
from .scanner import FileEnumeratorImpl
from .hasher import ContentHasher, Sha256AlgorithmImpl, XXHashAlgorithmImpl, HASH_ALGORITHMS
from .grouper import FileGrouperImpl
from .deduplicator import ExactDuplicateDetector
from .embeddings import PerceptualHashEmbedder
from .similar_image_finder import SimilarityDetector
from .selection import SelectionPolicy
from .progress import CancellationToken, ProgressCounter

__all__ = [
    "FileRecord",
    "DuplicateGroup",
    "ScanConfiguration",
    "ScanSession",
    "ScanState",
    "ScanMode",
    "KeepStrategy",
    "UndoEntry",
    "RemovalResult",
    "DEFAULT_EXCLUDED_COMPONENTS",
    "IMAGE_EXTENSIONS",
    "PROTECTED_PATH_PREFIXES",
    "is_protected_path",
    "FileEnumeratorImpl",
    "ContentHasher",
    "Sha256AlgorithmImpl",
    "XXHashAlgorithmImpl",
    "HASH_ALGORITHMS",
    "FileGrouperImpl",
    "ExactDuplicateDetector",
    "PerceptualHashEmbedder",
    "SimilarityDetector",
    "SelectionPolicy",
    "CancellationToken",
    "ProgressCounter",
]
