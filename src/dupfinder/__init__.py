"""
dupfinder — duplicate file finder with similar-image detection and safe, undoable removal.

Core features:
- Exact duplicates: size buckets → streaming content hash (SHA-256 or xxHash128) → optional byte check
- Similar images: perceptual embeddings (pHash via ImageHash) with greedy seed clustering
- Keep strategies: newest, oldest, shortest path, preferred folder
- Removal to system trash (via send2trash) with optional backup copies and undo
- CLI interface for headless usage; optional Qt signal bridge (install with [gui] extra)
"""

from importlib.metadata import PackageNotFoundError, version as _version

try:
    __version__ = _version("dupfinder")
except PackageNotFoundError:
    # Running from a source checkout without installation
    __version__ = "0.0.0"

# Public API — only what users should import directly
from dupfinder.core import (
    DuplicateGroup, FileRecord, KeepStrategy, RemovalResult, ScanConfiguration, ScanMode,
    ScanSession, ScanState, UndoEntry, PerceptualHashEmbedder)
from dupfinder.orchestrator import ScanOrchestrator
from dupfinder.services import DirectoryTrash, RemovalManager, SystemTrash
from dupfinder.utils.convert_utils import ConvertUtils

__all__ = [
    "__version__",
    "ScanOrchestrator",
    "ScanConfiguration",
    "ScanSession",
    "ScanState",
    "ScanMode",
    "KeepStrategy",
    "FileRecord",
    "DuplicateGroup",
    "UndoEntry",
    "RemovalResult",
    "PerceptualHashEmbedder",
    "RemovalManager",
    "SystemTrash",
    "DirectoryTrash",
    "ConvertUtils",
]
