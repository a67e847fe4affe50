"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models and domain logic for file scanning and deduplication.
"""

import os
import sys
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple

from dupfinder.utils.convert_utils import ConvertUtils


# =============================
# Constants
# =============================

CHUNK_SIZE = 64 * 1024

DEFAULT_EXCLUDED_COMPONENTS: FrozenSet[str] = frozenset({
    ".git", "node_modules", ".Trash", ".DS_Store",
    "Caches", "Application Support", "__pycache__",
})

IMAGE_EXTENSIONS: FrozenSet[str] = frozenset({
    "jpg", "jpeg", "png", "gif", "heic", "heif", "bmp", "tiff", "tif", "webp",
})


def _platform_protected_prefixes() -> Tuple[str, ...]:
    if sys.platform == "darwin":
        return ("/System", "/Library", "/usr", "/bin", "/sbin", "/private/var")
    if sys.platform == "win32":
        system_root = os.environ.get("SystemRoot", r"C:\Windows")
        return (
            system_root,
            os.environ.get("ProgramFiles", r"C:\Program Files"),
            os.environ.get("ProgramFiles(x86)", r"C:\Program Files (x86)"),
            os.environ.get("ProgramData", r"C:\ProgramData"),
        )
    return ("/proc", "/sys", "/dev", "/boot", "/bin", "/sbin",
            "/lib", "/lib64", "/usr", "/etc", "/var/lib")


PROTECTED_PATH_PREFIXES: Tuple[str, ...] = _platform_protected_prefixes()


def is_protected_path(path: str, prefixes: Tuple[str, ...] = PROTECTED_PATH_PREFIXES) -> bool:
    """
    True if the normalized path starts with any normalized prefix.
    This is a plain string prefix test: "/usr" also covers "/usrdata".
    Case is folded where the platform's paths are case-insensitive.
    """
    normalized = os.path.normcase(os.path.normpath(path))
    return any(
        normalized.startswith(os.path.normcase(os.path.normpath(prefix)))
        for prefix in prefixes
    )


# =============================
# Enums
# =============================

class ScanState(Enum):
    """Lifecycle of a single scan session."""
    IDLE = "idle"
    ENUMERATING = "enumerating"
    GROUPING = "grouping"
    DONE = "done"
    CANCELLED = "cancelled"
    ERRORED = "errored"

    @property
    def is_active(self) -> bool:
        return self in (ScanState.ENUMERATING, ScanState.GROUPING)


class ScanMode(Enum):
    EXACT = "exact"
    SIMILAR = "similar"


class KeepStrategy(Enum):
    """Named strategies for choosing the kept file in each group."""
    NEWEST = "newest"
    OLDEST = "oldest"
    SHORTEST_PATH = "shortest-path"
    PREFERRED_FOLDER = "preferred-folder"


# ======================
#  Core Data Models
# ======================

def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class FileRecord:
    """
    Represents a single file on the file system considered for deduplication.
    Only content_hash and kept change after the record is created.
    """
    path: str
    size: int  # in bytes
    modified: float = 0.0
    created: float = 0.0
    content_hash: Optional[str] = None
    kept: bool = False
    id: str = field(default_factory=_new_id)
    name: Optional[str] = None
    extension: Optional[str] = None

    def __post_init__(self):
        """Automatically extract basename and extension from path if not provided."""
        if self.name is None:
            self.name = os.path.basename(self.path)

        if self.extension is None:
            _, ext = os.path.splitext(self.name)
            self.extension = ext[1:].lower()  # ".JPG" → "jpg"

    def __repr__(self):
        return f"<FileRecord path={self.path}, size={self.size}, kept={self.kept}>"


@dataclass
class DuplicateGroup:
    """
    A set of files believed to be duplicates (exact mode) or near-duplicates (similar mode).
    In exact mode every member has the same size.
    """
    files: List[FileRecord]
    size_per_file: int
    id: str = field(default_factory=_new_id)

    @property
    def reclaimable_bytes(self) -> int:
        """Space recovered by deleting all but one member."""
        if len(self.files) < 2:
            return 0
        return self.size_per_file * (len(self.files) - 1)

    @property
    def kept_file(self) -> Optional[FileRecord]:
        return next((f for f in self.files if f.kept), None)

    @property
    def files_to_remove(self) -> List[FileRecord]:
        return [f for f in self.files if not f.kept]

    def __repr__(self):
        return f"<DuplicateGroup size={self.size_per_file}, count={len(self.files)}>"


@dataclass(frozen=True)
class UndoEntry:
    """Where a trashed file came from and where the trash put it."""
    original_path: str
    trash_path: str


@dataclass
class RemovalResult:
    """Outcome of one removal batch."""
    trashed: Dict[str, str] = field(default_factory=dict)  # original → trash path
    removed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def undo_entries(self) -> List[UndoEntry]:
        return [UndoEntry(original_path=o, trash_path=t) for o, t in self.trashed.items()]


@dataclass(frozen=True)
class ScanSession:
    """
    Immutable snapshot of the orchestrator's state.
    A new snapshot replaces the previous one on every change.
    """
    state: ScanState = ScanState.IDLE
    mode: ScanMode = ScanMode.EXACT
    progress: float = 0.0
    message: str = ""
    groups: Tuple[DuplicateGroup, ...] = ()
    files_scanned: int = 0
    duplicate_files: int = 0
    reclaimable_bytes: int = 0
    undo_entries: Tuple[UndoEntry, ...] = ()

    @property
    def is_scanning(self) -> bool:
        return self.state.is_active


"""
DTO for scan parameters with built-in validation.
Interface-agnostic — used by both the orchestrator and the CLI.
"""

@dataclass(frozen=True)
class ScanConfiguration:
    """Immutable input to a scan, validated on creation."""
    roots: Tuple[str, ...]
    excluded_components: FrozenSet[str] = DEFAULT_EXCLUDED_COMPONENTS
    min_size: int = 0
    extensions: Optional[FrozenSet[str]] = None
    skip_hidden: bool = True
    verify_bytes: bool = False
    distance_threshold: Optional[float] = None
    protected_prefixes: Tuple[str, ...] = PROTECTED_PATH_PREFIXES

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        roots = tuple(str(r) for r in self.roots if str(r).strip())
        if not roots:
            raise ValueError("At least one root directory is required")
        object.__setattr__(self, "roots", roots)

        if self.min_size < 0:
            raise ValueError("Minimum size cannot be negative")

        if self.distance_threshold is not None and self.distance_threshold < 0:
            raise ValueError("Distance threshold cannot be negative")

        # Normalize extensions: lowercase, no leading dot
        if self.extensions is not None:
            normalized = set()
            for ext in self.extensions:
                ext = ext.strip().lower().lstrip(".")
                if ext:
                    normalized.add(ext)
            object.__setattr__(self, "extensions", frozenset(normalized))

        object.__setattr__(self, "excluded_components", frozenset(self.excluded_components))
        object.__setattr__(self, "protected_prefixes", tuple(self.protected_prefixes))

    def is_protected(self, path: str) -> bool:
        return is_protected_path(path, self.protected_prefixes)

    @staticmethod
    def from_human_readable(
            roots: List[str],
            min_size_str: str = "0",
            extensions_str: str = "",
            extra_excluded: Optional[List[str]] = None,
            skip_hidden: bool = True,
            verify_bytes: bool = False,
            distance_threshold: Optional[float] = None,
    ) -> 'ScanConfiguration':
        """
        Factory method to create a configuration from human-readable inputs.
        Useful for CLI argument parsing or GUI input conversion.
        """
        min_size = ConvertUtils.human_to_bytes(min_size_str)

        ext_list = [
            ext.strip() for ext in extensions_str.split(",") if ext.strip()
        ] if extensions_str else []

        return ScanConfiguration(
            roots=tuple(roots),
            excluded_components=DEFAULT_EXCLUDED_COMPONENTS | frozenset(extra_excluded or []),
            min_size=min_size,
            extensions=frozenset(ext_list) if ext_list else None,
            skip_hidden=skip_hidden,
            verify_bytes=verify_bytes,
            distance_threshold=distance_threshold,
        )
