"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Implements file enumeration over one or more root directories.
Features:
- Walks every configured root with os.walk, never following symlinks
- Skips entries that cannot be read instead of aborting the walk
- Applies hidden/excluded/protected/size/extension filters in a fixed order
- De-duplicates files reachable from overlapping roots by resolved path
"""

import os
import stat
import sys
import time
from pathlib import Path
from typing import List, Optional, Set
import logging

logger = logging.getLogger(__name__)

# Local imports
from dupfinder.core.models import FileRecord, ScanConfiguration
from dupfinder.core.interfaces import FileEnumerator, StoppedFlag

_WINDOWS_HIDDEN = getattr(stat, "FILE_ATTRIBUTE_HIDDEN", 0x2)
_MAC_HIDDEN = getattr(stat, "UF_HIDDEN", 0x8000)


class FileEnumeratorImpl(FileEnumerator):
    """
    Enumerates candidate files for deduplication.
    Stateless apart from its logger: every call to enumerate() is independent.
    """

    def enumerate(
            self,
            config: ScanConfiguration,
            stopped_flag: Optional[StoppedFlag] = None) -> List[FileRecord]:
        """
        Walks every root in config and returns files passing all filters.
        Never raises for per-entry I/O errors. Returns [] when cancelled.
        """
        logger.debug(f"Roots: {config.roots}")
        logger.debug(f"Filters: min_size={config.min_size}, extensions={config.extensions}, "
                     f"skip_hidden={config.skip_hidden}")

        found_files: List[FileRecord] = []
        seen: Set[str] = set()
        start_time = time.time()

        for root in config.roots:
            # Check for cancellation between roots
            if stopped_flag and stopped_flag():
                logger.debug("Enumeration cancelled")
                return []

            root_path = Path(root)
            if not root_path.is_dir():
                logger.warning(f"Skipping root that is not a directory: {root}")
                continue

            if not self._walk_root(root_path, config, found_files, seen, stopped_flag):
                logger.debug("Enumeration interrupted by user")
                return []

        logger.debug(f"Total enumeration time: {time.time() - start_time:.2f} seconds")
        logger.debug(f"Enumeration completed. Found {len(found_files)} matching files.")
        return found_files

    def _walk_root(
            self,
            root_path: Path,
            config: ScanConfiguration,
            found_files: List[FileRecord],
            seen: Set[str],
            stopped_flag: Optional[StoppedFlag]) -> bool:
        """Walks a single root. Returns False if cancelled mid-walk."""

        def on_error(error: OSError) -> None:
            logger.debug(f"Skipping unreadable directory: {error}")

        for root, dirs, files in os.walk(str(root_path), onerror=on_error):
            if stopped_flag and stopped_flag():
                return False

            # Pre-filter subdirectories BEFORE os.walk enters them
            dirs[:] = [d for d in dirs if self._prefilter_dir(Path(root) / d, config)]

            for filename in files:
                if stopped_flag and stopped_flag():
                    return False

                record = self._process_file(Path(root) / filename, config)
                if record is None:
                    continue

                resolved = os.path.realpath(record.path)
                if resolved in seen:
                    logger.debug(f"Skipping file already reached from another root: {record.path}")
                    continue
                seen.add(resolved)
                found_files.append(record)
        return True

    @staticmethod
    def _is_system_trash(path: Path) -> bool:
        """
        Check if path belongs to OS trash/recycle bin (cross-platform).
        Returns False on any error.
        """
        try:
            path_str = str(path.resolve(strict=False))

            if sys.platform == "win32":
                return "$Recycle.Bin" in path_str or "\\Recycler\\" in path_str
            if sys.platform == "darwin":
                return "/.Trash/" in path_str or path_str.endswith("/.Trash")
            # Linux/BSD: freedesktop.org standard locations
            return path_str.endswith(".local/share/Trash") or ".local/share/Trash/" in path_str \
                or "/.Trash-" in path_str
        except (OSError, ValueError):
            return False

    def _prefilter_dir(self, path: Path, config: ScanConfiguration) -> bool:
        """Pre-filter directories: skip excluded, protected and trash locations, and symlinks."""
        if path.name in config.excluded_components:
            logger.debug(f"Skipping excluded directory: {path}")
            return False

        if config.is_protected(str(path)):
            logger.debug(f"Skipping protected directory: {path}")
            return False

        if FileEnumeratorImpl._is_system_trash(path):
            logger.debug(f"Skipping system trash directory: {path}")
            return False

        try:
            return not path.is_symlink()
        except OSError:
            logger.debug(f"Skipping inaccessible directory: {path}")
            return False

    @staticmethod
    def _is_hidden(path: Path, stat_result: os.stat_result) -> bool:
        if path.name.startswith("."):
            return True
        flags = getattr(stat_result, "st_flags", 0)
        if flags & _MAC_HIDDEN:
            return True
        attributes = getattr(stat_result, "st_file_attributes", 0)
        return bool(attributes & _WINDOWS_HIDDEN)

    def _process_file(self, path: Path, config: ScanConfiguration) -> Optional[FileRecord]:
        """
        Process an individual path and return a FileRecord if it passes all filters.
        Filters run in a fixed order: regular file, hidden, excluded component,
        protected prefix, zero size, minimum size, extension allow-list.
        """
        try:
            stat_result = path.lstat()
        except OSError as e:
            logger.debug(f"Could not stat {path}: {e}")
            return None

        # Only regular files (symlinks and directories are rejected here)
        if not stat.S_ISREG(stat_result.st_mode):
            return None

        if config.skip_hidden and self._is_hidden(path, stat_result):
            logger.debug(f"Skipping hidden file: {path}")
            return None

        if any(part in config.excluded_components for part in path.parts):
            logger.debug(f"Skipping {path} (excluded path component)")
            return None

        if config.is_protected(str(path)):
            logger.debug(f"Skipping protected file: {path}")
            return None

        size = stat_result.st_size
        if size <= 0:
            logger.debug(f"Skipping zero-byte file: {path}")
            return None

        if size < config.min_size:
            logger.debug(f"Skipping {path} (size {size} bytes below minimum)")
            return None

        if not self._extension_passes(path, config):
            logger.debug(f"Skipping {path} (extension not allowed)")
            return None

        created = getattr(stat_result, "st_birthtime", stat_result.st_ctime)
        return FileRecord(
            path=str(path.absolute()),
            size=size,
            modified=stat_result.st_mtime,
            created=created,
        )

    @staticmethod
    def _extension_passes(path: Path, config: ScanConfiguration) -> bool:
        """
        Check if file matches the extension allow-list.
        Files without an extension never pass an active allow-list.
        """
        if not config.extensions:
            return True
        ext = path.suffix.lower().lstrip(".")
        return bool(ext) and ext in config.extensions
