"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/removal_service.py
Reversible removal: optional backup copy, move to trash, and undo of the last batch.
"""
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from dupfinder.core.interfaces import TrashBackend
from dupfinder.core.models import PROTECTED_PATH_PREFIXES, UndoEntry, is_protected_path
from dupfinder.services.file_service import FileService, SystemTrash

logger = logging.getLogger(__name__)


class RemovalManager:
    """
    Moves files to a trash backend and restores them on request.
    Protected paths are never touched, even when explicitly requested.
    """

    def __init__(self, trash_backend: TrashBackend = None,
                 protected_prefixes: Tuple[str, ...] = PROTECTED_PATH_PREFIXES):
        self.trash_backend = trash_backend or SystemTrash()
        self.protected_prefixes = tuple(protected_prefixes)

    def is_protected(self, path: str) -> bool:
        return is_protected_path(path, self.protected_prefixes)

    def move_to_trash(self, paths: Iterable[str], backup_dir: Optional[str] = None) -> Dict[str, str]:
        """
        Backs up (optionally) and trashes every non-protected path.

        Args:
            paths: Files to remove.
            backup_dir: Directory to copy each file into first. Created if missing.

        Returns:
            Mapping original path → trash path for files whose trash location is known.

        Raises:
            OSError: If backup_dir cannot be created. Nothing has been touched in that case.
        """
        backup_path = None
        if backup_dir:
            backup_path = Path(backup_dir)
            backup_path.mkdir(parents=True, exist_ok=True)

        results: Dict[str, str] = {}
        for path in paths:
            if self.is_protected(path):
                logger.warning(f"Refusing to remove protected path: {path}")
                continue

            if backup_path is not None:
                try:
                    dest = FileService.copy_to_backup(path, backup_path)
                    logger.debug(f"Backed up {path} → {dest}")
                except OSError as e:
                    logger.warning(f"Backup failed for {path}: {e}")

            try:
                trash_path = self.trash_backend.trash(path)
            except (OSError, RuntimeError) as e:
                logger.warning(f"Failed to move {path} to trash: {e}")
                continue

            if trash_path:
                results[path] = trash_path
            else:
                logger.debug(f"Trashed {path}, location unknown (not undoable)")
        return results

    def undo(self, entries: Iterable[UndoEntry]) -> List[str]:
        """
        Moves trashed files back to where they came from.
        Entries whose trash file no longer exists are skipped. Never raises.

        Returns:
            Original paths that were restored.
        """
        restored = []
        for entry in entries:
            if not Path(entry.trash_path).exists():
                logger.debug(f"Trash file missing, skipping: {entry.trash_path}")
                continue
            try:
                self.trash_backend.restore(entry)
                restored.append(entry.original_path)
            except (OSError, RuntimeError) as e:
                logger.warning(f"Failed to restore {entry.original_path}: {e}")
        return restored
