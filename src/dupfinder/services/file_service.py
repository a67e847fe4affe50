"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
Cross-platform file operations: trash and backup copies.
Trash backends move a file away and report where it went, so the move can be undone.
"""
import logging
import os
import shutil
import sys
from pathlib import Path
from typing import List, Optional
from urllib.parse import unquote

from send2trash import send2trash

from dupfinder.core.interfaces import TrashBackend
from dupfinder.core.models import UndoEntry

logger = logging.getLogger(__name__)


class FileService:
    """
    Cross-platform file operations.
    Uses universal system tools with proper error handling.
    """

    @staticmethod
    def move_to_trash(file_path: str):
        """Moves a file to the system trash."""
        path = Path(file_path).absolute()

        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        try:
            send2trash(str(path))
        except Exception as e:
            raise RuntimeError(f"Failed to move to trash: {e}") from e

    @staticmethod
    def unique_destination(directory: Path, filename: str) -> Path:
        """
        Returns directory/filename, or directory/stem_N.ext with the first
        free N >= 1 if that name is taken.
        """
        dest = directory / filename
        if not dest.exists():
            return dest
        stem, ext = os.path.splitext(filename)
        counter = 1
        while True:
            dest = directory / f"{stem}_{counter}{ext}"
            if not dest.exists():
                return dest
            counter += 1

    @staticmethod
    def copy_to_backup(file_path: str, backup_dir: Path) -> Path:
        """Copies file into backup_dir under a non-conflicting name."""
        source = Path(file_path)
        dest = FileService.unique_destination(backup_dir, source.name)
        shutil.copy2(str(source), str(dest))
        return dest


# =============================
# Trash backends
# =============================

class SystemTrash(TrashBackend):
    """
    Platform trash via send2trash.

    send2trash does not report the destination. On freedesktop systems the
    destination is recovered from the .trashinfo record; elsewhere it is unknown
    and trash() returns None.
    """

    def trash(self, path: str) -> Optional[str]:
        original = str(Path(path).absolute())
        FileService.move_to_trash(original)
        if sys.platform in ("win32", "darwin"):
            return None
        return self._find_freedesktop_trash_path(original)

    def restore(self, entry: UndoEntry) -> None:
        move_back(entry)
        info_file = self._info_file_for(Path(entry.trash_path))
        if info_file is not None and info_file.exists():
            info_file.unlink()

    @staticmethod
    def _info_file_for(trashed: Path) -> Optional[Path]:
        # <trash>/files/<name>  ↔  <trash>/info/<name>.trashinfo
        if trashed.parent.name != "files":
            return None
        return trashed.parent.parent / "info" / f"{trashed.name}.trashinfo"

    @staticmethod
    def _candidate_trash_dirs(original: str) -> List[Path]:
        data_home = os.environ.get("XDG_DATA_HOME") or os.path.expanduser("~/.local/share")
        candidates = [Path(data_home) / "Trash"]

        # Trash directories on the volume holding the file
        mount = Path(original).parent
        while not os.path.ismount(str(mount)) and mount != mount.parent:
            mount = mount.parent
        uid = os.getuid() if hasattr(os, "getuid") else 0
        candidates.append(mount / f".Trash-{uid}")
        candidates.append(mount / ".Trash" / str(uid))
        return candidates

    @staticmethod
    def _read_info_path(info_file: Path) -> Optional[str]:
        try:
            for line in info_file.read_text(encoding="utf-8", errors="replace").splitlines():
                if line.startswith("Path="):
                    return unquote(line[len("Path="):].strip())
        except OSError:
            return None
        return None

    def _find_freedesktop_trash_path(self, original: str) -> Optional[str]:
        """Most recent trash entry whose recorded origin is original."""
        best = None
        best_mtime = -1.0
        for trash_dir in self._candidate_trash_dirs(original):
            info_dir = trash_dir / "info"
            if not info_dir.is_dir():
                continue
            topdir = trash_dir.parent if trash_dir.name.startswith(".Trash-") else trash_dir.parent.parent
            for info_file in info_dir.glob("*.trashinfo"):
                recorded = self._read_info_path(info_file)
                if recorded is None:
                    continue
                if not os.path.isabs(recorded):
                    recorded = str(topdir / recorded)
                if os.path.normpath(recorded) != os.path.normpath(original):
                    continue
                trashed = trash_dir / "files" / info_file.name[:-len(".trashinfo")]
                try:
                    mtime = info_file.stat().st_mtime
                except OSError:
                    continue
                if trashed.exists() and mtime >= best_mtime:
                    best, best_mtime = trashed, mtime
        if best is None:
            logger.debug(f"Could not resolve trash location for {original}")
        return str(best) if best else None


class DirectoryTrash(TrashBackend):
    """Moves files into a plain directory. Name collisions get a numeric suffix."""

    def __init__(self, directory: str):
        self.directory = Path(directory)

    def trash(self, path: str) -> Optional[str]:
        self.directory.mkdir(parents=True, exist_ok=True)
        source = Path(path)
        if not source.exists():
            raise FileNotFoundError(f"File not found: {source}")
        dest = FileService.unique_destination(self.directory, source.name)
        shutil.move(str(source), str(dest))
        return str(dest)

    def restore(self, entry: UndoEntry) -> None:
        move_back(entry)


def move_back(entry: UndoEntry) -> None:
    """Moves a trashed file to its original location, recreating the parent directory."""
    original = Path(entry.original_path)
    if original.exists():
        raise FileExistsError(f"Original location is occupied: {original}")
    original.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(entry.trash_path, str(original))
