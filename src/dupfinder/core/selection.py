"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/selection.py
Pure selection logic for duplicate groups — zero dependencies outside core.
Every strategy marks exactly one file per non-empty group as kept and clears the rest.

Tie-break: members are scanned in group order (which is enumeration order)
and the first member wins an exact tie.
"""
from typing import Callable, List, Optional

from dupfinder.core.models import DuplicateGroup, FileRecord, KeepStrategy


class SelectionPolicy:
    """
    Applies keep strategies to groups in place.
    Callers that publish groups to concurrent readers should pass copies.
    """

    @staticmethod
    def keep_newest(groups: List[DuplicateGroup]) -> None:
        SelectionPolicy._apply(groups, lambda files: max(files, key=lambda f: f.modified))

    @staticmethod
    def keep_oldest(groups: List[DuplicateGroup]) -> None:
        SelectionPolicy._apply(groups, lambda files: min(files, key=lambda f: f.modified))

    @staticmethod
    def keep_shortest_path(groups: List[DuplicateGroup]) -> None:
        SelectionPolicy._apply(groups, lambda files: min(files, key=lambda f: len(f.path)))

    @staticmethod
    def keep_preferred_folder(groups: List[DuplicateGroup], folder_name: str) -> None:
        """
        Prefers files with a "/<folder_name>/" segment (case-insensitive).
        Among equally preferred files the longest path wins.
        """
        needle = f"/{folder_name.strip('/').lower()}/"

        def score(file: FileRecord):
            path = file.path.replace("\\", "/").lower()
            return (1 if needle in path else 0, len(path))

        SelectionPolicy._apply(groups, lambda files: max(files, key=score))

    @staticmethod
    def apply(groups: List[DuplicateGroup], strategy: KeepStrategy, folder_name: Optional[str] = None) -> None:
        """Dispatches to the strategy by enum value."""
        if strategy == KeepStrategy.NEWEST:
            SelectionPolicy.keep_newest(groups)
        elif strategy == KeepStrategy.OLDEST:
            SelectionPolicy.keep_oldest(groups)
        elif strategy == KeepStrategy.SHORTEST_PATH:
            SelectionPolicy.keep_shortest_path(groups)
        elif strategy == KeepStrategy.PREFERRED_FOLDER:
            if not folder_name:
                raise ValueError("Preferred folder strategy needs a folder name")
            SelectionPolicy.keep_preferred_folder(groups, folder_name)

    @staticmethod
    def set_kept(groups: List[DuplicateGroup], group_id: str, file_id: str) -> bool:
        """
        Marks one specific file as kept in one group.
        Returns False (and changes nothing) if the group or file is unknown.
        """
        for group in groups:
            if group.id != group_id:
                continue
            if not any(f.id == file_id for f in group.files):
                return False
            for file in group.files:
                file.kept = file.id == file_id
            return True
        return False

    @staticmethod
    def _apply(groups: List[DuplicateGroup], pick: Callable[[List[FileRecord]], FileRecord]) -> None:
        # Python's max()/min() return the first of equal candidates
        for group in groups:
            if not group.files:
                continue
            chosen = pick(group.files)
            for file in group.files:
                file.kept = file is chosen
