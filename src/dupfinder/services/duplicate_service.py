"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/duplicate_service.py
Pure helpers that derive new group lists after removals, undo and selection changes.
Returned groups are fresh objects; input groups are never mutated.
"""
import copy
from typing import Collection, List, Tuple

from dupfinder.core.models import DuplicateGroup, FileRecord


class DuplicateService:
    @staticmethod
    def copy_groups(groups: Collection[DuplicateGroup]) -> List[DuplicateGroup]:
        """Deep copy keeping ids, so the copy can be edited while readers hold the original."""
        return copy.deepcopy(list(groups))

    @staticmethod
    def files_to_remove(groups: Collection[DuplicateGroup]) -> List[FileRecord]:
        """All files not marked as kept, across every group."""
        return [f for group in groups for f in group.files_to_remove]

    @staticmethod
    def summarize(groups: Collection[DuplicateGroup]) -> Tuple[int, int]:
        """Returns (files in groups, reclaimable bytes)."""
        duplicate_files = sum(len(g.files) for g in groups)
        reclaimable = sum(g.reclaimable_bytes for g in groups)
        return duplicate_files, reclaimable

    @staticmethod
    def remove_files_from_groups(groups: Collection[DuplicateGroup], file_paths: Collection[str]) -> List[DuplicateGroup]:
        """
        Removes files with the specified paths from all duplicate groups.

        Groups that contain fewer than 2 files after removal are discarded.
        """
        paths = set(file_paths)
        updated_groups = []
        for group in groups:
            filtered_files = [copy.copy(f) for f in group.files if f.path not in paths]
            if len(filtered_files) >= 2:
                updated_groups.append(
                    DuplicateGroup(files=filtered_files, size_per_file=group.size_per_file, id=group.id)
                )
        return updated_groups

    @staticmethod
    def restore_files_to_groups(
            previous_groups: Collection[DuplicateGroup],
            removed_paths: Collection[str],
            restored_paths: Collection[str]) -> List[DuplicateGroup]:
        """
        Rebuilds the group list after an undo.

        previous_groups are the groups from before the removal batch. A member
        survives unless it was removed in that batch and not restored. Groups keep
        their original order and ids; groups with fewer than 2 surviving files are dropped.
        """
        gone = set(removed_paths) - set(restored_paths)

        rebuilt = []
        for group in previous_groups:
            files = [copy.copy(f) for f in group.files if f.path not in gone]
            if len(files) >= 2:
                rebuilt.append(DuplicateGroup(files=files, size_per_file=group.size_per_file, id=group.id))
        return rebuilt
