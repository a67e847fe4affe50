"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/deduplicator.py
Exact duplicate detection pipeline:
    size buckets → content hash → (optional) byte-for-byte verification

Progress covers the hashing stage up to 95%; the rest is left for the
caller's finalization. Cancellation is polled between size buckets and
before each file is hashed.
"""
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from dupfinder.core.grouper import FileGrouperImpl
from dupfinder.core.interfaces import DuplicateDetector, ProgressCallback, StoppedFlag
from dupfinder.core.models import DuplicateGroup, FileRecord
from dupfinder.core.progress import ProgressCounter

logger = logging.getLogger(__name__)

HASHING_PROGRESS_SHARE = 0.95
HASHING_MESSAGE = "Hashing files (grouped by size)…"


def default_worker_count() -> int:
    return min(8, os.cpu_count() or 1)


class ExactDuplicateDetector(DuplicateDetector):
    """
    Groups files whose bytes are identical.
    Every member of a returned group has the same size and the same content hash.
    """

    def __init__(self, grouper: FileGrouperImpl = None, verify_bytes: bool = False,
                 max_workers: Optional[int] = None):
        self.grouper = grouper or FileGrouperImpl()
        self.verify_bytes = verify_bytes
        self.max_workers = max_workers or default_worker_count()

    def find_groups(
        self,
        files: List[FileRecord],
        stopped_flag: Optional[StoppedFlag] = None,
        progress_callback: Optional[ProgressCallback] = None
    ) -> List[DuplicateGroup]:
        """
        Main pipeline.
        Args:
            files: Enumerated candidate files
            stopped_flag: Function that returns True if operation should be stopped.
            progress_callback: Receives (fraction, message) after every hashed file.
        Returns:
            Duplicate groups sorted by descending file size, or [] if cancelled.
        """
        start_time = time.time()

        size_buckets = self.grouper.group_by_size(files)
        total_candidates = sum(len(bucket) for bucket in size_buckets.values())
        logger.debug(f"{len(size_buckets)} size buckets, {total_candidates} candidates to hash")

        counter = ProgressCounter(
            total_candidates, progress_callback, HASHING_MESSAGE, scale=HASHING_PROGRESS_SHARE
        )
        hash_groups: List[List[FileRecord]] = []

        with ThreadPoolExecutor(max_workers=self.max_workers,
                                thread_name_prefix="dupfinder-hash") as executor:
            for size, bucket in size_buckets.items():
                if stopped_flag and stopped_flag():
                    logger.debug("Hashing cancelled")
                    return []

                by_hash = self.grouper.group_by_content_hash(
                    bucket, executor, stopped_flag=stopped_flag, on_file_done=counter.advance
                )
                hash_groups.extend(by_hash.values())

        if stopped_flag and stopped_flag():
            return []

        if self.verify_bytes:
            hash_groups = self._verify_groups(hash_groups, stopped_flag)
            if stopped_flag and stopped_flag():
                return []

        groups = [
            DuplicateGroup(files=members, size_per_file=members[0].size)
            for members in hash_groups if len(members) >= 2
        ]
        # Sort by descending size
        groups.sort(key=lambda g: -g.size_per_file)

        logger.debug(f"Exact detection found {len(groups)} groups in {time.time() - start_time:.3f}s")
        return groups

    def _verify_groups(
            self,
            hash_groups: List[List[FileRecord]],
            stopped_flag: Optional[StoppedFlag]) -> List[List[FileRecord]]:
        """
        Compares every member against the first one, byte for byte.
        Members that differ (or cannot be read) are dropped.
        """
        verified_groups = []
        for members in hash_groups:
            if stopped_flag and stopped_flag():
                return []
            reference = members[0]
            verified = [reference]
            for candidate in members[1:]:
                if self.grouper.hasher.files_equal(reference.path, candidate.path):
                    verified.append(candidate)
                else:
                    logger.debug(f"Hash collision or read error, dropping {candidate.path}")
            if len(verified) >= 2:
                verified_groups.append(verified)
        return verified_groups
