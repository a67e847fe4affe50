"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Implements file grouping by size and by content hash.
Hashing fans out over a bounded thread pool but results keep enumeration order.
"""

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional

from dupfinder.core.hasher import ContentHasher
from dupfinder.core.interfaces import StoppedFlag
from dupfinder.core.models import FileRecord

logger = logging.getLogger(__name__)


class FileGrouperImpl:
    """
    Groups FileRecords by a computed key and keeps only groups with 2+ members.
    Uses an injected ContentHasher for flexibility and testability.
    """

    def __init__(self, hasher: ContentHasher = None):
        self.hasher = hasher or ContentHasher()

    def group_by_size(self, files: List[FileRecord]) -> Dict[int, List[FileRecord]]:
        """Groups files by their size."""
        return self._group_by(files, lambda f: f.size)

    def group_by_content_hash(
            self,
            files: List[FileRecord],
            executor: ThreadPoolExecutor,
            stopped_flag: Optional[StoppedFlag] = None,
            on_file_done: Optional[Callable[[], None]] = None) -> Dict[str, List[FileRecord]]:
        """
        Hashes every file on the executor and groups by digest.
        Files that fail to hash, or that were not started because of
        cancellation, are left out.
        """
        def hash_one(file: FileRecord) -> Optional[str]:
            if stopped_flag and stopped_flag():
                return None
            try:
                return self.hasher.compute_hash(file)
            except OSError as e:
                logger.debug(f"Skipping {file.path}: {e}")
                return None
            finally:
                if on_file_done:
                    on_file_done()

        futures = [executor.submit(hash_one, file) for file in files]
        digests = {file.id: future.result() for file, future in zip(files, futures)}
        return self._group_by(files, lambda f: digests[f.id])

    @staticmethod
    def _group_by(files: List[FileRecord], key_func: Callable[[FileRecord], Any]) -> Dict[Any, List[FileRecord]]:
        """
        Helper method to group files by any computed key.
        Files whose key is None are skipped; groups with fewer than two files are dropped.
        Insertion order of both keys and members follows the input order.
        """
        groups = defaultdict(list)
        skipped_files = 0
        for file in files:
            key = key_func(file)
            if key is None:
                skipped_files += 1
                continue
            groups[key].append(file)

        if skipped_files > 0:
            logger.debug(f"Skipped {skipped_files} files without a grouping key")

        return {key: group for key, group in groups.items() if len(group) >= 2}
