"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/similar_image_finder.py

Finds groups of visually similar images.
Embeddings come from an injected ImageEmbeddingProvider; grouping is a single
greedy pass where every later image is compared only with the group's seed.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

from dupfinder.core.deduplicator import default_worker_count
from dupfinder.core.interfaces import (
    DuplicateDetector, Embedding, ImageEmbeddingProvider, ProgressCallback, StoppedFlag)
from dupfinder.core.models import IMAGE_EXTENSIONS, DuplicateGroup, FileRecord
from dupfinder.core.progress import ProgressCounter

logger = logging.getLogger(__name__)

EMBEDDING_MESSAGE = "Computing image features…"
COMPARING_MESSAGE = "Comparing images…"
ANCHOR_PROGRESS_INTERVAL = 10


class SimilarityDetector(DuplicateDetector):
    """
    Groups near-duplicate images by embedding distance.

    Clustering is star-shaped: membership is decided against the seed only,
    so two members of the same group may be further apart than the threshold.
    """

    def __init__(self, provider: ImageEmbeddingProvider, threshold: Optional[float] = None,
                 max_workers: Optional[int] = None):
        """
        Args:
            provider: Produces embeddings and measures distance between them.
            threshold: Maximum distance to the seed (inclusive). Defaults to provider.default_threshold.
            max_workers: Upper bound on concurrent embedding jobs.
        """
        self.provider = provider
        self.threshold = float(threshold if threshold is not None else provider.default_threshold)
        self.max_workers = max_workers or default_worker_count()

    @staticmethod
    def is_image(file: FileRecord) -> bool:
        return file.extension in IMAGE_EXTENSIONS

    def find_groups(
            self,
            files: List[FileRecord],
            stopped_flag: Optional[StoppedFlag] = None,
            progress_callback: Optional[ProgressCallback] = None
    ) -> List[DuplicateGroup]:
        """
        Find groups of visually similar images.

        Returns:
            List of DuplicateGroup objects, each containing ≥2 similar images,
            or [] if the run was cancelled.
        """
        image_files = [f for f in files if self.is_image(f)]
        if len(image_files) < 2:
            return []

        embedded = self._embed_all(image_files, stopped_flag, progress_callback)
        if stopped_flag and stopped_flag():
            return []

        if progress_callback:
            progress_callback(0.5, COMPARING_MESSAGE)

        clusters = self.cluster(embedded, stopped_flag, progress_callback)
        if clusters is None:
            return []

        return [
            DuplicateGroup(files=members, size_per_file=members[0].size)
            for members in clusters
        ]

    def _embed_all(
            self,
            image_files: List[FileRecord],
            stopped_flag: Optional[StoppedFlag],
            progress_callback: Optional[ProgressCallback]) -> List[Tuple[FileRecord, Embedding]]:
        """Embeds images concurrently; failures are dropped, order is preserved."""
        counter = ProgressCounter(len(image_files), progress_callback, EMBEDDING_MESSAGE, scale=0.5)

        def embed_one(file: FileRecord) -> Optional[Embedding]:
            if stopped_flag and stopped_flag():
                return None
            try:
                with open(file.path, 'rb') as f:
                    data = f.read()
                return self.provider.embed(data)
            except Exception as e:
                logger.debug(f"Failed to compute embedding for {file.path}: {e}")
                return None
            finally:
                counter.advance()

        with ThreadPoolExecutor(max_workers=self.max_workers,
                                thread_name_prefix="dupfinder-embed") as executor:
            embeddings = list(executor.map(embed_one, image_files))

        return [
            (file, embedding)
            for file, embedding in zip(image_files, embeddings)
            if embedding is not None
        ]

    def cluster(
            self,
            embedded: List[Tuple[FileRecord, Embedding]],
            stopped_flag: Optional[StoppedFlag] = None,
            progress_callback: Optional[ProgressCallback] = None
    ) -> Optional[List[List[FileRecord]]]:
        """
        Single greedy pass in input order. Returns None if cancelled.
        """
        count = len(embedded)
        assigned = set()
        clusters = []

        for i in range(count):
            if stopped_flag and stopped_flag():
                return None
            if i in assigned:
                continue

            seed_file, seed_embedding = embedded[i]
            members = [seed_file]
            assigned.add(i)

            for j in range(i + 1, count):
                if j in assigned:
                    continue
                try:
                    distance = self.provider.distance(seed_embedding, embedded[j][1])
                except Exception as e:
                    logger.debug(f"Distance failed for {seed_file.path} vs {embedded[j][0].path}: {e}")
                    continue
                if distance <= self.threshold:
                    members.append(embedded[j][0])
                    assigned.add(j)

            if len(members) >= 2:
                clusters.append(members)

            if progress_callback and (i + 1) % ANCHOR_PROGRESS_INTERVAL == 0:
                progress_callback(0.5 + 0.5 * (i + 1) / count, COMPARING_MESSAGE)

        return clusters
