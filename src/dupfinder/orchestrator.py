"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

orchestrator.py
Drives a scan from enumeration to grouped results and exposes the
selection, removal and undo operations on its outcome.

The current ScanSession is an immutable snapshot. Every change builds a new
snapshot and swaps it in under a lock, so readers never see a half-updated
result. Listeners are called with each new snapshot from whichever thread
produced it (the scan thread for progress, the caller's thread otherwise).
"""
import dataclasses
import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, List, Optional

from dupfinder.core.deduplicator import ExactDuplicateDetector
from dupfinder.core.embeddings import PerceptualHashEmbedder
from dupfinder.core.grouper import FileGrouperImpl
from dupfinder.core.hasher import ContentHasher
from dupfinder.core.interfaces import (
    DuplicateDetector, FileEnumerator, HashAlgorithm, ImageEmbeddingProvider)
from dupfinder.core.models import (
    FileRecord, KeepStrategy, RemovalResult, ScanConfiguration, ScanMode, ScanSession, ScanState)
from dupfinder.core.progress import CancellationToken
from dupfinder.core.scanner import FileEnumeratorImpl
from dupfinder.core.selection import SelectionPolicy
from dupfinder.core.similar_image_finder import SimilarityDetector
from dupfinder.services.duplicate_service import DuplicateService
from dupfinder.services.removal_service import RemovalManager

logger = logging.getLogger(__name__)

ENUMERATING_MESSAGE = "Enumerating files…"
DONE_MESSAGE = "Done"
CANCELLED_MESSAGE = "Cancelled"

SessionListener = Callable[[ScanSession], None]


class ScanOrchestrator:
    """
    Owns one scan session at a time.

    Scans run on a private single-thread executor; the heavy lifting inside a
    scan (hashing, embedding) uses the detectors' own bounded pools.
    """

    def __init__(
            self,
            enumerator: FileEnumerator = None,
            embedding_provider: ImageEmbeddingProvider = None,
            removal_manager: RemovalManager = None,
            hash_algorithm: HashAlgorithm = None,
            max_workers: Optional[int] = None):
        self.enumerator = enumerator or FileEnumeratorImpl()
        self.embedding_provider = embedding_provider
        self.removal_manager = removal_manager or RemovalManager()
        self.hash_algorithm = hash_algorithm
        self.max_workers = max_workers

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="dupfinder-scan")
        self._lock = threading.RLock()
        self._session = ScanSession()
        self._listeners: List[SessionListener] = []
        self._token: Optional[CancellationToken] = None
        self._future: Optional[Future] = None
        self._groups_before_removal = ()
        self._last_removed_paths: List[str] = []

    # ------------------------------------------------------------------
    # Session state
    # ------------------------------------------------------------------

    @property
    def session(self) -> ScanSession:
        with self._lock:
            return self._session

    def add_listener(self, listener: SessionListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _publish(self, session: ScanSession) -> None:
        with self._lock:
            self._session = session
            listeners = list(self._listeners)
            # Notify while holding the lock so listeners see snapshots in order
            for listener in listeners:
                try:
                    listener(session)
                except Exception:
                    logger.exception("Session listener failed")

    def _update_if_current(self, token: CancellationToken, **changes) -> None:
        """Applies changes only while token still belongs to the running scan."""
        with self._lock:
            if self._token is not token:
                return
            self._publish(dataclasses.replace(self._session, **changes))

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def start_scan(self, config: ScanConfiguration) -> Future:
        """Starts an exact-duplicate scan, cancelling any active one first."""
        detector = ExactDuplicateDetector(
            grouper=FileGrouperImpl(ContentHasher(self.hash_algorithm)),
            verify_bytes=config.verify_bytes,
            max_workers=self.max_workers,
        )
        return self._start(config, ScanMode.EXACT, detector)

    def start_similarity_scan(self, config: ScanConfiguration, threshold: Optional[float] = None) -> Future:
        """
        Starts a similar-image scan, cancelling any active one first.
        Threshold falls back to config.distance_threshold, then to the provider default.
        """
        if threshold is None:
            threshold = config.distance_threshold
        if threshold is not None and threshold < 0:
            raise ValueError("Distance threshold cannot be negative")
        if self.embedding_provider is None:
            self.embedding_provider = PerceptualHashEmbedder()
        detector = SimilarityDetector(self.embedding_provider, threshold=threshold,
                                      max_workers=self.max_workers)
        return self._start(config, ScanMode.SIMILAR, detector)

    def _start(self, config: ScanConfiguration, mode: ScanMode, detector: DuplicateDetector) -> Future:
        with self._lock:
            if self._token is not None:
                self._token.cancel()
            token = CancellationToken()
            self._token = token
            self._groups_before_removal = ()
            self._last_removed_paths = []
            self._publish(ScanSession(
                state=ScanState.ENUMERATING,
                mode=mode,
                progress=0.0,
                message=ENUMERATING_MESSAGE,
            ))
            logger.info(f"Starting {mode.value} scan of {len(config.roots)} root(s)")
            # The previous job (if any) exits at its next checkpoint; the
            # single worker thread runs this one right after it.
            self._future = self._executor.submit(self._run, config, detector, token)
            return self._future

    def _run(self, config: ScanConfiguration, detector: DuplicateDetector, token: CancellationToken) -> ScanSession:
        try:
            if token():
                return self._finish_cancelled(token)

            files: List[FileRecord] = self.enumerator.enumerate(config, stopped_flag=token)
            if token():
                return self._finish_cancelled(token)

            logger.info(f"Enumerated {len(files)} files")
            self._update_if_current(token, state=ScanState.GROUPING, files_scanned=len(files))

            groups = detector.find_groups(
                files,
                stopped_flag=token,
                progress_callback=lambda fraction, message: self._report_progress(token, fraction, message),
            )
            if token():
                return self._finish_cancelled(token)

            SelectionPolicy.keep_newest(groups)
            duplicate_files, reclaimable = DuplicateService.summarize(groups)
            with self._lock:
                # cancel() takes the same lock, so it lands either before this check or after Done
                if token():
                    return self._finish_cancelled(token)
                self._update_if_current(
                    token,
                    state=ScanState.DONE,
                    progress=1.0,
                    message=DONE_MESSAGE,
                    groups=tuple(groups),
                    duplicate_files=duplicate_files,
                    reclaimable_bytes=reclaimable,
                )
            logger.info(f"Scan finished: {len(groups)} groups, {duplicate_files} files")
        except Exception as e:
            logger.exception("Scan failed")
            self._update_if_current(token, state=ScanState.ERRORED, message=f"Error: {e}")
        return self.session

    def _finish_cancelled(self, token: CancellationToken) -> ScanSession:
        logger.info("Scan cancelled")
        self._update_if_current(
            token,
            state=ScanState.CANCELLED,
            message=CANCELLED_MESSAGE,
            groups=(),
            duplicate_files=0,
            reclaimable_bytes=0,
        )
        return self.session

    def _report_progress(self, token: CancellationToken, fraction: float, message: str) -> None:
        with self._lock:
            if self._token is not token or not self._session.is_scanning:
                return
            # Never move backwards, even if worker callbacks arrive out of order
            progress = max(self._session.progress, min(fraction, 1.0))
            self._publish(dataclasses.replace(self._session, progress=progress, message=message))

    def cancel(self) -> None:
        """Requests cancellation of the active scan. No-op when nothing is running."""
        with self._lock:
            if self._token is None or not self._session.is_scanning:
                return
            self._token.cancel()

    def wait(self, timeout: Optional[float] = None) -> ScanSession:
        """Blocks until the current scan job finishes and returns the resulting session."""
        with self._lock:
            future = self._future
        if future is not None:
            future.result(timeout=timeout)
        return self.session

    def shutdown(self) -> None:
        self.cancel()
        self._executor.shutdown(wait=True)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def _edit_groups(self, edit: Callable[[list], object]):
        """Runs edit on a copy of the groups and swaps the copy in."""
        with self._lock:
            groups = DuplicateService.copy_groups(self._session.groups)
            result = edit(groups)
            self._publish(dataclasses.replace(self._session, groups=tuple(groups)))
            return result

    def set_kept(self, group_id: str, file_id: str) -> bool:
        """Marks one file as kept in one group. Unknown ids change nothing."""
        with self._lock:
            known = any(
                g.id == group_id and any(f.id == file_id for f in g.files)
                for g in self._session.groups
            )
            if not known:
                logger.debug(f"set_kept ignored: unknown group {group_id} or file {file_id}")
                return False
            return self._edit_groups(lambda groups: SelectionPolicy.set_kept(groups, group_id, file_id))

    def keep_newest(self) -> None:
        self._edit_groups(SelectionPolicy.keep_newest)

    def keep_oldest(self) -> None:
        self._edit_groups(SelectionPolicy.keep_oldest)

    def keep_shortest_path(self) -> None:
        self._edit_groups(SelectionPolicy.keep_shortest_path)

    def keep_preferred_folder(self, folder_name: str) -> None:
        self._edit_groups(lambda groups: SelectionPolicy.keep_preferred_folder(groups, folder_name))

    def apply_strategy(self, strategy: KeepStrategy, folder_name: Optional[str] = None) -> None:
        """Applies a named keep strategy to every group."""
        self._edit_groups(lambda groups: SelectionPolicy.apply(groups, strategy, folder_name))

    def files_to_remove(self) -> List[FileRecord]:
        """Every file not marked kept, in group order."""
        return DuplicateService.files_to_remove(self.session.groups)

    # ------------------------------------------------------------------
    # Removal and undo
    # ------------------------------------------------------------------

    def remove_marked(self, backup_dir: Optional[str] = None) -> RemovalResult:
        """
        Trashes every file not marked kept and drops them from the result.

        Files that could not be removed stay in their groups. The undo entries
        of this batch replace any earlier ones.

        Raises:
            RuntimeError: If a scan is running.
            OSError: If backup_dir cannot be created. Nothing is touched then.
        """
        with self._lock:
            session = self._session
            if session.is_scanning:
                raise RuntimeError("Cannot remove files while a scan is running")
            paths = [f.path for f in DuplicateService.files_to_remove(session.groups)]

        if not paths:
            return RemovalResult()

        logger.info(f"Removing {len(paths)} file(s)")
        trashed = self.removal_manager.move_to_trash(paths, backup_dir=backup_dir)

        removed = [p for p in paths if p in trashed or not os.path.lexists(p)]
        removed_set = set(removed)
        failed = [p for p in paths if p not in removed_set]
        result = RemovalResult(trashed=trashed, removed=removed, failed=failed)

        with self._lock:
            current = self._session
            groups = DuplicateService.remove_files_from_groups(current.groups, removed)
            SelectionPolicy.keep_newest(groups)
            duplicate_files, reclaimable = DuplicateService.summarize(groups)
            self._groups_before_removal = current.groups
            self._last_removed_paths = removed
            self._publish(dataclasses.replace(
                current,
                groups=tuple(groups),
                duplicate_files=duplicate_files,
                reclaimable_bytes=reclaimable,
                undo_entries=tuple(result.undo_entries),
            ))

        if failed:
            logger.warning(f"{len(failed)} file(s) could not be removed")
        return result

    def undo_last_removal(self) -> List[str]:
        """
        Restores the last removal batch. Restored files rejoin their groups.
        Returns the original paths that came back; [] if there is nothing to undo.
        """
        with self._lock:
            entries = self._session.undo_entries
        if not entries:
            return []

        restored = self.removal_manager.undo(entries)
        logger.info(f"Restored {len(restored)} of {len(entries)} file(s)")

        with self._lock:
            current = self._session
            groups = DuplicateService.restore_files_to_groups(
                self._groups_before_removal, self._last_removed_paths, restored)
            SelectionPolicy.keep_newest(groups)
            duplicate_files, reclaimable = DuplicateService.summarize(groups)
            self._groups_before_removal = ()
            self._last_removed_paths = []
            self._publish(dataclasses.replace(
                current,
                groups=tuple(groups),
                duplicate_files=duplicate_files,
                reclaimable_bytes=reclaimable,
                undo_entries=(),
            ))
        return restored
