"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

gui/bridge.py
Re-emits ScanOrchestrator session changes as Qt signals.
Signals are queued to receivers living in the GUI thread, so widgets can be
updated from slots even though sessions are published from the scan thread.
"""
from PySide6.QtCore import QMutex, QMutexLocker, QObject, Signal

from dupfinder.core.models import ScanSession, ScanState
from dupfinder.orchestrator import ScanOrchestrator

TERMINAL_STATES = (ScanState.DONE, ScanState.CANCELLED, ScanState.ERRORED)


class SessionSignals(QObject):
    """Separate QObject to hold signals."""
    progress = Signal(float, str)     # fraction, message
    state_changed = Signal(str)       # ScanState value
    finished = Signal(object)         # final ScanSession


class SessionBridge:
    """
    Subscribes to an orchestrator and translates snapshots into signals.

    progress is emitted only while a scan is active; finished once per scan,
    when it reaches Done, Cancelled or Errored.
    """

    def __init__(self, orchestrator: ScanOrchestrator):
        self.orchestrator = orchestrator
        self.signals = SessionSignals()
        self._mutex = QMutex()
        self._last_state = orchestrator.session.state
        self._attached = True
        orchestrator.add_listener(self.on_session)

    def detach(self):
        """Stops forwarding. Safe to call more than once."""
        with QMutexLocker(self._mutex):
            if not self._attached:
                return
            self._attached = False
        self.orchestrator.remove_listener(self.on_session)

    def on_session(self, session: ScanSession):
        with QMutexLocker(self._mutex):
            if not self._attached:
                return
            previous = self._last_state
            self._last_state = session.state
            try:
                if session.is_scanning:
                    self.signals.progress.emit(session.progress, session.message)
                if session.state != previous:
                    self.signals.state_changed.emit(session.state.value)
                    if session.state in TERMINAL_STATES:
                        self.signals.finished.emit(session)
            except RuntimeError:
                # Underlying C++ object already deleted (window closed)
                self._attached = False
