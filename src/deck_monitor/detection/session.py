"""Monitoring session controller.

A `MonitoringSession` owns the snapshot history and change log of one
monitored document and runs the capture, diff and classify cycle on demand.
Every public operation returns a result model; failures are returned as
`ErrorResult` instead of being raised.
"""

import threading
import time
from typing import Any, Optional

from deck_monitor.detection.builder import SnapshotBuilder
from deck_monitor.detection.change_log import ChangeLog
from deck_monitor.detection.classifier import ChangeClassifier
from deck_monitor.detection.diff import DiffEngine
from deck_monitor.errors import (
    InvalidSessionStateError,
    MonitorError,
    NotInitializedError,
)
from deck_monitor.models.enums import SessionState
from deck_monitor.models.results import (
    ChangeLogResult,
    CurrentStateResult,
    DetectChangesResult,
    ErrorResult,
    InitializeResult,
    SessionActionResult,
    SessionResult,
    StateComparison,
)
from deck_monitor.models.snapshot import PresentationSnapshot
from deck_monitor.observability.logging import fields, get_logger
from deck_monitor.observability.metrics import SessionMetrics
from deck_monitor.persistence.in_memory import InMemorySnapshotStore
from deck_monitor.persistence.repository import SnapshotStore
from deck_monitor.providers.base import SnapshotProvider

logger = get_logger(__name__)


def _failure(error: MonitorError) -> ErrorResult:
    return ErrorResult(error=error.detail, code=error.code)


class MonitoringSession:
    """Change tracking over one document.

    States move UNINITIALIZED -> MONITORING -> STOPPED. `clear_log` returns
    the session to UNINITIALIZED from any state.
    """

    def __init__(
        self,
        provider: SnapshotProvider,
        *,
        store: Optional[SnapshotStore] = None,
        change_log: Optional[ChangeLog] = None,
        builder: Optional[SnapshotBuilder] = None,
        diff_engine: Optional[DiffEngine] = None,
        classifier: Optional[ChangeClassifier] = None,
        metrics: Optional[SessionMetrics] = None,
    ):
        """Initialize the session with its collaborators.

        Args:
            provider: Source of document snapshots.
            store: Snapshot history; in-memory when omitted.
            change_log: Change log; a fresh one when omitted.
            builder: Snapshot builder.
            diff_engine: Diff engine; positional slide matching when omitted.
            classifier: Change classifier.
            metrics: Counter sink for polls, failures and change types.
        """
        self.provider = provider
        self.store = store if store is not None else InMemorySnapshotStore()
        self.change_log = change_log if change_log is not None else ChangeLog()
        self.builder = builder or SnapshotBuilder()
        self.diff_engine = diff_engine or DiffEngine()
        self.classifier = classifier or ChangeClassifier()
        self.metrics = metrics or SessionMetrics()
        self.state = SessionState.UNINITIALIZED
        self._lock = threading.RLock()

    def _set_state(self, state: SessionState) -> None:
        if state != self.state:
            logger.info(
                "Session state changed",
                extra=fields(old_state=self.state.value, new_state=state.value),
            )
        self.state = state

    def _build(self) -> PresentationSnapshot:
        try:
            return self.builder.build(self.provider)
        except MonitorError:
            self.metrics.inc("provider_failures")
            logger.exception("Snapshot capture failed")
            raise

    def _unexpected(self, operation: str, error: Exception) -> ErrorResult:
        logger.exception(
            "Unexpected session failure", extra=fields(operation=operation)
        )
        return _failure(
            MonitorError(f"Unexpected failure in {operation}: {error}")
        )

    def initialize(self) -> SessionResult:
        """Starts (or restarts) monitoring from a fresh baseline snapshot."""
        with self._lock:
            try:
                if self.state == SessionState.STOPPED:
                    raise InvalidSessionStateError(
                        "Session is stopped; clear the log before re-initializing"
                    )
                snapshot = self._build()
                self.store.reset(snapshot)
            except MonitorError as e:
                return _failure(e)
            except Exception as e:
                return self._unexpected("initialize", e)

            self.change_log.clear()
            self._set_state(SessionState.MONITORING)
            self.metrics.inc("initializations")
            logger.info(
                "Change tracking initialized",
                extra=fields(
                    presentation_id=snapshot.presentation_id,
                    slide_count=snapshot.slide_count,
                    total_elements=snapshot.total_elements,
                ),
            )
            return InitializeResult(
                presentation_id=snapshot.presentation_id,
                initial_snapshot=snapshot,
            )

    def detect_changes(self) -> SessionResult:
        """Captures the document and reports what changed since the last poll."""
        with self._lock:
            try:
                if self.state != SessionState.MONITORING:
                    raise NotInitializedError(
                        "Change tracking not initialized. Call initialize() first."
                    )
                current = self._build()
                previous = self.store.latest()
                self.metrics.inc("polls")

                if previous is None:
                    self.store.put(current)
                    return DetectChangesResult(
                        current_state=current.summary(),
                        state_comparison=StateComparison(after=current.summary()),
                        message="Initial snapshot stored",
                    )

                started = time.perf_counter()
                differences = self.diff_engine.diff(previous, current)
                processing_time = (time.perf_counter() - started) * 1000.0
                changes = self.classifier.classify_all(
                    differences,
                    detected_at=current.captured_at,
                    processing_time=processing_time,
                )

                self.store.put(current)
                self.change_log.extend(changes)
            except MonitorError as e:
                return _failure(e)
            except Exception as e:
                return self._unexpected("detect_changes", e)

            self.metrics.record_changes(changes)
            before, after = previous.summary(), current.summary()
            logger.info(
                "Detected changes",
                extra=fields(
                    change_count=len(changes),
                    slide_count=current.slide_count,
                    processing_time_ms=round(processing_time, 3),
                ),
            )
            return DetectChangesResult(
                changes=changes,
                change_count=len(changes),
                current_state=after,
                previous_state=before,
                state_comparison=StateComparison(
                    before=before,
                    after=after,
                    slide_count_changed=before.slide_count != after.slide_count,
                    element_count_changed=(
                        before.total_elements != after.total_elements
                    ),
                    time_difference=(
                        after.timestamp - before.timestamp
                    ).total_seconds()
                    * 1000.0,
                    changes_detected=len(changes),
                ),
            )

    def get_change_log(self) -> SessionResult:
        with self._lock:
            entries = self.change_log.entries()
            return ChangeLogResult(changes=entries, total_changes=len(entries))

    def clear_log(self) -> SessionResult:
        """Drops all history and returns the session to UNINITIALIZED."""
        with self._lock:
            try:
                self.store.clear()
            except MonitorError as e:
                return _failure(e)
            except Exception as e:
                return self._unexpected("clear_log", e)
            self.change_log.clear()
            self._set_state(SessionState.UNINITIALIZED)
            return SessionActionResult(message="Change log cleared")

    def stop(self) -> SessionResult:
        """Pauses monitoring while keeping the history."""
        with self._lock:
            if self.state == SessionState.STOPPED:
                return SessionActionResult(message="Change tracking already stopped")
            if self.state == SessionState.UNINITIALIZED:
                return _failure(
                    NotInitializedError("Change tracking is not running")
                )
            self._set_state(SessionState.STOPPED)
            return SessionActionResult(message="Change tracking stopped")

    def get_current_state(self) -> SessionResult:
        """Summarizes the live document without storing a snapshot."""
        with self._lock:
            try:
                snapshot = self._build()
                snapshot_count = self.store.count()
            except MonitorError as e:
                return _failure(e)
            except Exception as e:
                return self._unexpected("get_current_state", e)
            return CurrentStateResult(
                state=self._describe(snapshot, snapshot_count)
            )

    def _describe(
        self, snapshot: PresentationSnapshot, snapshot_count: int
    ) -> dict[str, Any]:
        element_types: dict[str, int] = {}
        slides = []
        for slide in snapshot.slides:
            elements = []
            for element in slide.elements:
                element_types[element.type.value] = (
                    element_types.get(element.type.value, 0) + 1
                )
                elements.append(
                    {
                        "id": element.id,
                        "type": element.type.value,
                        "hasContent": bool(element.content),
                        "contentLength": len(element.content),
                        "position": element.position.to_json_dict(),
                        "errors": dict(element.errors),
                    }
                )
            slides.append(
                {
                    "slideIndex": slide.slide_index,
                    "slideId": slide.slide_id,
                    "elementCount": len(slide.elements),
                    "elements": elements,
                }
            )
        return {
            "presentationId": snapshot.presentation_id,
            "presentationName": snapshot.presentation_name,
            "capturedAt": snapshot.captured_at.isoformat(),
            "slideCount": snapshot.slide_count,
            "totalElements": snapshot.total_elements,
            "elementTypes": element_types,
            "state": self.state.value,
            "changeLogCount": len(self.change_log),
            "snapshotCount": snapshot_count,
            "slides": slides,
        }

    def dispose(self) -> None:
        """Resets the session and releases the store.

        Snapshots already written to a persistent store are kept.
        """
        with self._lock:
            self.change_log.clear()
            self.metrics.reset()
            self.state = SessionState.UNINITIALIZED
            self.store.close()
            logger.info("Session disposed")
