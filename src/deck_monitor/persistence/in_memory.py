"""In-memory snapshot store."""

from typing import Optional

from deck_monitor.models.snapshot import PresentationSnapshot
from deck_monitor.persistence.repository import SnapshotStore


class InMemorySnapshotStore(SnapshotStore):
    """List-backed implementation of the SnapshotStore.

    Useful for unit tests and for sessions that do not need their history to
    survive a restart.
    """

    def __init__(self):
        self._snapshots: list[PresentationSnapshot] = []

    def put(self, snapshot: PresentationSnapshot) -> None:
        self._snapshots.append(snapshot)

    def latest(self) -> Optional[PresentationSnapshot]:
        if not self._snapshots:
            return None
        # max() keeps the first maximum, so scan newest first
        return max(reversed(self._snapshots), key=lambda s: s.captured_at)

    def history(self) -> list[PresentationSnapshot]:
        # sorted() is stable, so insertion order breaks ties
        return sorted(self._snapshots, key=lambda s: s.captured_at)

    def count(self) -> int:
        return len(self._snapshots)

    def clear(self) -> None:
        self._snapshots.clear()

    def reset(self, snapshot: PresentationSnapshot) -> None:
        self._snapshots = [snapshot]

    def close(self) -> None:
        self._snapshots.clear()
