"""Snapshot store interface.

The store is the ordered history of snapshots captured by one session. It
never drops snapshots on its own; only `clear` and `reset` discard history.
"""

from abc import ABC, abstractmethod
from typing import Optional

from deck_monitor.models.snapshot import PresentationSnapshot


class SnapshotStore(ABC):
    """Abstract interface for persisting presentation snapshots."""

    @abstractmethod
    def put(self, snapshot: PresentationSnapshot) -> None:
        """Appends a snapshot to the history.

        Args:
            snapshot: The snapshot to store.

        Raises:
            SnapshotStoreError: If the snapshot could not be written.
        """
        pass  # pragma: no cover

    @abstractmethod
    def latest(self) -> Optional[PresentationSnapshot]:
        """Retrieves the most recent snapshot.

        Returns:
            The snapshot with the greatest capture time (the later insertion
            wins ties), or None if the store is empty.
        """
        pass  # pragma: no cover

    @abstractmethod
    def history(self) -> list[PresentationSnapshot]:
        """Returns every stored snapshot ordered by capture time."""
        pass  # pragma: no cover

    @abstractmethod
    def count(self) -> int:
        pass  # pragma: no cover

    @abstractmethod
    def clear(self) -> None:
        """Removes every snapshot of this store."""
        pass  # pragma: no cover

    @abstractmethod
    def reset(self, snapshot: PresentationSnapshot) -> None:
        """Replaces the whole history with a single baseline snapshot.

        Either both the removal and the write happen or neither does.

        Raises:
            SnapshotStoreError: If the history could not be replaced.
        """
        pass  # pragma: no cover

    def close(self) -> None:
        """Releases any resources held by the store."""
        return None
