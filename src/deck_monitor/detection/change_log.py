"""Append-only log of change records for one monitoring session."""

from collections.abc import Iterable, Iterator

from deck_monitor.models.change import Change


class ChangeLog:
    """Ordered history of every change detected in a session.

    `Change` is frozen but its `details` map is not, so the log holds private
    copies and hands out copies. `clear` is the single way to drop history and
    is reserved for session resets.
    """

    def __init__(self):
        self._entries: list[Change] = []

    def extend(self, changes: Iterable[Change]) -> None:
        self._entries.extend(c.model_copy(deep=True) for c in changes)

    def entries(self) -> list[Change]:
        """Returns a copy of the log in detection order."""
        return [c.model_copy(deep=True) for c in self._entries]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Change]:
        return iter(self.entries())
