from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy import update
from sqlalchemy.exc import OperationalError

from deck_monitor.detection.builder import SnapshotBuilder
from deck_monitor.errors import SnapshotStoreError
from deck_monitor.persistence.models import SnapshotRow
from deck_monitor.persistence.sql_repository import SQLSnapshotStore
from deck_monitor.providers.json_document import DictDocumentProvider

from deck_factory import three_slide_deck

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def snapshot_at(offset_seconds: int, name: str = "Test deck"):
    deck = three_slide_deck()
    deck["presentationName"] = name
    snap = SnapshotBuilder().build(DictDocumentProvider(deck))
    return snap.model_copy(
        update={"captured_at": BASE_TIME + timedelta(seconds=offset_seconds)}
    )


class TestSQLSnapshotStore:
    @pytest.fixture
    def store(self):
        # Use in-memory SQLite for testing
        store = SQLSnapshotStore("sqlite:///:memory:", session_key="s1")
        yield store
        store.close()

    def test_empty_store(self, store):
        assert store.latest() is None
        assert store.history() == []
        assert store.count() == 0

    def test_round_trip(self, store):
        original = snapshot_at(0)
        store.put(original)

        loaded = store.latest()

        assert loaded == original
        assert loaded.checksum == original.checksum
        assert loaded.slides[0].elements[0].content == "Hello"
        assert loaded.captured_at == BASE_TIME

    def test_latest_is_greatest_capture_time(self, store):
        store.put(snapshot_at(10, "late"))
        store.put(snapshot_at(0, "early"))

        assert store.latest().presentation_name == "late"
        assert [s.presentation_name for s in store.history()] == [
            "early",
            "late",
        ]

    def test_insertion_order_breaks_ties(self, store):
        store.put(snapshot_at(5, "first"))
        store.put(snapshot_at(5, "second"))
        assert store.latest().presentation_name == "second"

    def test_clear(self, store):
        store.put(snapshot_at(0))
        store.put(snapshot_at(1))
        assert store.count() == 2
        store.clear()
        assert store.count() == 0
        assert store.latest() is None

    def test_session_keys_are_isolated(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'shared.db'}"
        first = SQLSnapshotStore(url, session_key="a")
        second = SQLSnapshotStore(url, session_key="b")
        try:
            first.put(snapshot_at(0))
            assert first.count() == 1
            assert second.count() == 0
            second.clear()
            assert first.count() == 1
        finally:
            first.close()
            second.close()

    def test_history_survives_reopen(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'persist.db'}"
        store = SQLSnapshotStore(url, session_key="deck")
        store.put(snapshot_at(0))
        store.close()

        reopened = SQLSnapshotStore(url, session_key="deck")
        try:
            assert reopened.count() == 1
            assert reopened.latest().presentation_id == "deck-1"
        finally:
            reopened.close()

    def test_database_errors_are_wrapped(self, store):
        with patch.object(
            store,
            "SessionLocal",
            side_effect=OperationalError("stmt", {}, Exception("locked")),
        ):
            with pytest.raises(SnapshotStoreError) as excinfo:
                store.put(snapshot_at(0))
            assert excinfo.value.code == "store.failed"

            with pytest.raises(SnapshotStoreError):
                store.latest()

    def test_reset_replaces_history_with_baseline(self, store):
        store.put(snapshot_at(0))
        store.put(snapshot_at(1))

        store.reset(snapshot_at(2, "baseline"))

        assert store.count() == 1
        assert store.latest().presentation_name == "baseline"

    def test_failed_reset_keeps_previous_history(self, store):
        store.put(snapshot_at(0))
        store.put(snapshot_at(1))
        invalid_row = SnapshotRow(
            session_key="s1",
            presentation_id=None,
            captured_at=BASE_TIME,
            payload={},
        )

        with patch.object(store, "_to_row", return_value=invalid_row):
            with pytest.raises(SnapshotStoreError):
                store.reset(snapshot_at(2))

        assert store.count() == 2

    def test_corrupt_payload_raises_store_error(self, store):
        store.put(snapshot_at(0))
        with store.SessionLocal() as session:
            session.execute(update(SnapshotRow).values(payload={"bogus": 1}))
            session.commit()

        with pytest.raises(SnapshotStoreError) as excinfo:
            store.latest()
        assert excinfo.value.code == "store.failed"
        with pytest.raises(SnapshotStoreError):
            store.history()
