"""SQLAlchemy implementation of the SnapshotStore."""

from datetime import timezone
from typing import Optional

from pydantic import ValidationError
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError

from deck_monitor.errors import SnapshotStoreError
from deck_monitor.models.snapshot import PresentationSnapshot
from deck_monitor.observability.logging import fields, get_logger
from deck_monitor.persistence.db import make_engine, make_session_factory
from deck_monitor.persistence.models import Base, SnapshotRow
from deck_monitor.persistence.repository import SnapshotStore

logger = get_logger(__name__)


class SQLSnapshotStore(SnapshotStore):
    """SQL-backed snapshot history.

    Rows are scoped by `session_key`, so several sessions can share one
    database without seeing each other's snapshots.
    """

    def __init__(self, database_url: str, session_key: str = "default"):
        """Initialize the store with a database URL.

        Args:
            database_url: SQLAlchemy connection string.
            session_key: Scope of the rows read and written by this store.
        """
        self.session_key = session_key
        try:
            self.engine = make_engine(database_url)
            # Tables are created on first use; there is no migration history.
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise SnapshotStoreError(f"Failed to open snapshot store: {e}") from e
        self.SessionLocal = make_session_factory(self.engine)

    def _ordered(self):
        return (
            select(SnapshotRow)
            .where(SnapshotRow.session_key == self.session_key)
            .order_by(SnapshotRow.captured_at, SnapshotRow.id)
        )

    @staticmethod
    def _from_row(row: SnapshotRow) -> PresentationSnapshot:
        try:
            return PresentationSnapshot.model_validate(row.payload)
        except ValidationError as e:
            raise SnapshotStoreError(
                f"Stored snapshot {row.id} is corrupt: {e}"
            ) from e

    def _to_row(self, snapshot: PresentationSnapshot) -> SnapshotRow:
        return SnapshotRow(
            session_key=self.session_key,
            presentation_id=snapshot.presentation_id,
            captured_at=snapshot.captured_at.astimezone(timezone.utc),
            checksum=snapshot.checksum,
            payload=snapshot.to_json_dict(),
        )

    def put(self, snapshot: PresentationSnapshot) -> None:
        try:
            with self.SessionLocal() as session:
                session.add(self._to_row(snapshot))
                session.commit()
        except SQLAlchemyError as e:
            logger.exception(
                "Failed to store snapshot",
                extra=fields(session_key=self.session_key),
            )
            raise SnapshotStoreError(f"Failed to store snapshot: {e}") from e

    def latest(self) -> Optional[PresentationSnapshot]:
        stmt = (
            select(SnapshotRow)
            .where(SnapshotRow.session_key == self.session_key)
            .order_by(SnapshotRow.captured_at.desc(), SnapshotRow.id.desc())
            .limit(1)
        )
        try:
            with self.SessionLocal() as session:
                row = session.execute(stmt).scalar_one_or_none()
                if row is None:
                    return None
                return self._from_row(row)
        except SQLAlchemyError as e:
            raise SnapshotStoreError(f"Failed to read snapshot: {e}") from e

    def history(self) -> list[PresentationSnapshot]:
        try:
            with self.SessionLocal() as session:
                rows = session.execute(self._ordered()).scalars().all()
                return [self._from_row(row) for row in rows]
        except SQLAlchemyError as e:
            raise SnapshotStoreError(f"Failed to read snapshots: {e}") from e

    def count(self) -> int:
        stmt = select(func.count(SnapshotRow.id)).where(
            SnapshotRow.session_key == self.session_key
        )
        try:
            with self.SessionLocal() as session:
                return int(session.execute(stmt).scalar_one())
        except SQLAlchemyError as e:
            raise SnapshotStoreError(f"Failed to count snapshots: {e}") from e

    def clear(self) -> None:
        try:
            with self.SessionLocal() as session:
                session.execute(
                    delete(SnapshotRow).where(
                        SnapshotRow.session_key == self.session_key
                    )
                )
                session.commit()
        except SQLAlchemyError as e:
            raise SnapshotStoreError(f"Failed to clear snapshots: {e}") from e

    def reset(self, snapshot: PresentationSnapshot) -> None:
        try:
            with self.SessionLocal() as session:
                # One transaction: a failed insert rolls back the delete.
                session.execute(
                    delete(SnapshotRow).where(
                        SnapshotRow.session_key == self.session_key
                    )
                )
                session.add(self._to_row(snapshot))
                session.commit()
        except SQLAlchemyError as e:
            logger.exception(
                "Failed to reset snapshot history",
                extra=fields(session_key=self.session_key),
            )
            raise SnapshotStoreError(f"Failed to reset snapshots: {e}") from e

    def close(self) -> None:
        self.engine.dispose()
