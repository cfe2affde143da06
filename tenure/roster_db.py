"""
tenure.roster_db
================

SQLModel‑backed implementation of the :class:`tenure.roster.Roster`
surface.

Any code written against the in‑memory roster (the orchestrator, the
resolver, the API) can switch to a persistent store without changing
its calls.  Writes made outside :meth:`DBRoster.transaction` commit
immediately; inside it they are flushed (so later reads see them) and
committed once at the end of the block.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.engine import Engine
from sqlmodel import Session, col, select

from tenure import periods as q
from tenure.db import EntityRow, PeriodRow, SessionLocal
from tenure.errors import EntityNotFoundError, OverlappingPeriodError, PeriodIntegrityError
from tenure.models import Entity, Period, PeriodKind

logger = logging.getLogger(__name__)


class DBRoster:
    """
    Drop‑in replacement for :class:`~tenure.roster.Roster` backed by a
    SQLModel session.

    Methods mirror the in‑memory roster:
    * create_entity / get_entity / delete_entity / restore_entity
    * open / close / reschedule / discard
    * current / latest_closed / first / history / periods
    * transaction()
    * iteration / len()
    """

    def __init__(self, session: Session | None = None, bind: Engine | None = None) -> None:
        self._session: Session = session or SessionLocal(bind)
        self._depth = 0
        self._created: set[int] = set()

    # ------------------------------------------------------------ helpers
    def _rows(self, owner_id: str) -> List[PeriodRow]:
        return list(self._session.exec(select(PeriodRow).where(PeriodRow.owner_id == owner_id)))

    def _periods(self, owner_id: str) -> List[Period]:
        return [row.to_period() for row in self._rows(owner_id)]

    def _open_row(self, owner_id: str, kind: PeriodKind) -> Optional[PeriodRow]:
        stmt = select(PeriodRow).where(
            PeriodRow.owner_id == owner_id,
            PeriodRow.kind == kind,
            col(PeriodRow.ended_at).is_(None),
        )
        return self._session.exec(stmt).first()

    def _entity_row(self, entity_id: str) -> EntityRow:
        row = self._session.get(EntityRow, entity_id)
        if row is None:
            raise EntityNotFoundError(entity_id)
        return row

    def _flush(self) -> None:
        """Flush pending writes; commit them when no unit of work is active."""
        try:
            self._session.flush()
        except IntegrityError:
            if self._depth == 0:
                self._session.rollback()
            raise
        if self._depth == 0:
            self._session.commit()

    # ------------------------------------------------------- unit of work
    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Commit every write in the block together, or roll all back."""
        outermost = self._depth == 0
        if outermost:
            self._created = set()
        self._depth += 1
        try:
            yield
        except BaseException:
            self._depth -= 1
            if outermost:
                self._session.rollback()
                self._created = set()
            raise
        else:
            self._depth -= 1
            if outermost:
                self._session.commit()
                self._created = set()

    # ----------------------------------------------------------- entities
    def create_entity(self, entity: Entity) -> Entity:
        if self._session.get(EntityRow, entity.id) is not None:
            raise ValueError(f"entity {entity.id} already exists")
        self._session.add(EntityRow.from_entity(entity))
        self._flush()
        return entity

    def get_entity(self, entity_id: str) -> Entity:
        return self._entity_row(entity_id).to_entity()

    def delete_entity(self, entity_id: str, deleted_at: datetime) -> Entity:
        row = self._entity_row(entity_id)
        row.deleted_at = deleted_at
        self._session.add(row)
        self._flush()
        return self.get_entity(entity_id)

    def restore_entity(self, entity_id: str) -> Entity:
        row = self._entity_row(entity_id)
        row.deleted_at = None
        self._session.add(row)
        self._flush()
        return self.get_entity(entity_id)

    # ------------------------------------------------------ period writes
    def open(self, owner_id: str, kind: PeriodKind, started_at: datetime,
             subject_id: Optional[str] = None, notes: Optional[str] = None) -> Period:
        q.check_open(self._periods(owner_id), owner_id, kind, started_at)
        row = PeriodRow(owner_id=owner_id, kind=kind, started_at=started_at,
                        subject_id=subject_id, notes=notes)
        self._session.add(row)
        try:
            self._flush()
        except IntegrityError as e:
            # another writer opened the same kind first
            logger.warning(f"Database rejected a second open {kind.value} period for {owner_id}")
            raise OverlappingPeriodError(
                f"{owner_id} already has an open {kind.value} period"
            ) from e
        if self._depth:
            self._created.add(row.id)
        return row.to_period()

    def close(self, owner_id: str, kind: PeriodKind, ended_at: datetime) -> Period:
        period = q.check_close(self._periods(owner_id), owner_id, kind, ended_at)
        row = self._session.get(PeriodRow, period.id)
        row.ended_at = ended_at
        self._session.add(row)
        self._flush()
        return row.to_period()

    def reschedule(self, owner_id: str, kind: PeriodKind, started_at: datetime) -> Period:
        period = q.check_reschedule(self._periods(owner_id), owner_id, kind, started_at)
        row = self._session.get(PeriodRow, period.id)
        row.started_at = started_at
        self._session.add(row)
        self._flush()
        return row.to_period()

    def discard(self, period_id: int) -> None:
        """
        Undo the creation of a period opened in the current unit of work.

        Part of the repository contract for callers that compose their own
        units of work; the orchestrator relies on transaction rollback.
        """
        if period_id not in self._created:
            raise PeriodIntegrityError(
                f"period {period_id} was not created in this unit of work"
            )
        row = self._session.get(PeriodRow, period_id)
        self._session.delete(row)
        self._created.discard(period_id)
        self._flush()

    # ------------------------------------------------------- period reads
    def current(self, owner_id: str, kind: PeriodKind) -> Optional[Period]:
        row = self._open_row(owner_id, kind)
        return row.to_period() if row else None

    def latest_closed(self, owner_id: str, kind: PeriodKind) -> Optional[Period]:
        return q.latest_closed(self._periods(owner_id), kind)

    def first(self, owner_id: str, kind: PeriodKind) -> Optional[Period]:
        return q.first(self._periods(owner_id), kind)

    def history(self, owner_id: str, kind: PeriodKind) -> List[Period]:
        return q.of_kind(self._periods(owner_id), kind)

    def periods(self, owner_id: str) -> List[Period]:
        return self._periods(owner_id)

    def open_memberships(self, subject_id: str) -> List[Period]:
        stmt = select(PeriodRow).where(
            PeriodRow.kind == PeriodKind.MEMBERSHIP,
            PeriodRow.subject_id == subject_id,
            col(PeriodRow.ended_at).is_(None),
        )
        return [row.to_period() for row in self._session.exec(stmt)]

    def all_periods(self, kind: PeriodKind) -> List[Period]:
        stmt = select(PeriodRow).where(PeriodRow.kind == kind)
        return [row.to_period() for row in self._session.exec(stmt)]

    # ------------------------------------------------------ dunder helpers
    def __iter__(self) -> Iterator[Entity]:
        rows = self._session.exec(select(EntityRow)).all()
        yield from (row.to_entity() for row in rows)

    def __len__(self) -> int:
        return len(self._session.exec(select(EntityRow)).all())

    # ----------------------------------------------------- context manager
    def __enter__(self) -> "DBRoster":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._session.close()
