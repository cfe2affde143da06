"""
tenure.roster
=============

An in‑memory repository: entities keyed by id plus one list of period
rows, indexed by owner.

This module is intentionally simple (only the standard library) so that
the engine can be unit‑tested without a database.  Units of work keep a
journal of every write and replay it backwards when the block raises.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from itertools import count
from typing import Callable, Dict, Iterator, List, Optional

from . import periods as q
from .errors import EntityNotFoundError, PeriodIntegrityError
from .models import Entity, Period, PeriodKind

Undo = Callable[[], None]


class Roster:
    """
    Dictionary‑backed registry of entities and their periods.

    Example
    -------
    >>> from datetime import datetime
    >>> from tenure.models import Entity, EntityKind, PeriodKind
    >>> roster = Roster()
    >>> ent = roster.create_entity(Entity("Vera Vale", EntityKind.PERFORMER))
    >>> roster.open(ent.id, PeriodKind.EMPLOYMENT, datetime(2024, 1, 1)).is_open
    True
    """

    def __init__(self) -> None:
        self._entities: Dict[str, Entity] = {}
        self._periods: Dict[str, List[Period]] = {}
        self._ids = count(1)
        self._journal: Optional[List[Undo]] = None
        self._created: set[int] = set()
        self._depth = 0

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _rows(self, owner_id: str) -> List[Period]:
        return self._periods.setdefault(owner_id, [])

    def _view(self, owner_id: str) -> List[Period]:
        return self._periods.get(owner_id, [])

    def _record(self, undo: Undo) -> None:
        if self._journal is not None:
            self._journal.append(undo)

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------
    @contextmanager
    def transaction(self) -> Iterator[None]:
        """All writes inside the block persist together or not at all."""
        outermost = self._depth == 0
        if outermost:
            self._journal = []
            self._created = set()
        self._depth += 1
        try:
            yield
        except BaseException:
            if outermost:
                for undo in reversed(self._journal):
                    undo()
            raise
        finally:
            self._depth -= 1
            if outermost:
                self._journal = None
                self._created = set()

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------
    def create_entity(self, entity: Entity) -> Entity:
        """Register an entity (raise ValueError if the id is taken)."""
        if entity.id in self._entities:
            raise ValueError(f"entity {entity.id} already exists")
        self._entities[entity.id] = entity
        self._record(lambda: self._entities.pop(entity.id, None))
        return entity

    def get_entity(self, entity_id: str) -> Entity:
        """Retrieve by id (raise EntityNotFoundError if not present)."""
        try:
            return self._entities[entity_id]
        except KeyError:
            raise EntityNotFoundError(entity_id) from None

    def delete_entity(self, entity_id: str, deleted_at: datetime) -> Entity:
        """Soft delete; the entity's periods are kept for restoration."""
        entity = self.get_entity(entity_id)
        previous = entity.deleted_at
        entity.deleted_at = deleted_at
        self._record(lambda: setattr(entity, "deleted_at", previous))
        return entity

    def restore_entity(self, entity_id: str) -> Entity:
        entity = self.get_entity(entity_id)
        previous = entity.deleted_at
        entity.deleted_at = None
        self._record(lambda: setattr(entity, "deleted_at", previous))
        return entity

    # ------------------------------------------------------------------
    # Period writes
    # ------------------------------------------------------------------
    def open(self, owner_id: str, kind: PeriodKind, started_at: datetime,
             subject_id: Optional[str] = None, notes: Optional[str] = None) -> Period:
        rows = self._rows(owner_id)
        q.check_open(rows, owner_id, kind, started_at)
        period = Period(owner_id, kind, started_at, subject_id=subject_id,
                        notes=notes, id=next(self._ids))
        rows.append(period)
        if self._journal is not None:
            self._created.add(period.id)
        self._record(lambda: self._drop(period))
        return period

    def close(self, owner_id: str, kind: PeriodKind, ended_at: datetime) -> Period:
        period = q.check_close(self._view(owner_id), owner_id, kind, ended_at)
        period.ended_at = ended_at
        self._record(lambda: setattr(period, "ended_at", None))
        return period

    def reschedule(self, owner_id: str, kind: PeriodKind, started_at: datetime) -> Period:
        period = q.check_reschedule(self._view(owner_id), owner_id, kind, started_at)
        previous = period.started_at
        period.started_at = started_at
        self._record(lambda: setattr(period, "started_at", previous))
        return period

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
        for rows in self._periods.values():
            for period in rows:
                if period.id == period_id:
                    self._drop(period)
                    self._created.discard(period_id)
                    self._record(lambda p=period: self._rows(p.owner_id).append(p))
                    return

    def _drop(self, period: Period) -> None:
        rows = self._rows(period.owner_id)
        if period in rows:
            rows.remove(period)

    # ------------------------------------------------------------------
    # Period reads
    # ------------------------------------------------------------------
    def current(self, owner_id: str, kind: PeriodKind) -> Optional[Period]:
        return q.current(self._view(owner_id), kind)

    def latest_closed(self, owner_id: str, kind: PeriodKind) -> Optional[Period]:
        return q.latest_closed(self._view(owner_id), kind)

    def first(self, owner_id: str, kind: PeriodKind) -> Optional[Period]:
        return q.first(self._view(owner_id), kind)

    def history(self, owner_id: str, kind: PeriodKind) -> List[Period]:
        return q.of_kind(self._view(owner_id), kind)

    def periods(self, owner_id: str) -> List[Period]:
        return list(self._view(owner_id))

    def open_memberships(self, subject_id: str) -> List[Period]:
        return [
            p
            for p in self.all_periods(PeriodKind.MEMBERSHIP)
            if p.subject_id == subject_id and p.is_open
        ]

    def all_periods(self, kind: PeriodKind) -> List[Period]:
        return [p for rows in self._periods.values() for p in rows if p.kind is kind]

    # ------------------------------------------------------------------
    # Dunder helpers for convenience
    # ------------------------------------------------------------------
    def __iter__(self) -> Iterator[Entity]:
        return iter(self._entities.values())

    def __len__(self) -> int:
        return len(self._entities)
