"""
tenure.periods
==============

Period query shapes and the repository contract.

The helpers below work on any iterable of :class:`~tenure.models.Period`
rows and are the single implementation of "current", "latest closed",
"first", "history", "in effect" and "pending" used by both repositories
and by the resolver.  :func:`check_open` and :func:`check_close` hold
the write‑time invariants every repository enforces.
"""

from __future__ import annotations

from datetime import datetime
from typing import ContextManager, Iterable, Iterator, List, Optional, Protocol

from .errors import InvalidRangeError, NoOpenPeriodError, OverlappingPeriodError
from .models import Entity, Period, PeriodKind


# ---------------------------------------------------------------------------
# Query shapes
# ---------------------------------------------------------------------------
def of_kind(periods: Iterable[Period], kind: PeriodKind) -> List[Period]:
    """Periods of one kind, oldest first."""
    return sorted((p for p in periods if p.kind is kind), key=lambda p: p.started_at)


def current(periods: Iterable[Period], kind: PeriodKind) -> Optional[Period]:
    """The open period of *kind*, if any."""
    return next((p for p in periods if p.kind is kind and p.ended_at is None), None)


def latest_closed(periods: Iterable[Period], kind: PeriodKind) -> Optional[Period]:
    closed = [p for p in periods if p.kind is kind and p.ended_at is not None]
    return max(closed, key=lambda p: p.ended_at, default=None)


def first(periods: Iterable[Period], kind: PeriodKind) -> Optional[Period]:
    history = of_kind(periods, kind)
    return history[0] if history else None


def in_effect(periods: Iterable[Period], kind: PeriodKind, at: datetime) -> Optional[Period]:
    return next((p for p in periods if p.kind is kind and p.in_effect_at(at)), None)


def pending(periods: Iterable[Period], kind: PeriodKind, at: datetime) -> Optional[Period]:
    return next((p for p in periods if p.kind is kind and p.pending_at(at)), None)


def started_by(periods: Iterable[Period], kind: PeriodKind, at: datetime) -> bool:
    """True if any period of *kind* had started at or before *at*."""
    return any(p.kind is kind and p.started_at <= at for p in periods)


# ---------------------------------------------------------------------------
# Write‑time invariants
# ---------------------------------------------------------------------------
def check_open(periods: Iterable[Period], owner_id: str, kind: PeriodKind,
               started_at: datetime) -> None:
    """
    Raise :class:`OverlappingPeriodError` unless a period of *kind* may
    be opened for *owner_id* at *started_at*.

    At most one period per kind is open, and a new period never starts
    before the latest closed one ended.
    """
    periods = list(periods)
    if current(periods, kind) is not None:
        raise OverlappingPeriodError(
            f"{owner_id} already has an open {kind.value} period"
        )
    previous = latest_closed(periods, kind)
    if previous is not None and started_at < previous.ended_at:
        raise OverlappingPeriodError(
            f"{kind.value} period for {owner_id} starting {started_at.isoformat()} "
            f"overlaps one that ended {previous.ended_at.isoformat()}"
        )


def check_close(periods: Iterable[Period], owner_id: str, kind: PeriodKind,
                ended_at: datetime) -> Period:
    """Return the open period to close, or raise."""
    period = current(periods, kind)
    if period is None:
        raise NoOpenPeriodError(f"{owner_id} has no open {kind.value} period")
    if ended_at < period.started_at:
        raise InvalidRangeError(
            f"{kind.value} period for {owner_id} cannot end {ended_at.isoformat()}, "
            f"before it started {period.started_at.isoformat()}"
        )
    return period


def check_reschedule(periods: Iterable[Period], owner_id: str, kind: PeriodKind,
                     started_at: datetime) -> Period:
    """Return the pending period whose start may move to *started_at*."""
    periods = list(periods)
    period = current(periods, kind)
    if period is None:
        raise NoOpenPeriodError(f"{owner_id} has no open {kind.value} period")
    if not period.pending_at(started_at):
        raise InvalidRangeError(
            f"{kind.value} period for {owner_id} already started "
            f"{period.started_at.isoformat()} and cannot be rescheduled"
        )
    previous = latest_closed(periods, kind)
    if previous is not None and started_at < previous.ended_at:
        raise OverlappingPeriodError(
            f"{kind.value} period for {owner_id} cannot move before "
            f"{previous.ended_at.isoformat()}"
        )
    return period


# ---------------------------------------------------------------------------
# Repository contract
# ---------------------------------------------------------------------------
class Repository(Protocol):
    """
    Persistence surface the orchestrator calls.

    Implemented by :class:`tenure.roster.Roster` (in memory) and
    :class:`tenure.roster_db.DBRoster` (SQLModel).
    """

    # entities
    def create_entity(self, entity: Entity) -> Entity: ...
    def get_entity(self, entity_id: str) -> Entity: ...
    def delete_entity(self, entity_id: str, deleted_at: datetime) -> Entity: ...
    def restore_entity(self, entity_id: str) -> Entity: ...
    def __iter__(self) -> Iterator[Entity]: ...
    def __len__(self) -> int: ...

    # periods
    def open(self, owner_id: str, kind: PeriodKind, started_at: datetime,
             subject_id: Optional[str] = None, notes: Optional[str] = None) -> Period: ...
    def close(self, owner_id: str, kind: PeriodKind, ended_at: datetime) -> Period: ...
    def reschedule(self, owner_id: str, kind: PeriodKind, started_at: datetime) -> Period: ...
    # contract only: for callers composing their own unit of work; the
    # orchestrator relies on transaction rollback instead
    def discard(self, period_id: int) -> None: ...
    def current(self, owner_id: str, kind: PeriodKind) -> Optional[Period]: ...
    def latest_closed(self, owner_id: str, kind: PeriodKind) -> Optional[Period]: ...
    def first(self, owner_id: str, kind: PeriodKind) -> Optional[Period]: ...
    def history(self, owner_id: str, kind: PeriodKind) -> List[Period]: ...
    def periods(self, owner_id: str) -> List[Period]: ...
    def open_memberships(self, subject_id: str) -> List[Period]: ...
    def all_periods(self, kind: PeriodKind) -> List[Period]: ...

    # unit of work
    def transaction(self) -> ContextManager[None]: ...
