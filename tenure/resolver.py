"""
tenure.resolver
===============

Derives an entity's status from its periods.

Precedence, first match wins:

1. retirement in effect                     → ``RETIRED``
2. each blocking kind in effect, in order   → its status (suspended, injured)
3. primary kind in effect                   → ``EMPLOYED`` / ``ACTIVE``
4. primary kind scheduled for the future    → ``FUTURE_EMPLOYMENT`` / ``FUTURE_ACTIVATION``
5. primary kind started at some point       → ``RELEASED`` / ``INACTIVE``
6. otherwise                                → ``UNACTIVATED``

The instant is always explicit in :func:`resolve`, so evaluating at a
past instant reconstructs the historical status.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from . import periods as q
from .families import FAMILIES, EntityFamily
from .models import Entity, EntityKind, Period, PeriodKind, Status
from .periods import Repository

Clock = Callable[[], datetime]


def resolve(periods: Iterable[Period], family: EntityFamily, at: datetime) -> Status:
    """Pure status resolution for one entity's periods at instant *at*."""
    periods = [p for p in periods if family.has_kind(p.kind)]

    if q.in_effect(periods, PeriodKind.RETIREMENT, at):
        return Status.RETIRED
    for kind, status in family.blocking:
        if q.in_effect(periods, kind, at):
            return status
    if q.in_effect(periods, family.primary, at):
        return family.in_effect
    if q.pending(periods, family.primary, at):
        return family.pending
    if q.started_by(periods, family.primary, at):
        return family.lapsed
    return Status.UNACTIVATED


class StatusResolver:
    """
    Resolves statuses against a repository.

    Parameters
    ----------
    repository : Repository
        Source of period rows.
    clock : callable
        Returns "now" when no instant is given.
    families : dict, optional
        Entity kind → family mapping; defaults to
        :data:`tenure.families.FAMILIES`.
    """

    def __init__(self, repository: Repository, clock: Clock = datetime.now,
                 families: Optional[Dict[EntityKind, EntityFamily]] = None) -> None:
        self.repository = repository
        self.clock = clock
        self.families = families or FAMILIES

    def family(self, entity: Entity) -> EntityFamily:
        return self.families[entity.kind]

    def status(self, entity: Entity, at: Optional[datetime] = None) -> Status:
        """Status of *entity* at *at* (default: now)."""
        at = at or self.clock()
        return resolve(self.repository.periods(entity.id), self.family(entity), at)

    def started_at(self, entity: Entity) -> Optional[datetime]:
        """
        First start of the primary kind: the debut of a championship or
        faction, the first employment of a performer.  ``None`` while
        still to be determined.
        """
        period = self.repository.first(entity.id, self.family(entity).primary)
        return period.started_at if period else None

    def timeline(self, entity: Entity) -> List[Tuple[datetime, Status]]:
        """
        Every status change derived from the period boundaries, oldest
        first.  Boundaries that do not change the status are skipped.
        """
        family = self.family(entity)
        periods = [p for p in self.repository.periods(entity.id) if family.has_kind(p.kind)]
        instants = sorted(
            {p.started_at for p in periods} | {p.ended_at for p in periods if p.ended_at}
        )
        changes: List[Tuple[datetime, Status]] = []
        for instant in instants:
            status = resolve(periods, family, instant)
            if not changes or changes[-1][1] is not status:
                changes.append((instant, status))
        return changes
