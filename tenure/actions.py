"""
tenure.actions
==============

The action orchestrator: one method per transition.

Every method follows the same shape:

1. resolve the effective instant (the injected clock supplies "now"),
2. open a unit of work on the repository,
3. resolve the status at that instant and run the guard (an instant
   earlier than the entity's recorded history is refused too),
4. close and open periods in a fixed order,
5. after commit, publish a :class:`~tenure.events.TransitionEvent`.

A guard rejection happens before the first write, so a rejected request
leaves the repository untouched.  Blocking periods (suspension, injury,
membership) are always closed before the period whose end makes the
transition terminal, so the resolver never sees an impossible mix such
as "released but still suspended".
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Iterable, Iterator, Optional

from . import lifecycle
from .errors import (
    CannotBeDeletedError,
    CannotBeRestoredError,
    MembershipConflictError,
    PeriodIntegrityError,
    TransitionError,
)
from .events import EventSink, LoggingEventSink, TransitionEvent
from .families import EntityFamily
from .models import Entity, EntityKind, PeriodKind, Status, Transition
from .periods import Repository
from .resolver import Clock, StatusResolver

logger = logging.getLogger(__name__)


class Orchestrator:
    """
    Applies transitions to entities stored in *repository*.

    Parameters
    ----------
    repository : Repository
        In‑memory :class:`~tenure.roster.Roster` or SQLModel
        :class:`~tenure.roster_db.DBRoster`.
    sink : EventSink, optional
        Receives one event per committed transition; defaults to
        :class:`~tenure.events.LoggingEventSink`.
    clock : callable, optional
        Supplies the effective instant when a caller passes none.
    families : dict, optional
        Entity kind → family mapping (see :mod:`tenure.families`).
    """

    def __init__(self, repository: Repository, sink: Optional[EventSink] = None,
                 clock: Clock = datetime.now,
                 families: Optional[Dict[EntityKind, EntityFamily]] = None) -> None:
        self.repository = repository
        self.sink = sink or LoggingEventSink()
        self.clock = clock
        self.resolver = StatusResolver(repository, clock, families)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _at(self, effective_date: Optional[datetime]) -> datetime:
        return effective_date if effective_date is not None else self.clock()

    @contextmanager
    def _unit(self, name: str, entity: Entity) -> Iterator[None]:
        try:
            with self.repository.transaction():
                yield
        except TransitionError as e:
            logger.info(f"Rejected {name} for {entity.label}: {e}")
            raise
        except PeriodIntegrityError as e:
            logger.error(f"Period store rejected {name} for {entity.label} ({entity.id}): {e}")
            raise

    def _guard(self, transition: Transition, entity: Entity, at: datetime) -> Status:
        """
        Resolve the stored entity's status at *at* and run the guard.
        *at* may not precede the entity's recorded history; for a group
        that is about to be disbanded this includes its open memberships.
        """
        stored = self.repository.get_entity(entity.id)
        family = self.resolver.family(stored)
        status = self.resolver.status(stored, at)
        if stored.is_deleted:
            error = lifecycle.RULES[transition][1]
            raise error(
                f"This {stored.label} has been deleted and cannot be {error.action}.",
                entity=stored,
                status=status,
            )
        lifecycle.check(transition, stored, family, status)
        periods = self.repository.periods(stored.id)
        if transition in _DISBANDS and stored.kind in lifecycle.GROUP_KINDS:
            periods += self.repository.open_memberships(stored.id)
        moving = family.primary if status is family.pending else None
        lifecycle.check_timing(transition, stored, periods, at, moving=moving)
        return status

    def _close_open(self, entity: Entity, kinds: Iterable[PeriodKind], at: datetime) -> None:
        """Close each listed kind that currently has an open period, in order."""
        family = self.resolver.family(entity)
        for kind in kinds:
            if family.has_kind(kind) and self.repository.current(entity.id, kind):
                self.repository.close(entity.id, kind, at)

    def _disband(self, group: Entity, at: datetime) -> None:
        """End every open membership whose group is *group*."""
        if group.kind not in lifecycle.GROUP_KINDS:
            return
        for membership in self.repository.open_memberships(group.id):
            self.repository.close(membership.owner_id, PeriodKind.MEMBERSHIP, at)

    def _publish(self, name: str, entity: Entity, at: datetime) -> None:
        event = TransitionEvent(name, entity.id, entity.kind, at)
        try:
            self.sink.publish(event)
        except Exception:
            logger.exception(f"Event sink failed to accept {name} for {entity.id}")

    def _done(self, transition: Transition, entity: Entity, at: datetime) -> Entity:
        logger.info(f"{entity.label} {transition.value} effective {at.isoformat()}")
        self._publish(transition.event_name, entity, at)
        return self.repository.get_entity(entity.id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def status(self, entity: Entity, at: Optional[datetime] = None) -> Status:
        return self.resolver.status(entity, at)

    def can(self, transition: Transition, entity: Entity,
            at: Optional[datetime] = None) -> bool:
        """True if the guard would accept *transition* at *at*."""
        try:
            self._guard(transition, entity, self._at(at))
        except TransitionError:
            return False
        return True

    # ------------------------------------------------------------------
    # Entity lifecycle
    # ------------------------------------------------------------------
    def create(self, name: str, kind: EntityKind, started_at: Optional[datetime] = None,
               notes: Optional[str] = None) -> Entity:
        """
        Register a new entity.  With *started_at* its primary period
        (employment or activity) opens in the same unit of work;
        otherwise it starts out unactivated.
        """
        entity = Entity(name, kind, created_at=self.clock())
        family = self.resolver.family(entity)
        with self._unit("create", entity):
            self.repository.create_entity(entity)
            if started_at is not None:
                self.repository.open(entity.id, family.primary, started_at, notes=notes)
        logger.info(f"Created {entity.label} ({entity.id})")
        self._publish("Created", entity, started_at or entity.created_at)
        return self.repository.get_entity(entity.id)

    def delete(self, entity: Entity, deleted_at: Optional[datetime] = None) -> Entity:
        """Soft delete; the period history is kept."""
        at = self._at(deleted_at)
        with self._unit("delete", entity):
            stored = self.repository.get_entity(entity.id)
            if stored.is_deleted:
                raise CannotBeDeletedError(
                    f"This {stored.label} is already deleted and cannot be deleted.",
                    entity=stored,
                )
            self.repository.delete_entity(entity.id, at)
        logger.info(f"Deleted {entity.label} ({entity.id})")
        self._publish("Deleted", entity, at)
        return self.repository.get_entity(entity.id)

    def restore(self, entity: Entity) -> Entity:
        at = self.clock()
        with self._unit("restore", entity):
            stored = self.repository.get_entity(entity.id)
            if not stored.is_deleted:
                raise CannotBeRestoredError(
                    f"This {stored.label} is not deleted and cannot be restored.",
                    entity=stored,
                )
            self.repository.restore_entity(entity.id)
        logger.info(f"Restored {entity.label} ({entity.id})")
        self._publish("Restored", entity, at)
        return self.repository.get_entity(entity.id)

    # ------------------------------------------------------------------
    # Employment family
    # ------------------------------------------------------------------
    def employ(self, entity: Entity, effective_date: Optional[datetime] = None,
               notes: Optional[str] = None) -> Entity:
        """
        Start employment.  A retired entity comes out of retirement at
        the same instant; a pending future employment is moved forward.
        """
        at = self._at(effective_date)
        with self._unit("employ", entity):
            status = self._guard(Transition.EMPLOY, entity, at)
            family = self.resolver.family(entity)
            if status is Status.RETIRED:
                self.repository.close(entity.id, PeriodKind.RETIREMENT, at)
            if status is family.pending:
                self.repository.reschedule(entity.id, family.primary, at)
            else:
                self.repository.open(entity.id, family.primary, at, notes=notes)
        return self._done(Transition.EMPLOY, entity, at)

    def release(self, entity: Entity, effective_date: Optional[datetime] = None) -> Entity:
        """End employment, clearing any suspension and injury first."""
        at = self._at(effective_date)
        with self._unit("release", entity):
            self._guard(Transition.RELEASE, entity, at)
            self._close_open(entity, (PeriodKind.SUSPENSION, PeriodKind.INJURY), at)
            self.repository.close(entity.id, PeriodKind.EMPLOYMENT, at)
        return self._done(Transition.RELEASE, entity, at)

    def suspend(self, entity: Entity, effective_date: Optional[datetime] = None,
                notes: Optional[str] = None) -> Entity:
        at = self._at(effective_date)
        with self._unit("suspend", entity):
            self._guard(Transition.SUSPEND, entity, at)
            self.repository.open(entity.id, PeriodKind.SUSPENSION, at, notes=notes)
        return self._done(Transition.SUSPEND, entity, at)

    def reinstate(self, entity: Entity, effective_date: Optional[datetime] = None) -> Entity:
        at = self._at(effective_date)
        with self._unit("reinstate", entity):
            self._guard(Transition.REINSTATE, entity, at)
            self.repository.close(entity.id, PeriodKind.SUSPENSION, at)
        return self._done(Transition.REINSTATE, entity, at)

    def injure(self, entity: Entity, effective_date: Optional[datetime] = None,
               notes: Optional[str] = None) -> Entity:
        at = self._at(effective_date)
        with self._unit("injure", entity):
            self._guard(Transition.INJURE, entity, at)
            self.repository.open(entity.id, PeriodKind.INJURY, at, notes=notes)
        return self._done(Transition.INJURE, entity, at)

    def heal(self, entity: Entity, effective_date: Optional[datetime] = None) -> Entity:
        at = self._at(effective_date)
        with self._unit("heal", entity):
            self._guard(Transition.HEAL, entity, at)
            self.repository.close(entity.id, PeriodKind.INJURY, at)
        return self._done(Transition.HEAL, entity, at)

    # ------------------------------------------------------------------
    # Shared by both families
    # ------------------------------------------------------------------
    def retire(self, entity: Entity, effective_date: Optional[datetime] = None,
               notes: Optional[str] = None) -> Entity:
        """
        Retire the entity.  Suspension, injury, group membership and the
        primary period are closed (whichever are open), then retirement
        opens.  A retiring group (faction or tag team) also loses all of
        its members.
        """
        at = self._at(effective_date)
        with self._unit("retire", entity):
            self._guard(Transition.RETIRE, entity, at)
            family = self.resolver.family(entity)
            blocking = [kind for kind, _ in family.blocking]
            self._close_open(entity, [*blocking, PeriodKind.MEMBERSHIP], at)
            self._disband(entity, at)
            self._close_open(entity, [family.primary], at)
            self.repository.open(entity.id, PeriodKind.RETIREMENT, at, notes=notes)
        return self._done(Transition.RETIRE, entity, at)

    def unretire(self, entity: Entity, effective_date: Optional[datetime] = None) -> Entity:
        """
        End retirement.  Families configured with ``unretire_reopens``
        open a new primary period at the same instant.
        """
        at = self._at(effective_date)
        with self._unit("unretire", entity):
            self._guard(Transition.UNRETIRE, entity, at)
            family = self.resolver.family(entity)
            self.repository.close(entity.id, PeriodKind.RETIREMENT, at)
            if family.unretire_reopens:
                self.repository.open(entity.id, family.primary, at)
        return self._done(Transition.UNRETIRE, entity, at)

    # ------------------------------------------------------------------
    # Activity family
    # ------------------------------------------------------------------
    def debut(self, entity: Entity, effective_date: Optional[datetime] = None,
              notes: Optional[str] = None) -> Entity:
        """First activation; a scheduled debut is moved to *effective_date*."""
        at = self._at(effective_date)
        with self._unit("debut", entity):
            status = self._guard(Transition.DEBUT, entity, at)
            if status is Status.FUTURE_ACTIVATION:
                self.repository.reschedule(entity.id, PeriodKind.ACTIVITY, at)
            else:
                self.repository.open(entity.id, PeriodKind.ACTIVITY, at, notes=notes)
        return self._done(Transition.DEBUT, entity, at)

    def deactivate(self, entity: Entity, effective_date: Optional[datetime] = None) -> Entity:
        """Close the activity period; a faction is disbanded."""
        at = self._at(effective_date)
        with self._unit("deactivate", entity):
            self._guard(Transition.DEACTIVATE, entity, at)
            self._disband(entity, at)
            self.repository.close(entity.id, PeriodKind.ACTIVITY, at)
        return self._done(Transition.DEACTIVATE, entity, at)

    def reactivate(self, entity: Entity, effective_date: Optional[datetime] = None,
                   notes: Optional[str] = None) -> Entity:
        at = self._at(effective_date)
        with self._unit("reactivate", entity):
            self._guard(Transition.REACTIVATE, entity, at)
            self.repository.open(entity.id, PeriodKind.ACTIVITY, at, notes=notes)
        return self._done(Transition.REACTIVATE, entity, at)

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------
    def join(self, member: Entity, group: Entity,
             effective_date: Optional[datetime] = None) -> Entity:
        """Add *member* to *group* (a faction, or a team for performers)."""
        at = self._at(effective_date)
        with self._unit("join", member):
            member_status = self._guard(Transition.JOIN, member, at)
            group = self.repository.get_entity(group.id)
            if group.is_deleted:
                raise MembershipConflictError(
                    f"This {group.label} has been deleted and cannot take new members.",
                    entity=group,
                )
            lifecycle.check_join(
                member,
                self.resolver.family(member),
                member_status,
                self.repository.current(member.id, PeriodKind.MEMBERSHIP),
                group,
                self.resolver.status(group, at),
            )
            self.repository.open(member.id, PeriodKind.MEMBERSHIP, at, subject_id=group.id)
        return self._done(Transition.JOIN, member, at)

    def leave(self, member: Entity, effective_date: Optional[datetime] = None) -> Entity:
        at = self._at(effective_date)
        with self._unit("leave", member):
            member_status = self._guard(Transition.LEAVE, member, at)
            lifecycle.check_leave(
                member,
                self.resolver.family(member),
                member_status,
                self.repository.current(member.id, PeriodKind.MEMBERSHIP),
            )
            self.repository.close(member.id, PeriodKind.MEMBERSHIP, at)
        return self._done(Transition.LEAVE, member, at)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def apply(self, transition: Transition, entity: Entity,
              effective_date: Optional[datetime] = None,
              notes: Optional[str] = None) -> Entity:
        """
        Run *transition* by name.  Join needs a group and is not
        dispatched here; call :meth:`join` directly.
        """
        if transition is Transition.JOIN:
            raise ValueError("join requires a group; call Orchestrator.join")
        method = getattr(self, transition.name.lower())
        if transition in _TAKES_NOTES:
            return method(entity, effective_date, notes=notes)
        return method(entity, effective_date)


_DISBANDS = frozenset({Transition.RETIRE, Transition.DEACTIVATE})

_TAKES_NOTES = frozenset({
    Transition.EMPLOY, Transition.SUSPEND, Transition.INJURE, Transition.RETIRE,
    Transition.DEBUT, Transition.REACTIVATE,
})
