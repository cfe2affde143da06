"""
tenure.lifecycle
================

Transition guard for roster entities.

:data:`RULES` lists, for every transition, the resolved statuses from
which it is legal and the error raised otherwise.  The guard only reads
state; :func:`evaluate` returns a :class:`Decision` and :func:`check`
raises the decision's error.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, FrozenSet, Iterable, Optional, Tuple, Type

from .errors import (
    CannotBeActivatedError,
    CannotBeDeactivatedError,
    CannotBeDebutedError,
    CannotBeEmployedError,
    CannotBeHealedError,
    CannotBeInjuredError,
    CannotBeReinstatedError,
    CannotBeReleasedError,
    CannotBeRetiredError,
    CannotBeSuspendedError,
    CannotBeUnretiredError,
    MembershipConflictError,
    TransitionError,
)
from .families import EntityFamily
from .models import Entity, EntityKind, Period, PeriodKind, Status, Transition

S = Status

# ---------------------------------------------------------------------
# Allowed transitions: transition → (legal current statuses, rejection)
# ---------------------------------------------------------------------
RULES: Dict[Transition, Tuple[FrozenSet[Status], Type[TransitionError]]] = {
    Transition.EMPLOY:     (frozenset({S.UNACTIVATED, S.RELEASED, S.FUTURE_EMPLOYMENT, S.RETIRED}),
                            CannotBeEmployedError),
    Transition.RELEASE:    (frozenset({S.EMPLOYED, S.SUSPENDED, S.INJURED}), CannotBeReleasedError),
    Transition.SUSPEND:    (frozenset({S.EMPLOYED}), CannotBeSuspendedError),
    Transition.REINSTATE:  (frozenset({S.SUSPENDED}), CannotBeReinstatedError),
    Transition.INJURE:     (frozenset({S.EMPLOYED}), CannotBeInjuredError),
    Transition.HEAL:       (frozenset({S.INJURED}), CannotBeHealedError),
    Transition.RETIRE:     (frozenset({S.EMPLOYED, S.SUSPENDED, S.INJURED, S.RELEASED,
                                       S.ACTIVE, S.INACTIVE}),
                            CannotBeRetiredError),
    Transition.UNRETIRE:   (frozenset({S.RETIRED}), CannotBeUnretiredError),
    Transition.DEBUT:      (frozenset({S.UNACTIVATED, S.FUTURE_ACTIVATION}), CannotBeDebutedError),
    Transition.DEACTIVATE: (frozenset({S.ACTIVE}), CannotBeDeactivatedError),
    Transition.REACTIVATE: (frozenset({S.INACTIVE}), CannotBeActivatedError),
    Transition.JOIN:       (frozenset({S.EMPLOYED, S.FUTURE_EMPLOYMENT}), MembershipConflictError),
    Transition.LEAVE:      (frozenset({S.EMPLOYED, S.FUTURE_EMPLOYMENT, S.SUSPENDED, S.INJURED,
                                       S.RELEASED, S.RETIRED}),
                            MembershipConflictError),
}

# Groups, the member kinds each accepts, and the statuses in which a
# group takes new members.
GROUP_MEMBERS: Dict[EntityKind, FrozenSet[EntityKind]] = {
    EntityKind.FACTION: frozenset({EntityKind.PERFORMER, EntityKind.MANAGER, EntityKind.TEAM}),
    EntityKind.TEAM: frozenset({EntityKind.PERFORMER}),
}
GROUP_OPEN_STATUSES: Dict[EntityKind, FrozenSet[Status]] = {
    EntityKind.FACTION: frozenset({S.UNACTIVATED, S.FUTURE_ACTIVATION, S.ACTIVE}),
    EntityKind.TEAM: frozenset({S.UNACTIVATED, S.FUTURE_EMPLOYMENT, S.EMPLOYED}),
}
GROUP_KINDS = frozenset(GROUP_MEMBERS)


@dataclass(frozen=True)
class Decision:
    """Outcome of a guard evaluation."""
    transition: Transition
    status: Status
    error: Optional[TransitionError] = None

    @property
    def allowed(self) -> bool:
        return self.error is None


def legal_statuses(transition: Transition) -> FrozenSet[Status]:
    return RULES[transition][0]


def evaluate(transition: Transition, entity: Entity, family: EntityFamily,
             status: Status) -> Decision:
    """
    Decide whether *transition* is legal for *entity* in *status*.

    Examples
    --------
    >>> from tenure.families import INDIVIDUAL
    >>> ent = Entity("Vera Vale", EntityKind.PERFORMER)
    >>> evaluate(Transition.RELEASE, ent, INDIVIDUAL, Status.UNACTIVATED).allowed
    False
    """
    legal, error = RULES[transition]
    if not family.supports(transition):
        return Decision(transition, status, error.unsupported(entity))
    if status not in legal:
        return Decision(transition, status, error.for_status(entity, status))
    return Decision(transition, status)


def check(transition: Transition, entity: Entity, family: EntityFamily,
          status: Status) -> None:
    """Raise the rejection error if *transition* is not legal."""
    decision = evaluate(transition, entity, family, status)
    if not decision.allowed:
        raise decision.error


def allows(transition: Transition, entity: Entity, family: EntityFamily,
           status: Status) -> bool:
    return evaluate(transition, entity, family, status).allowed


def check_join(member: Entity, member_family: EntityFamily, member_status: Status,
               membership: Optional[Period], group: Entity, group_status: Status) -> None:
    """
    Membership guard: the member must be bookable and not already in a
    group; the group must take members of the member's kind and be in
    one of its open statuses (a faction that has not gone inactive or
    retired, a team that is still employed).
    """
    check(Transition.JOIN, member, member_family, member_status)
    if membership is not None:
        raise MembershipConflictError(
            f"This {member.label} already belongs to a group and cannot join another.",
            entity=member,
            status=member_status,
        )
    if group.kind not in GROUP_KINDS:
        raise MembershipConflictError(
            f"A {group.kind.value} does not take members.", entity=group
        )
    if member.kind not in GROUP_MEMBERS[group.kind]:
        raise MembershipConflictError(
            f"A {group.kind.value} does not take {member.kind.value} members.", entity=group
        )
    if group_status not in GROUP_OPEN_STATUSES[group.kind]:
        raise MembershipConflictError(
            f"This {group.label} is {group_status.label} and cannot take new members.",
            entity=group,
            status=group_status,
        )


def check_leave(member: Entity, member_family: EntityFamily, member_status: Status,
                membership: Optional[Period]) -> None:
    check(Transition.LEAVE, member, member_family, member_status)
    if membership is None:
        raise MembershipConflictError(
            f"This {member.label} does not belong to a group.",
            entity=member,
            status=member_status,
        )


def check_timing(transition: Transition, entity: Entity, periods: Iterable[Period],
                 at: datetime, moving: Optional[PeriodKind] = None) -> None:
    """
    Reject *transition* when *at* falls before the entity's recorded
    history.

    Periods are only ever appended at the end of the history, so every
    start and end already recorded must lie at or before *at*.  The open
    period of kind *moving* is about to be rescheduled and is skipped.
    """
    boundaries = []
    for p in periods:
        if p.ended_at is not None:
            boundaries.append(p.ended_at)
        if not (p.kind is moving and p.is_open):
            boundaries.append(p.started_at)
    latest = max(boundaries, default=None)
    if latest is not None and at < latest:
        error = RULES[transition][1]
        raise error(
            f"This {entity.label} cannot be {error.action} effective {at.isoformat()}; "
            f"its history already runs to {latest.isoformat()}.",
            entity=entity,
        )
