"""
tenure.families
===============

Entity families: one configuration object per group of entity kinds
that share period kinds, status precedence and transitions.  The
resolver, guard and orchestrator are written once against
:class:`EntityFamily`; nothing in them branches on the entity kind.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, FrozenSet, Tuple

from .models import EntityKind, PeriodKind, Status, Transition

E = PeriodKind


@dataclass(frozen=True)
class EntityFamily:
    """
    Status‑family configuration.

    Parameters
    ----------
    name : str
        Short identifier (``individual``, ``team``, ...).
    primary : PeriodKind
        Employment or Activity: the dimension that makes the entity
        bookable.
    blocking : tuple[tuple[PeriodKind, Status], ...]
        Kinds that outrank the primary kind, highest first, with the
        status each one yields while in effect.
    in_effect, pending, lapsed : Status
        Statuses for a primary period that is in effect, scheduled for
        the future, or closed.
    kinds : frozenset[PeriodKind]
        Every period kind the family records.
    transitions : frozenset[Transition]
        Transitions the family supports.
    unretire_reopens : bool
        Whether Unretire opens a new primary period.
    """
    name: str
    primary: PeriodKind
    blocking: Tuple[Tuple[PeriodKind, Status], ...]
    in_effect: Status
    pending: Status
    lapsed: Status
    kinds: FrozenSet[PeriodKind]
    transitions: FrozenSet[Transition]
    unretire_reopens: bool = True

    @property
    def statuses(self) -> FrozenSet[Status]:
        """The closed set of statuses this family resolves to."""
        return frozenset(
            {Status.UNACTIVATED, Status.RETIRED, self.in_effect, self.pending, self.lapsed}
            | {status for _, status in self.blocking}
        )

    def supports(self, transition: Transition) -> bool:
        return transition in self.transitions

    def has_kind(self, kind: PeriodKind) -> bool:
        return kind in self.kinds


_EMPLOYMENT_TRANSITIONS = frozenset({
    Transition.EMPLOY, Transition.RELEASE, Transition.SUSPEND,
    Transition.REINSTATE, Transition.RETIRE, Transition.UNRETIRE,
    Transition.JOIN, Transition.LEAVE,
})

_ACTIVITY_TRANSITIONS = frozenset({
    Transition.DEBUT, Transition.DEACTIVATE, Transition.REACTIVATE,
    Transition.RETIRE, Transition.UNRETIRE,
})

INDIVIDUAL = EntityFamily(
    name="individual",
    primary=E.EMPLOYMENT,
    blocking=((E.SUSPENSION, Status.SUSPENDED), (E.INJURY, Status.INJURED)),
    in_effect=Status.EMPLOYED,
    pending=Status.FUTURE_EMPLOYMENT,
    lapsed=Status.RELEASED,
    kinds=frozenset({E.EMPLOYMENT, E.SUSPENSION, E.INJURY, E.RETIREMENT, E.MEMBERSHIP}),
    transitions=_EMPLOYMENT_TRANSITIONS | {Transition.INJURE, Transition.HEAL},
)

# Teams are not injured; their members are.
TEAM = EntityFamily(
    name="team",
    primary=E.EMPLOYMENT,
    blocking=((E.SUSPENSION, Status.SUSPENDED),),
    in_effect=Status.EMPLOYED,
    pending=Status.FUTURE_EMPLOYMENT,
    lapsed=Status.RELEASED,
    kinds=frozenset({E.EMPLOYMENT, E.SUSPENSION, E.RETIREMENT, E.MEMBERSHIP}),
    transitions=_EMPLOYMENT_TRANSITIONS,
)

CHAMPIONSHIP = EntityFamily(
    name="championship",
    primary=E.ACTIVITY,
    blocking=(),
    in_effect=Status.ACTIVE,
    pending=Status.FUTURE_ACTIVATION,
    lapsed=Status.INACTIVE,
    kinds=frozenset({E.ACTIVITY, E.RETIREMENT}),
    transitions=_ACTIVITY_TRANSITIONS,
)

# A faction brought out of retirement stays inactive until reactivated.
FACTION = EntityFamily(
    name="faction",
    primary=E.ACTIVITY,
    blocking=(),
    in_effect=Status.ACTIVE,
    pending=Status.FUTURE_ACTIVATION,
    lapsed=Status.INACTIVE,
    kinds=frozenset({E.ACTIVITY, E.RETIREMENT}),
    transitions=_ACTIVITY_TRANSITIONS,
    unretire_reopens=False,
)

FAMILIES: Dict[EntityKind, EntityFamily] = {
    EntityKind.PERFORMER: INDIVIDUAL,
    EntityKind.OFFICIAL: INDIVIDUAL,
    EntityKind.MANAGER: INDIVIDUAL,
    EntityKind.TEAM: TEAM,
    EntityKind.CHAMPIONSHIP: CHAMPIONSHIP,
    EntityKind.FACTION: FACTION,
}


def family_for(kind: EntityKind) -> EntityFamily:
    """Return the family configured for an entity kind."""
    return FAMILIES[kind]


def with_unretire_policy(overrides: Dict[str, bool]) -> Dict[EntityKind, EntityFamily]:
    """
    Return a copy of :data:`FAMILIES` with ``unretire_reopens`` replaced
    for every family named in *overrides*.
    """
    rebuilt: Dict[str, EntityFamily] = {}
    families: Dict[EntityKind, EntityFamily] = {}
    for kind, family in FAMILIES.items():
        if family.name not in rebuilt:
            policy = overrides.get(family.name)
            rebuilt[family.name] = (
                family if policy is None else replace(family, unretire_reopens=policy)
            )
        families[kind] = rebuilt[family.name]
    return families
