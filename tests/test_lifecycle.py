"""
tests/test_lifecycle.py
=======================

Unit tests for the transition guard in tenure.lifecycle
"""

from datetime import datetime

import pytest

from tenure import lifecycle
from tenure.errors import (
    CannotBeEmployedError,
    CannotBeInjuredError,
    CannotBeReleasedError,
    MembershipConflictError,
)
from tenure.families import FACTION, INDIVIDUAL, TEAM
from tenure.models import Entity, EntityKind, Period, PeriodKind, Status, Transition


PERFORMER = Entity("Vera Vale", EntityKind.PERFORMER)
TAG_TEAM = Entity("The Night Shift", EntityKind.TEAM)
FACTION_ENT = Entity("The Syndicate", EntityKind.FACTION)
BELT = Entity("Gold Belt", EntityKind.CHAMPIONSHIP)
REFEREE = Entity("Thomas Brown", EntityKind.OFFICIAL)

# transition → statuses it is legal from, for the employment families
LEGAL = {
    Transition.EMPLOY: {Status.UNACTIVATED, Status.RELEASED, Status.FUTURE_EMPLOYMENT, Status.RETIRED},
    Transition.RELEASE: {Status.EMPLOYED, Status.SUSPENDED, Status.INJURED},
    Transition.SUSPEND: {Status.EMPLOYED},
    Transition.REINSTATE: {Status.SUSPENDED},
    Transition.INJURE: {Status.EMPLOYED},
    Transition.HEAL: {Status.INJURED},
    Transition.RETIRE: {Status.EMPLOYED, Status.SUSPENDED, Status.INJURED, Status.RELEASED},
    Transition.UNRETIRE: {Status.RETIRED},
}


@pytest.mark.parametrize("transition", sorted(LEGAL, key=lambda t: t.name))
def test_guard_table(transition):
    """Each transition is accepted exactly from its legal statuses."""
    for status in INDIVIDUAL.statuses:
        expected = status in LEGAL[transition]
        assert lifecycle.allows(transition, PERFORMER, INDIVIDUAL, status) is expected, status


def test_rejection_carries_typed_error_and_message():
    with pytest.raises(CannotBeReleasedError) as exc:
        lifecycle.check(Transition.RELEASE, PERFORMER, INDIVIDUAL, Status.UNACTIVATED)
    assert str(exc.value) == "This performer 'Vera Vale' is unactivated and cannot be released."
    assert exc.value.status is Status.UNACTIVATED
    assert exc.value.entity is PERFORMER


def test_suspended_cannot_be_employed():
    decision = lifecycle.evaluate(Transition.EMPLOY, PERFORMER, INDIVIDUAL, Status.SUSPENDED)
    assert not decision.allowed
    assert isinstance(decision.error, CannotBeEmployedError)


def test_unsupported_transition_for_family():
    """Teams have no injury dimension."""
    with pytest.raises(CannotBeInjuredError, match="A team cannot be injured"):
        lifecycle.check(Transition.INJURE, TAG_TEAM, TEAM, Status.EMPLOYED)


def test_activity_transitions():
    assert lifecycle.allows(Transition.DEBUT, FACTION_ENT, FACTION, Status.UNACTIVATED)
    assert lifecycle.allows(Transition.DEBUT, FACTION_ENT, FACTION, Status.FUTURE_ACTIVATION)
    assert not lifecycle.allows(Transition.DEBUT, FACTION_ENT, FACTION, Status.INACTIVE)
    assert lifecycle.allows(Transition.REACTIVATE, FACTION_ENT, FACTION, Status.INACTIVE)
    assert lifecycle.allows(Transition.DEACTIVATE, FACTION_ENT, FACTION, Status.ACTIVE)
    assert lifecycle.allows(Transition.RETIRE, FACTION_ENT, FACTION, Status.INACTIVE)
    assert not lifecycle.allows(Transition.EMPLOY, FACTION_ENT, FACTION, Status.UNACTIVATED)


def test_guard_does_not_mutate():
    before = (PERFORMER.name, PERFORMER.deleted_at)
    lifecycle.evaluate(Transition.RETIRE, PERFORMER, INDIVIDUAL, Status.EMPLOYED)
    assert (PERFORMER.name, PERFORMER.deleted_at) == before


def test_join_requires_open_group_and_no_current_membership():
    lifecycle.check_join(PERFORMER, INDIVIDUAL, Status.EMPLOYED, None,
                         FACTION_ENT, Status.ACTIVE)

    current = Period(PERFORMER.id, PeriodKind.MEMBERSHIP, datetime(2024, 1, 1))
    with pytest.raises(MembershipConflictError, match="already belongs"):
        lifecycle.check_join(PERFORMER, INDIVIDUAL, Status.EMPLOYED, current,
                             FACTION_ENT, Status.ACTIVE)
    with pytest.raises(MembershipConflictError, match="cannot take new members"):
        lifecycle.check_join(PERFORMER, INDIVIDUAL, Status.EMPLOYED, None,
                             FACTION_ENT, Status.RETIRED)
    with pytest.raises(MembershipConflictError, match="does not take members"):
        lifecycle.check_join(PERFORMER, INDIVIDUAL, Status.EMPLOYED, None,
                             BELT, Status.ACTIVE)
    with pytest.raises(MembershipConflictError):
        lifecycle.check_join(PERFORMER, INDIVIDUAL, Status.RELEASED, None,
                             FACTION_ENT, Status.ACTIVE)


def test_leave_requires_membership():
    with pytest.raises(MembershipConflictError, match="does not belong"):
        lifecycle.check_leave(PERFORMER, INDIVIDUAL, Status.EMPLOYED, None)


def test_tag_teams_take_performers_while_employed():
    lifecycle.check_join(PERFORMER, INDIVIDUAL, Status.EMPLOYED, None,
                         TAG_TEAM, Status.EMPLOYED)
    lifecycle.check_join(PERFORMER, INDIVIDUAL, Status.EMPLOYED, None,
                         TAG_TEAM, Status.FUTURE_EMPLOYMENT)
    with pytest.raises(MembershipConflictError, match="cannot take new members"):
        lifecycle.check_join(PERFORMER, INDIVIDUAL, Status.EMPLOYED, None,
                             TAG_TEAM, Status.RELEASED)
    with pytest.raises(MembershipConflictError, match="does not take official members"):
        lifecycle.check_join(REFEREE, INDIVIDUAL, Status.EMPLOYED, None,
                             TAG_TEAM, Status.EMPLOYED)


def test_factions_take_teams_but_not_while_inactive():
    lifecycle.check_join(TAG_TEAM, TEAM, Status.EMPLOYED, None,
                         FACTION_ENT, Status.ACTIVE)
    with pytest.raises(MembershipConflictError, match="is inactive and cannot take new members"):
        lifecycle.check_join(TAG_TEAM, TEAM, Status.EMPLOYED, None,
                             FACTION_ENT, Status.INACTIVE)


def test_timing_refuses_instants_before_recorded_history():
    history = [
        Period(PERFORMER.id, PeriodKind.EMPLOYMENT, datetime(2024, 1, 1), datetime(2024, 3, 1)),
    ]
    lifecycle.check_timing(Transition.EMPLOY, PERFORMER, history, datetime(2024, 3, 1))
    with pytest.raises(CannotBeEmployedError, match="history already runs to"):
        lifecycle.check_timing(Transition.EMPLOY, PERFORMER, history, datetime(2023, 6, 1))


def test_timing_skips_the_period_being_rescheduled():
    pending = [Period(PERFORMER.id, PeriodKind.EMPLOYMENT, datetime(2024, 9, 1))]
    lifecycle.check_timing(Transition.EMPLOY, PERFORMER, pending, datetime(2024, 5, 1),
                           moving=PeriodKind.EMPLOYMENT)
    with pytest.raises(CannotBeEmployedError):
        lifecycle.check_timing(Transition.EMPLOY, PERFORMER, pending, datetime(2024, 5, 1))
