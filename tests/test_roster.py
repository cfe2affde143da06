"""
tests/test_roster.py
====================

Unit tests for tenure.roster.Roster: the period store contract and
units of work.
"""

from datetime import datetime

import pytest

from tenure.errors import (
    EntityNotFoundError,
    InvalidRangeError,
    NoOpenPeriodError,
    OverlappingPeriodError,
    PeriodIntegrityError,
)
from tenure.models import Entity, EntityKind, PeriodKind
from tenure.roster import Roster

EMP = PeriodKind.EMPLOYMENT


def _roster_with_performer():
    roster = Roster()
    ent = roster.create_entity(Entity("Vera Vale", EntityKind.PERFORMER))
    return roster, ent


def test_create_and_get_entity():
    roster, ent = _roster_with_performer()
    assert roster.get_entity(ent.id) is ent
    assert len(roster) == 1
    assert list(roster) == [ent]


def test_get_missing_entity_raises():
    with pytest.raises(EntityNotFoundError):
        Roster().get_entity("nobody")


def test_duplicate_id_rejected():
    roster, ent = _roster_with_performer()
    with pytest.raises(ValueError):
        roster.create_entity(Entity("Copy", EntityKind.PERFORMER, id=ent.id))


def test_open_then_close():
    roster, ent = _roster_with_performer()
    opened = roster.open(ent.id, EMP, datetime(2024, 1, 1))
    assert roster.current(ent.id, EMP) is opened

    closed = roster.close(ent.id, EMP, datetime(2024, 3, 1))
    assert closed.ended_at == datetime(2024, 3, 1)
    assert roster.current(ent.id, EMP) is None
    assert roster.latest_closed(ent.id, EMP) is closed


def test_second_open_period_rejected():
    roster, ent = _roster_with_performer()
    roster.open(ent.id, EMP, datetime(2024, 1, 1))
    with pytest.raises(OverlappingPeriodError):
        roster.open(ent.id, EMP, datetime(2024, 2, 1))


def test_open_before_previous_end_rejected():
    roster, ent = _roster_with_performer()
    roster.open(ent.id, EMP, datetime(2024, 1, 1))
    roster.close(ent.id, EMP, datetime(2024, 3, 1))
    with pytest.raises(OverlappingPeriodError):
        roster.open(ent.id, EMP, datetime(2024, 2, 1))
    # touching the previous end is fine
    assert roster.open(ent.id, EMP, datetime(2024, 3, 1)).is_open


def test_close_without_open_period():
    roster, ent = _roster_with_performer()
    with pytest.raises(NoOpenPeriodError):
        roster.close(ent.id, EMP, datetime(2024, 1, 1))


def test_close_before_start_rejected():
    roster, ent = _roster_with_performer()
    roster.open(ent.id, EMP, datetime(2024, 1, 1))
    with pytest.raises(InvalidRangeError):
        roster.close(ent.id, EMP, datetime(2023, 12, 31))
    assert roster.current(ent.id, EMP).ended_at is None


def test_history_and_first_are_chronological():
    roster, ent = _roster_with_performer()
    roster.open(ent.id, EMP, datetime(2020, 1, 1))
    roster.close(ent.id, EMP, datetime(2021, 1, 1))
    roster.open(ent.id, EMP, datetime(2022, 1, 1))
    starts = [p.started_at for p in roster.history(ent.id, EMP)]
    assert starts == [datetime(2020, 1, 1), datetime(2022, 1, 1)]
    assert roster.first(ent.id, EMP).started_at == datetime(2020, 1, 1)
    assert roster.history(ent.id, PeriodKind.INJURY) == []


def test_reschedule_only_moves_pending_period():
    roster, ent = _roster_with_performer()
    roster.open(ent.id, EMP, datetime(2024, 9, 1))
    moved = roster.reschedule(ent.id, EMP, datetime(2024, 7, 1))
    assert moved.started_at == datetime(2024, 7, 1)
    with pytest.raises(InvalidRangeError):
        roster.reschedule(ent.id, EMP, datetime(2024, 8, 1))


def test_transaction_rolls_back_every_write():
    roster, ent = _roster_with_performer()
    roster.open(ent.id, EMP, datetime(2024, 1, 1))

    with pytest.raises(RuntimeError):
        with roster.transaction():
            roster.close(ent.id, EMP, datetime(2024, 2, 1))
            roster.open(ent.id, PeriodKind.RETIREMENT, datetime(2024, 2, 1))
            roster.create_entity(Entity("Ghost", EntityKind.OFFICIAL))
            raise RuntimeError("boom")

    assert roster.current(ent.id, EMP).ended_at is None
    assert roster.history(ent.id, PeriodKind.RETIREMENT) == []
    assert len(roster) == 1


def test_transaction_commits_on_success():
    roster, ent = _roster_with_performer()
    with roster.transaction():
        roster.open(ent.id, EMP, datetime(2024, 1, 1))
    assert roster.current(ent.id, EMP) is not None


def test_discard_only_inside_the_creating_unit_of_work():
    roster, ent = _roster_with_performer()
    committed = roster.open(ent.id, EMP, datetime(2024, 1, 1))
    with pytest.raises(PeriodIntegrityError):
        roster.discard(committed.id)

    with roster.transaction():
        suspension = roster.open(ent.id, PeriodKind.SUSPENSION, datetime(2024, 2, 1))
        roster.discard(suspension.id)
    assert roster.history(ent.id, PeriodKind.SUSPENSION) == []


def test_soft_delete_keeps_periods():
    roster, ent = _roster_with_performer()
    roster.open(ent.id, EMP, datetime(2024, 1, 1))
    roster.delete_entity(ent.id, datetime(2024, 5, 1))
    assert roster.get_entity(ent.id).is_deleted
    assert len(roster.history(ent.id, EMP)) == 1

    roster.restore_entity(ent.id)
    assert not roster.get_entity(ent.id).is_deleted
