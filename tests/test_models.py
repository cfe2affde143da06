"""
tests/test_models.py
====================

Unit tests for the dataclasses and enums defined in tenure.models.

Run:  pytest -q
"""

from datetime import datetime

from tenure.models import Entity, EntityKind, Period, PeriodKind, Status, Transition


def test_str_on_enums():
    """Enum __str__ returns its name (nicer REPL)."""
    assert str(Status.EMPLOYED) == "EMPLOYED"
    assert str(PeriodKind.INJURY) == "INJURY"
    assert str(EntityKind.FACTION) == "FACTION"


def test_status_labels_used_in_messages():
    assert Status.SUSPENDED.label == "suspended"
    assert Status.FUTURE_EMPLOYMENT.label == "awaiting employment"
    assert Status.FUTURE_ACTIVATION.label == "awaiting debut"


def test_transition_event_names_are_past_tense():
    assert Transition.RETIRE.event_name == "Retired"
    assert Transition.RELEASE.event_name == "Released"
    assert Transition.LEAVE.event_name == "Left"


def test_entity_defaults():
    """A new entity gets a random id and is not deleted."""
    a = Entity("Vera Vale", EntityKind.PERFORMER)
    b = Entity("Vera Vale", EntityKind.PERFORMER)
    assert a.id != b.id
    assert not a.is_deleted
    assert a.label == "performer 'Vera Vale'"


def test_period_in_effect_is_half_open():
    """A period applies from its start up to, not including, its end."""
    p = Period("x", PeriodKind.EMPLOYMENT, datetime(2024, 1, 1), datetime(2024, 3, 1))
    assert not p.in_effect_at(datetime(2023, 12, 31))
    assert p.in_effect_at(datetime(2024, 1, 1))
    assert p.in_effect_at(datetime(2024, 2, 29))
    assert not p.in_effect_at(datetime(2024, 3, 1))
    assert not p.is_open


def test_open_period_pending_until_it_starts():
    p = Period("x", PeriodKind.EMPLOYMENT, datetime(2024, 5, 1))
    assert p.is_open
    assert p.pending_at(datetime(2024, 4, 30))
    assert not p.pending_at(datetime(2024, 5, 1))
    assert p.in_effect_at(datetime(2030, 1, 1))
