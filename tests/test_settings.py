"""
tests/test_settings.py
======================

Unretire policy loaded from the environment and applied to families.
"""

from tenure.families import FAMILIES, with_unretire_policy
from tenure.models import EntityKind
from tenure.settings import Settings


def test_default_policy():
    policy = Settings(_env_file=None).unretire_policy()
    assert policy == {"individual": True, "team": True, "championship": True, "faction": False}


def test_policy_from_environment(monkeypatch):
    monkeypatch.setenv("TENURE_UNRETIRE_REOPENS_FACTION", "true")
    monkeypatch.setenv("TENURE_UNRETIRE_REOPENS_TEAM", "false")
    families = with_unretire_policy(Settings(_env_file=None).unretire_policy())
    assert families[EntityKind.FACTION].unretire_reopens is True
    assert families[EntityKind.TEAM].unretire_reopens is False
    # the shared module table is left alone
    assert FAMILIES[EntityKind.FACTION].unretire_reopens is False


def test_kinds_of_one_family_share_the_rebuilt_family():
    families = with_unretire_policy({"individual": False})
    assert families[EntityKind.PERFORMER] is families[EntityKind.OFFICIAL]
    assert families[EntityKind.PERFORMER].unretire_reopens is False
