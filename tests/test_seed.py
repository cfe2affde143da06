"""
tests/test_seed.py
==================

The sample roster seeds cleanly into a fresh database.
"""

import seed_database
from tenure.db import create_all, make_engine
from tenure.models import Status
from tenure.resolver import StatusResolver
from tenure.roster_db import DBRoster


def test_seed_database(monkeypatch, capsys):
    bind = make_engine("sqlite://")
    create_all(bind)
    monkeypatch.setattr(seed_database, "DBRoster", lambda: DBRoster(bind=bind))

    seed_database.seed_database()

    assert "Skipped" not in capsys.readouterr().err
    with DBRoster(bind=bind) as roster:
        resolver = StatusResolver(roster)
        statuses = {ent.name: resolver.status(ent) for ent in roster}
        assert len(roster.open_memberships(
            next(e.id for e in roster if e.name == "The Syndicate"))) == 3
    bind.dispose()

    assert statuses["Maria Garcia"] is Status.RETIRED
    assert statuses["Thomas Brown"] is Status.RELEASED
    assert statuses["Susan Taylor"] is Status.FUTURE_EMPLOYMENT
    assert statuses["Gold Belt"] is Status.ACTIVE
    assert statuses["Elizabeth Chen"] is Status.EMPLOYED
