#!/usr/bin/env python
"""
Seed database with a sample roster for testing.

Every entity is created and moved through its history with the
orchestrator, so the stored periods are exactly what real requests
would have produced.
"""

import json
import sys
from datetime import datetime

from tenure.actions import Orchestrator
from tenure.errors import TenureError
from tenure.models import EntityKind, Transition
from tenure.roster_db import DBRoster

# (name, kind, start, [(transition, effective date), ...])
SAMPLE_ROSTER = [
    ("Vera Vale", EntityKind.PERFORMER, datetime(2020, 1, 15), [
        (Transition.SUSPEND, datetime(2021, 3, 1)),
        (Transition.REINSTATE, datetime(2021, 4, 1)),
    ]),
    ("Rex Ruin", EntityKind.PERFORMER, datetime(2019, 6, 22), [
        (Transition.INJURE, datetime(2021, 8, 5)),
        (Transition.HEAL, datetime(2021, 10, 1)),
    ]),
    ("Patricia White", EntityKind.PERFORMER, datetime(2021, 1, 1), []),
    ("Elizabeth Chen", EntityKind.MANAGER, datetime(2022, 4, 12), []),
    ("Maria Garcia", EntityKind.PERFORMER, datetime(2015, 8, 30), [
        (Transition.RETIRE, datetime(2022, 12, 31)),
    ]),
    ("Thomas Brown", EntityKind.OFFICIAL, datetime(2018, 11, 5), [
        (Transition.RELEASE, datetime(2023, 2, 1)),
    ]),
    ("Susan Taylor", EntityKind.OFFICIAL, datetime(2099, 1, 1), []),
    ("The Night Shift", EntityKind.TEAM, datetime(2022, 4, 12), []),
    ("Gold Belt", EntityKind.CHAMPIONSHIP, datetime(2017, 9, 8), [
        (Transition.DEACTIVATE, datetime(2020, 3, 1)),
        (Transition.REACTIVATE, datetime(2021, 1, 1)),
    ]),
    ("The Syndicate", EntityKind.FACTION, datetime(2020, 7, 19), []),
]

# member name → group name (faction or tag team), joined at
SAMPLE_MEMBERSHIPS = [
    ("Vera Vale", "The Syndicate", datetime(2021, 5, 1)),
    ("Rex Ruin", "The Syndicate", datetime(2022, 1, 10)),
    ("Elizabeth Chen", "The Syndicate", datetime(2022, 6, 1)),
    ("Patricia White", "The Night Shift", datetime(2022, 5, 1)),
]

# Add additional entities from sample_roster.json if available
try:
    with open("sample_roster.json", "r") as f:
        sample_data = json.load(f)

    for entity_data in sample_data:
        try:
            kind = EntityKind(entity_data.get("kind", "performer"))
        except ValueError:
            kind = EntityKind.PERFORMER
        started = entity_data.get("started_at")
        SAMPLE_ROSTER.append(
            (entity_data["name"], kind, datetime.fromisoformat(started) if started else None, [])
        )
except (FileNotFoundError, json.JSONDecodeError):
    # Continue with default sample roster
    pass


def seed_database():
    """Add the sample roster to the database."""
    with DBRoster() as roster:
        engine = Orchestrator(roster)
        by_name = {}
        for name, kind, started_at, steps in SAMPLE_ROSTER:
            ent = engine.create(name, kind, started_at)
            for transition, at in steps:
                ent = engine.apply(transition, ent, at)
            by_name[name] = ent
            print(f"Added: {name} ({engine.status(ent).label})")

        for member, group, at in SAMPLE_MEMBERSHIPS:
            try:
                engine.join(by_name[member], by_name[group], at)
            except TenureError as e:
                print(f"Skipped membership {member} → {group}: {e}", file=sys.stderr)

    print(f"\nAdded {len(SAMPLE_ROSTER)} entities to the database!")


if __name__ == "__main__":
    # Initialize DB if needed
    from tenure.db import create_all
    from tenure.settings import configure_logging

    configure_logging()
    print("Ensuring database tables exist...")
    create_all()

    # Seed the database
    print("Seeding database with sample roster...")
    seed_database()

    print("\nDone! You can now run the API server with:")
    print("uvicorn api.main:app --reload --port 8001")
