"""
api.deps
========

FastAPI dependency providers.

`get_roster` returns one **DBRoster** so every request talks to the
persistent SQLite store; tests override it with an in‑memory
:class:`tenure.roster.Roster`.
"""

from functools import lru_cache

from fastapi import Depends

from tenure.actions import Orchestrator
from tenure.db import create_all
from tenure.events import EventSink, LoggingEventSink
from tenure.families import with_unretire_policy
from tenure.periods import Repository
from tenure.roster_db import DBRoster
from tenure.settings import Settings, settings


@lru_cache
def get_settings() -> Settings:
    """Return application settings."""
    return settings


@lru_cache
def get_roster() -> DBRoster:
    """Singleton DB‑backed roster (tables are created on first use)."""
    create_all()
    return DBRoster()


@lru_cache
def get_event_sink() -> EventSink:
    return LoggingEventSink()


def get_orchestrator(
    roster: Repository = Depends(get_roster),
    sink: EventSink = Depends(get_event_sink),
    cfg: Settings = Depends(get_settings),
) -> Orchestrator:
    """Orchestrator wired to the roster, the event sink and the Unretire policy."""
    return Orchestrator(roster, sink, families=with_unretire_policy(cfg.unretire_policy()))
