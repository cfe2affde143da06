"""
Tenure
======

A lifecycle/status engine for a roster of performers, officials, managers,
teams, factions and championships.  Every change of standing (hired,
suspended, injured, retired, reinstated) is recorded as an open‑ended
period, and the status at any instant is derived from those periods.

Import structure
----------------
`import tenure` is intentionally cheap: the engine modules use only the
standard library.  *SQLModel* is imported by :pymod:`tenure.db` /
:pymod:`tenure.roster_db`, and *networkx* by :pymod:`tenure.memberships`.

Sub‑modules
~~~~~~~~~~~
- :pymod:`tenure.models`       – ``Entity`` / ``Period`` dataclasses + enums
- :pymod:`tenure.families`     – per‑family status configuration
- :pymod:`tenure.periods`      – period query shapes + repository contract
- :pymod:`tenure.resolver`     – status resolution (``StatusResolver``)
- :pymod:`tenure.lifecycle`    – transition guard (``RULES``, ``check``)
- :pymod:`tenure.actions`      – orchestrator (``Orchestrator``)
- :pymod:`tenure.events`       – transition events and sinks
- :pymod:`tenure.roster`       – in‑memory repository
- :pymod:`tenure.roster_db`    – SQLModel repository
- :pymod:`tenure.memberships`  – member → group graph (NetworkX)

Quick start
-----------
>>> from datetime import datetime
>>> from tenure.actions import Orchestrator
>>> from tenure.models import EntityKind
>>> from tenure.roster import Roster
>>> engine = Orchestrator(Roster())
>>> ent = engine.create("Vera Vale", EntityKind.PERFORMER)
>>> ent = engine.employ(ent, datetime(2024, 1, 1))
>>> engine.status(ent, datetime(2024, 6, 1))
<Status.EMPLOYED: 'employed'>

"""

__all__ = [
    "models",
    "families",
    "periods",
    "resolver",
    "lifecycle",
    "actions",
    "events",
    "roster",
    "roster_db",
    "memberships",
]

__version__ = "0.1.0"
