"""
tenure.models
=============

Dataclasses and enums for roster entities and the time periods that
record their standing.  An entity never stores its status; the value is
derived from its periods by :pymod:`tenure.resolver`.

These objects carry **no** external‑library dependencies so that the
engine can be exercised without a database.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4


class PeriodKind(Enum):
    """Status dimensions recorded as open‑ended periods."""
    EMPLOYMENT = "employment"
    SUSPENSION = "suspension"
    INJURY = "injury"
    RETIREMENT = "retirement"
    ACTIVITY = "activity"
    MEMBERSHIP = "membership"

    def __str__(self) -> str:
        return self.name


class Status(Enum):
    """Every derived status value; each family uses a subset."""
    UNACTIVATED = "unactivated"
    FUTURE_EMPLOYMENT = "future_employment"
    EMPLOYED = "employed"
    INJURED = "injured"
    SUSPENDED = "suspended"
    RELEASED = "released"
    RETIRED = "retired"
    FUTURE_ACTIVATION = "future_activation"
    ACTIVE = "active"
    INACTIVE = "inactive"

    def __str__(self) -> str:        # nicer REPL display
        return self.name

    @property
    def label(self) -> str:
        """Lower‑case phrase used in rejection messages."""
        if self is Status.FUTURE_EMPLOYMENT:
            return "awaiting employment"
        if self is Status.FUTURE_ACTIVATION:
            return "awaiting debut"
        return self.value


class EntityKind(Enum):
    """Kinds of roster entity."""
    PERFORMER = "performer"
    OFFICIAL = "official"
    MANAGER = "manager"
    TEAM = "team"
    FACTION = "faction"
    CHAMPIONSHIP = "championship"

    def __str__(self) -> str:
        return self.name


class Transition(Enum):
    """Requested state changes, valued by the verb used in messages."""
    EMPLOY = "employed"
    RELEASE = "released"
    SUSPEND = "suspended"
    REINSTATE = "reinstated"
    INJURE = "injured"
    HEAL = "healed"
    RETIRE = "retired"
    UNRETIRE = "unretired"
    DEBUT = "debuted"
    DEACTIVATE = "deactivated"
    REACTIVATE = "reactivated"
    JOIN = "joined"
    LEAVE = "left"

    def __str__(self) -> str:
        return self.name

    @property
    def event_name(self) -> str:
        """Past‑tense name published once the transition completes."""
        return self.value.capitalize()


@dataclass
class Period:
    """
    One interval during which a status dimension applied to an owner.

    Parameters
    ----------
    owner_id : str
        Identifier of the owning entity.
    kind : PeriodKind
        Status dimension recorded by this period.
    started_at : datetime.datetime
        Instant the period takes effect.
    ended_at : datetime.datetime | None
        Instant the period stopped applying; ``None`` while open.
    subject_id : str | None
        Group the owner belongs to (membership periods only).
    notes : str | None
        Free‑text notes supplied with the transition.
    id : int | None
        Repository‑assigned identifier.
    """
    owner_id: str
    kind: PeriodKind
    started_at: datetime
    ended_at: Optional[datetime] = None
    subject_id: Optional[str] = None
    notes: Optional[str] = None
    id: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.ended_at is None

    def in_effect_at(self, at: datetime) -> bool:
        """True when *at* falls inside ``[started_at, ended_at)``."""
        if self.started_at > at:
            return False
        return self.ended_at is None or at < self.ended_at

    def pending_at(self, at: datetime) -> bool:
        """True for an open period that has not yet started at *at*."""
        return self.ended_at is None and self.started_at > at


@dataclass
class Entity:
    """
    A roster member, group or championship tracked by Tenure.

    Parameters
    ----------
    name : str
        Display name (e.g., "The Iron Duke").
    kind : EntityKind
        Determines the entity family and therefore the applicable
        period kinds and transitions.
    id : str
        Opaque identifier; a random hex string by default.
    created_at : datetime.datetime | None
        When the record was created.
    deleted_at : datetime.datetime | None
        Soft‑delete marker; periods are retained while set.
    """
    name: str
    kind: EntityKind
    id: str = field(default_factory=lambda: uuid4().hex)
    created_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def label(self) -> str:
        """``kind 'name'`` phrase used in messages."""
        return f"{self.kind.value} '{self.name}'"
