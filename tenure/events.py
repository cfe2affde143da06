"""
tenure.events
=============

Transition events and the sinks that receive them.

The orchestrator publishes one :class:`TransitionEvent` per completed
transition to whatever object it was given as a sink.  Delivery is
fire‑and‑forget: the engine neither retries nor waits for an
acknowledgement.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Protocol

from .models import EntityKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionEvent:
    """
    Notification that a transition has been committed.

    ``name`` is the past‑tense transition ("Retired", "Released", ...).
    """
    name: str
    entity_id: str
    entity_kind: EntityKind
    effective_date: datetime

    def as_dict(self) -> dict:
        return {
            "name": self.name,
            "entity_id": self.entity_id,
            "entity_kind": self.entity_kind.value,
            "effective_date": self.effective_date.isoformat(),
        }


class EventSink(Protocol):
    def publish(self, event: TransitionEvent) -> None: ...


class LoggingEventSink:
    """Write every event to the ``tenure.events`` logger."""

    def publish(self, event: TransitionEvent) -> None:
        logger.info(
            f"{event.name}: {event.entity_kind.value} {event.entity_id} "
            f"effective {event.effective_date.isoformat()}"
        )


@dataclass
class RecordingEventSink:
    """Keep published events in memory, oldest first."""
    events: List[TransitionEvent] = field(default_factory=list)

    def publish(self, event: TransitionEvent) -> None:
        self.events.append(event)

    def names(self) -> List[str]:
        return [e.name for e in self.events]

    def clear(self) -> None:
        self.events.clear()
