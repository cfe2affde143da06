"""
tenure.errors
=============

Exception hierarchy for the lifecycle engine.

Two families matter to callers:

* :class:`TransitionError` – a guard rejected the request.  Nothing was
  written; the message is safe to show to an end user.
* :class:`PeriodIntegrityError` – a period‑store invariant would have
  been broken.  The guard should make these unreachable, so they are
  reported as internal faults.
"""

from __future__ import annotations

from typing import Optional

from .models import Entity, Status


class TenureError(Exception):
    """Base class for every error raised by the engine."""


# ---------------------------------------------------------------------------
# Guard rejections
# ---------------------------------------------------------------------------
class TransitionError(TenureError):
    """A requested transition is not legal for the entity's status."""

    action = "changed"

    def __init__(self, message: str, entity: Optional[Entity] = None,
                 status: Optional[Status] = None) -> None:
        super().__init__(message)
        self.entity = entity
        self.status = status

    @classmethod
    def for_status(cls, entity: Entity, status: Status) -> "TransitionError":
        """Build ``This <kind> '<name>' is <status> and cannot be <action>.``"""
        return cls(
            f"This {entity.label} is {status.label} and cannot be {cls.action}.",
            entity=entity,
            status=status,
        )

    @classmethod
    def unsupported(cls, entity: Entity) -> "TransitionError":
        return cls(
            f"A {entity.kind.value} cannot be {cls.action}.",
            entity=entity,
        )


class CannotBeEmployedError(TransitionError):
    action = "employed"


class CannotBeReleasedError(TransitionError):
    action = "released"


class CannotBeSuspendedError(TransitionError):
    action = "suspended"


class CannotBeReinstatedError(TransitionError):
    action = "reinstated"


class CannotBeInjuredError(TransitionError):
    action = "injured"


class CannotBeHealedError(TransitionError):
    action = "healed"


class CannotBeRetiredError(TransitionError):
    action = "retired"


class CannotBeUnretiredError(TransitionError):
    action = "unretired"


class CannotBeDebutedError(TransitionError):
    action = "debuted"


class CannotBeDeactivatedError(TransitionError):
    action = "deactivated"


class CannotBeActivatedError(TransitionError):
    action = "reactivated"


class CannotBeDeletedError(TransitionError):
    action = "deleted"


class CannotBeRestoredError(TransitionError):
    action = "restored"


class MembershipConflictError(TransitionError):
    action = "moved between groups"


# ---------------------------------------------------------------------------
# Period‑store invariants
# ---------------------------------------------------------------------------
class PeriodIntegrityError(TenureError):
    """A period write would break an invariant of the store."""


class OverlappingPeriodError(PeriodIntegrityError):
    """An open period of the kind exists, or the new one overlaps history."""


class NoOpenPeriodError(PeriodIntegrityError):
    """A close was requested but no period of the kind is open."""


class InvalidRangeError(PeriodIntegrityError):
    """A period would end before it starts."""


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------
class EntityNotFoundError(TenureError, KeyError):
    """No entity is registered under the requested id."""

    def __str__(self) -> str:        # KeyError quotes its argument
        return f"Entity not found: {self.args[0]}"
