"""
tenure.db
=========

SQLite persistence layer for Tenure.

This module exposes:

* ``engine`` – a global SQLModel engine pointing at the configured URL
* ``SessionLocal`` – a session factory used via ``with SessionLocal() as s:``
* ``create_all()`` – helper to create tables at first run
* ``EntityRow`` / ``PeriodRow`` – ORM rows mirroring :pymod:`tenure.models`

The ``periods`` table carries a partial unique index on
``(owner_id, kind) WHERE ended_at IS NULL`` so that "at most one open
period per kind" also holds against concurrent writers.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime, Index, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Field, Session, SQLModel, create_engine

from tenure.models import Entity, EntityKind, Period, PeriodKind
from tenure.settings import DB_ECHO, DB_URL


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
def make_engine(url: str = DB_URL, echo: bool = DB_ECHO) -> Engine:
    """
    Build an engine.  ``sqlite://`` (in memory) shares one connection so
    every session sees the same database.
    """
    if url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if url.startswith("sqlite"):
        return create_engine(url, echo=echo, connect_args={"check_same_thread": False})
    return create_engine(url, echo=echo)


engine = make_engine()


# ---------------------------------------------------------------------------
# Session factory
# ---------------------------------------------------------------------------
def SessionLocal(bind: Optional[Engine] = None) -> Session:  # noqa: N802 (factory camel‑case for consistency with FastAPI docs)
    """Return a new Session bound to *bind* or the global engine."""
    return Session(bind or engine)


# ---------------------------------------------------------------------------
# ORM rows
# ---------------------------------------------------------------------------
class EntityRow(SQLModel, table=True):
    """SQLite‑backed representation of a :class:`tenure.models.Entity`."""

    __tablename__ = "entities"

    id: str = Field(primary_key=True, index=True)
    name: str
    kind: EntityKind
    created_at: Optional[datetime] = Field(default=None, sa_column=Column("created_at", DateTime))
    deleted_at: Optional[datetime] = Field(default=None, sa_column=Column("deleted_at", DateTime))

    @classmethod
    def from_entity(cls, ent: Entity) -> "EntityRow":
        return cls(
            id=ent.id,
            name=ent.name,
            kind=ent.kind,
            created_at=ent.created_at,
            deleted_at=ent.deleted_at,
        )

    def to_entity(self) -> Entity:
        return Entity(
            name=self.name,
            kind=self.kind,
            id=self.id,
            created_at=self.created_at,
            deleted_at=self.deleted_at,
        )


class PeriodRow(SQLModel, table=True):
    """
    One period.  Rows are only ever inserted or closed; the partial
    unique index rejects a second open row for the same owner and kind.
    """

    __tablename__ = "periods"
    __table_args__ = (
        Index(
            "uq_periods_open_per_kind",
            "owner_id",
            "kind",
            unique=True,
            sqlite_where=text("ended_at IS NULL"),
            postgresql_where=text("ended_at IS NULL"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: str = Field(foreign_key="entities.id", index=True)
    kind: PeriodKind = Field(index=True)
    subject_id: Optional[str] = Field(default=None, index=True)
    # instants are stored naive, exactly as the engine clock produces them
    started_at: datetime = Field(sa_column=Column("started_at", DateTime, nullable=False))
    ended_at: Optional[datetime] = Field(default=None, sa_column=Column("ended_at", DateTime))
    notes: Optional[str] = None

    @classmethod
    def from_period(cls, period: Period) -> "PeriodRow":
        return cls(
            id=period.id,
            owner_id=period.owner_id,
            kind=period.kind,
            subject_id=period.subject_id,
            started_at=period.started_at,
            ended_at=period.ended_at,
            notes=period.notes,
        )

    def to_period(self) -> Period:
        return Period(
            owner_id=self.owner_id,
            kind=self.kind,
            started_at=self.started_at,
            ended_at=self.ended_at,
            subject_id=self.subject_id,
            notes=self.notes,
            id=self.id,
        )


# ---------------------------------------------------------------------------
# Utility: create tables
# ---------------------------------------------------------------------------
def create_all(bind: Optional[Engine] = None) -> None:
    """Create the ``entities`` and ``periods`` tables if missing."""
    SQLModel.metadata.create_all(bind or engine)


def drop_all(bind: Optional[Engine] = None) -> None:
    SQLModel.metadata.drop_all(bind or engine)


# ---------------------------------------------------------------------------
# Lightweight CLI
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    """
    Quick bootstrap helper.

    Examples
    --------
    $ python -m tenure.db --create        # first‑time table creation
    $ python -m tenure.db --drop --create # start from an empty schema
    """
    import argparse
    import textwrap

    parser = argparse.ArgumentParser(
        prog="python -m tenure.db",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=textwrap.dedent(
            """\
            Tenure DB utilities
            -------------------
            --create   Create all SQLModel tables (safe if they already exist)
            --drop     Drop every table first (destroys all period history)
            """
        ),
    )
    parser.add_argument("--create", action="store_true", help="create tables")
    parser.add_argument("--drop", action="store_true", help="drop tables first")
    args = parser.parse_args()

    if args.drop:
        drop_all()
        print(f"tenure schema dropped ({DB_URL})")

    if args.create:
        create_all()
        print(f"tenure schema initialised ({DB_URL})")
