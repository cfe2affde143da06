"""
api.entities
============

Endpoints for creating entities, reading their derived status and
period history, and requesting transitions.

Guard rejections surface unchanged as 409 responses (see
:pymod:`api.main` for the exception handlers).
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from tenure.actions import Orchestrator
from tenure.memberships import MembershipGraph
from tenure.models import Entity, EntityKind, Period, PeriodKind, Status, Transition
from api.deps import get_orchestrator

router = APIRouter()


# ---------- request / response models ----------
class EntityCreate(BaseModel):
    name: str
    kind: EntityKind
    started_at: Optional[datetime] = None
    notes: Optional[str] = None


class TransitionRequest(BaseModel):
    effective_date: Optional[datetime] = None
    notes: Optional[str] = None


class EntityView(BaseModel):
    id: str
    name: str
    kind: EntityKind
    status: Status
    started_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None


class PeriodView(BaseModel):
    id: Optional[int]
    kind: PeriodKind
    started_at: datetime
    ended_at: Optional[datetime] = None
    subject_id: Optional[str] = None
    notes: Optional[str] = None


class StatusView(BaseModel):
    status: Status
    at: datetime


def _view(engine: Orchestrator, ent: Entity) -> EntityView:
    return EntityView(
        id=ent.id,
        name=ent.name,
        kind=ent.kind,
        status=engine.status(ent),
        started_at=engine.resolver.started_at(ent),
        deleted_at=ent.deleted_at,
    )


def _period_view(p: Period) -> PeriodView:
    return PeriodView(
        id=p.id,
        kind=p.kind,
        started_at=p.started_at,
        ended_at=p.ended_at,
        subject_id=p.subject_id,
        notes=p.notes,
    )


# ---------- POST /entities ----------
@router.post("/entities", status_code=201, response_model=EntityView)
def create_entity(data: EntityCreate, engine: Orchestrator = Depends(get_orchestrator)):
    ent = engine.create(data.name, data.kind, data.started_at, notes=data.notes)
    return _view(engine, ent)


# ---------- GET /entities ----------
@router.get("/entities", response_model=List[EntityView])
def list_entities(
    include_deleted: bool = Query(False, description="Include soft‑deleted entities"),
    engine: Orchestrator = Depends(get_orchestrator),
):
    return [
        _view(engine, ent)
        for ent in engine.repository
        if include_deleted or not ent.is_deleted
    ]


# ---------- GET /entities/{entity_id} ----------
@router.get("/entities/{entity_id}", response_model=EntityView)
def get_entity(entity_id: str, engine: Orchestrator = Depends(get_orchestrator)):
    return _view(engine, engine.repository.get_entity(entity_id))


@router.get("/entities/{entity_id}/status", response_model=StatusView)
def get_status(
    entity_id: str,
    at: Optional[datetime] = Query(None, description="Instant to resolve at (default: now)"),
    engine: Orchestrator = Depends(get_orchestrator),
):
    """Status at *at*; a past instant reconstructs the historical status."""
    ent = engine.repository.get_entity(entity_id)
    at = at or engine.clock()
    return StatusView(status=engine.status(ent, at), at=at)


@router.get("/entities/{entity_id}/timeline", response_model=List[StatusView])
def get_timeline(entity_id: str, engine: Orchestrator = Depends(get_orchestrator)):
    ent = engine.repository.get_entity(entity_id)
    return [StatusView(status=status, at=at) for at, status in engine.resolver.timeline(ent)]


@router.get("/entities/{entity_id}/periods", response_model=List[PeriodView])
def get_periods(
    entity_id: str,
    kind: Optional[PeriodKind] = Query(None, description="Only this period kind"),
    engine: Orchestrator = Depends(get_orchestrator),
):
    """Period history, oldest first."""
    ent = engine.repository.get_entity(entity_id)
    if kind is not None:
        rows = engine.repository.history(ent.id, kind)
    else:
        rows = sorted(engine.repository.periods(ent.id), key=lambda p: p.started_at)
    return [_period_view(p) for p in rows]


# ---------- transitions ----------
@router.post("/entities/{entity_id}/transitions/{name}", response_model=EntityView)
def request_transition(
    entity_id: str,
    name: str,
    data: Optional[TransitionRequest] = None,
    engine: Orchestrator = Depends(get_orchestrator),
):
    """
    Apply a transition by name (``employ``, ``release``, ``suspend``,
    ``reinstate``, ``injure``, ``heal``, ``retire``, ``unretire``,
    ``debut``, ``deactivate``, ``reactivate``, ``leave``).
    """
    try:
        transition = Transition[name.upper()]
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown transition: {name}")
    if transition is Transition.JOIN:
        raise HTTPException(status_code=404, detail="Use /entities/{id}/join/{group_id}")
    data = data or TransitionRequest()
    ent = engine.repository.get_entity(entity_id)
    ent = engine.apply(transition, ent, data.effective_date, notes=data.notes)
    return _view(engine, ent)


@router.post("/entities/{entity_id}/join/{group_id}", response_model=EntityView)
def join_group(
    entity_id: str,
    group_id: str,
    data: Optional[TransitionRequest] = None,
    engine: Orchestrator = Depends(get_orchestrator),
):
    data = data or TransitionRequest()
    member = engine.repository.get_entity(entity_id)
    group = engine.repository.get_entity(group_id)
    return _view(engine, engine.join(member, group, data.effective_date))


# ---------- soft delete ----------
@router.delete("/entities/{entity_id}", response_model=EntityView)
def delete_entity(entity_id: str, engine: Orchestrator = Depends(get_orchestrator)):
    ent = engine.repository.get_entity(entity_id)
    return _view(engine, engine.delete(ent))


@router.post("/entities/{entity_id}/restore", response_model=EntityView)
def restore_entity(entity_id: str, engine: Orchestrator = Depends(get_orchestrator)):
    ent = engine.repository.get_entity(entity_id)
    return _view(engine, engine.restore(ent))


# ---------- GET /groups/{group_id}/members ----------
@router.get("/groups/{group_id}/members")
def group_members(
    group_id: str,
    at: Optional[datetime] = Query(None, description="Instant to resolve at (default: now)"),
    engine: Orchestrator = Depends(get_orchestrator),
):
    """Members of a faction at *at*, earliest joiner first."""
    group = engine.repository.get_entity(group_id)
    graph = MembershipGraph.as_of(engine.repository, at or engine.clock())
    members = [engine.repository.get_entity(m) for m in graph.members_of(group.id)]
    return {
        "group": group.id,
        "at": graph.at.isoformat(),
        "members": [
            {"id": m.id, "name": m.name, "joined_at": graph.joined_at(m.id, group.id).isoformat()}
            for m in members
        ],
    }
