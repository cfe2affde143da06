"""
tenure.memberships
==================

Member → group graph built on NetworkX from membership periods.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

import networkx as nx

from .models import PeriodKind
from .periods import Repository


class MembershipGraph:
    """
    Directed graph of who belonged to which group at one instant.

    Each edge member → group stores the ``joined_at`` instant of the
    membership period in effect.

    Example
    -------
    >>> graph = MembershipGraph.as_of(roster, datetime(2024, 6, 1))
    >>> graph.members_of(faction.id)
    ['3f2a...', '9c1e...']
    """

    def __init__(self, at: datetime) -> None:
        self.at = at
        self.g = nx.DiGraph()

    @classmethod
    def as_of(cls, repository: Repository, at: datetime) -> "MembershipGraph":
        """Build the graph from every membership period in effect at *at*."""
        graph = cls(at)
        for period in repository.all_periods(PeriodKind.MEMBERSHIP):
            if period.subject_id and period.in_effect_at(at):
                graph.link(period.owner_id, period.subject_id, period.started_at)
        return graph

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def link(self, member: str, group: str, joined_at: datetime) -> None:
        """Add an edge member → group.  Nodes are created as needed."""
        self.g.add_edge(member, group, joined_at=joined_at)

    def members_of(self, group: str) -> List[str]:
        """Members of *group*, earliest joiner first."""
        if group not in self.g:
            return []
        return sorted(
            self.g.predecessors(group),
            key=lambda member: self.g.edges[member, group]["joined_at"],
        )

    def groups_of(self, member: str) -> List[str]:
        if member not in self.g:
            return []
        return list(self.g.successors(member))

    def joined_at(self, member: str, group: str) -> Optional[datetime]:
        if not self.g.has_edge(member, group):
            return None
        return self.g.edges[member, group]["joined_at"]

    def to_json(self) -> Dict[str, Any]:
        """Nodes and links arrays, the shape graph front‑ends expect."""
        groups = {target for _, target in self.g.edges()}
        nodes = [
            {"id": node, "type": "GROUP" if node in groups else "MEMBER"}
            for node in self.g.nodes()
        ]
        links = [
            {"source": source, "target": target, "joined_at": data["joined_at"].isoformat()}
            for source, target, data in self.g.edges(data=True)
        ]
        return {"at": self.at.isoformat(), "nodes": nodes, "links": links}
