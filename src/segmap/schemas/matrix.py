"""Reachability matrix schemas."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from segmap.schemas.inventory import FirewallRule


class FlowStatus(str, Enum):
    SELF = "self"
    ALLOWED = "allowed"
    BLOCKED = "blocked"
    PARTIAL = "partial"


class ReachabilityCell(BaseModel):
    from_zone: str
    to_zone: str
    status: FlowStatus
    rules: list[FirewallRule] = Field(default_factory=list)
    summary: str = ""


class MatrixStats(BaseModel):
    allowed: int = 0
    blocked: int = 0
    partial: int = 0


class ReachabilityMatrix(BaseModel):
    """Pairwise zone reachability, keyed by zone name.

    ``labels`` fixes the output order; ``cells[from_zone][to_zone]`` holds the
    derived cell. Use ``rows()`` for the index-ordered form.
    """

    labels: list[str] = Field(default_factory=list)
    cells: dict[str, dict[str, ReachabilityCell]] = Field(default_factory=dict)

    def cell(self, from_zone: str, to_zone: str) -> ReachabilityCell:
        return self.cells[from_zone][to_zone]

    def rows(self) -> list[list[ReachabilityCell]]:
        return [[self.cells[f][t] for t in self.labels] for f in self.labels]

    def stats(self) -> MatrixStats:
        stats = MatrixStats()
        for row in self.cells.values():
            for cell in row.values():
                if cell.status == FlowStatus.ALLOWED:
                    stats.allowed += 1
                elif cell.status == FlowStatus.PARTIAL:
                    stats.partial += 1
                elif cell.status == FlowStatus.BLOCKED:
                    stats.blocked += 1
        return stats


class MatrixResponse(BaseModel):
    labels: list[str]
    matrix: list[list[ReachabilityCell]]
    stats: MatrixStats

    @classmethod
    def from_matrix(cls, matrix: ReachabilityMatrix) -> MatrixResponse:
        return cls(labels=matrix.labels, matrix=matrix.rows(), stats=matrix.stats())
