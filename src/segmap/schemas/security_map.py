"""Security map response schemas."""

from __future__ import annotations

from pydantic import BaseModel

from segmap.schemas.graph import TopologyGraph
from segmap.schemas.matrix import MatrixResponse


class SecurityMapResponse(BaseModel):
    flow_matrix: MatrixResponse
    graph: TopologyGraph
