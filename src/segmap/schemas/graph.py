"""Topology graph schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from segmap.schemas.matrix import FlowStatus


class TopologyFilters(BaseModel):
    hide_infra_networks: bool = False
    hide_stopped_vms: bool = False


class ZoneWorkload(BaseModel):
    vmid: int
    name: str
    status: str
    is_isolated: bool = False
    firewall_enabled: bool = False
    applied_sgs: list[str] = Field(default_factory=list)
    node: str | None = None


class InternetNodeData(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["internet"] = "internet"
    label: str = "Internet"


class ClusterFirewallNodeData(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["clusterFirewall"] = "clusterFirewall"
    label: str = "Cluster Firewall"
    enabled: bool = False
    policy_in: str = "DROP"
    policy_out: str = "ACCEPT"
    rule_count: int = 0


class SecurityZoneNodeData(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["securityZone"] = "securityZone"
    label: str
    cidr: str
    gateway: str | None = None
    has_gateway: bool = False
    has_base_sg: bool = False
    zone_index: int
    color: str
    vms: list[ZoneWorkload] = Field(default_factory=list)


class TopologyNode(BaseModel):
    """``data.type`` mirrors ``type`` and selects the node-data model."""

    id: str
    type: str  # internet | clusterFirewall | securityZone
    data: InternetNodeData | ClusterFirewallNodeData | SecurityZoneNodeData = Field(discriminator="type")


class EdgeStyle(BaseModel):
    stroke: str
    stroke_width: float = 1.5
    stroke_dasharray: str | None = None


class TopologyEdge(BaseModel):
    id: str
    source: str
    target: str
    kind: str  # ingress | zone | flow
    animated: bool = False
    style: EdgeStyle
    label: str | None = None
    # Flow edges only: lets a renderer look the cell back up in the matrix
    from_zone: str | None = None
    to_zone: str | None = None
    status: FlowStatus | None = None
    rule_count: int = 0


class TopologyGraph(BaseModel):
    nodes: list[TopologyNode]
    edges: list[TopologyEdge]
    node_count: int = 0
    edge_count: int = 0


class ZoneDetails(BaseModel):
    zone: str
    vm_count: int
    isolated_count: int
    unprotected_count: int
    applied_sgs: list[str]
