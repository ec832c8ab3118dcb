"""Security topology graph construction."""

from __future__ import annotations

import logging
from typing import Sequence

from segmap.config import settings
from segmap.schemas.graph import (
    ClusterFirewallNodeData,
    EdgeStyle,
    InternetNodeData,
    SecurityZoneNodeData,
    TopologyEdge,
    TopologyFilters,
    TopologyGraph,
    TopologyNode,
    ZoneDetails,
    ZoneWorkload,
)
from segmap.schemas.inventory import ClusterFirewallOptions, NetworkZone, WorkloadSummary
from segmap.schemas.matrix import FlowStatus, ReachabilityMatrix

logger = logging.getLogger(__name__)

INTERNET_ID = "internet"
CLUSTER_FW_ID = "cluster-fw"
PARTIAL_DASHARRAY = "5 3"


def zone_node_id(name: str) -> str:
    return f"zone-{name}"


def is_infra_network(name: str, keywords: Sequence[str]) -> bool:
    lowered = name.lower()
    return any(k.lower() in lowered for k in keywords)


class TopologyBuilder:
    """Builds the ingress → firewall → zone graph plus inter-zone flow edges."""

    def __init__(
        self,
        infra_keywords: Sequence[str] | None = None,
        zone_palette: Sequence[str] | None = None,
        status_colors: dict[str, str] | None = None,
        ingress_color: str | None = None,
    ):
        self.infra_keywords = list(infra_keywords if infra_keywords is not None else settings.infra_keywords)
        self.zone_palette = list(zone_palette or settings.zone_palette)
        self.status_colors = dict(status_colors or settings.status_colors)
        self.ingress_color = ingress_color or settings.ingress_color

    def zone_color(self, index: int) -> str:
        return self.zone_palette[index % len(self.zone_palette)]

    def status_color(self, status: FlowStatus) -> str:
        return self.status_colors.get(status.value, "#9e9e9e")

    def build(
        self,
        zones: Sequence[NetworkZone],
        workloads: Sequence[WorkloadSummary],
        cluster_options: ClusterFirewallOptions | None,
        cluster_rule_count: int,
        matrix: ReachabilityMatrix,
        filters: TopologyFilters | None = None,
    ) -> TopologyGraph:
        """Build the graph.

        Args:
            zones: Zones in display order.
            workloads: VM/CT summaries to place inside zones.
            cluster_options: Cluster firewall options; None means disabled.
            cluster_rule_count: Number of cluster-level rules.
            matrix: Reachability matrix for the same zones.
            filters: Infra-zone and stopped-VM filters.
        """
        filters = filters or TopologyFilters()
        options = cluster_options or ClusterFirewallOptions()

        # 1. Filter networks
        retained = [
            z for z in zones
            if not (filters.hide_infra_networks and is_infra_network(z.name, self.infra_keywords))
        ]

        nodes: list[TopologyNode] = []
        edges: list[TopologyEdge] = []

        # 2. Internet and cluster firewall
        nodes.append(TopologyNode(id=INTERNET_ID, type="internet", data=InternetNodeData()))
        nodes.append(TopologyNode(
            id=CLUSTER_FW_ID,
            type="clusterFirewall",
            data=ClusterFirewallNodeData(
                enabled=options.enable,
                policy_in=options.policy_in,
                policy_out=options.policy_out,
                rule_count=cluster_rule_count,
            ),
        ))
        edges.append(TopologyEdge(
            id="e-internet-fw",
            source=INTERNET_ID,
            target=CLUSTER_FW_ID,
            kind="ingress",
            animated=options.enable,
            style=EdgeStyle(stroke=self.ingress_color, stroke_width=2),
        ))

        # 3. Zones
        for index, zone in enumerate(retained):
            color = self.zone_color(index)
            node_id = zone_node_id(zone.name)
            nodes.append(TopologyNode(
                id=node_id,
                type="securityZone",
                data=SecurityZoneNodeData(
                    label=zone.name,
                    cidr=zone.cidr,
                    gateway=zone.gateway,
                    has_gateway=zone.has_gateway,
                    has_base_sg=zone.has_base_sg,
                    zone_index=index,
                    color=color,
                    vms=self._zone_workloads(zone, workloads, filters),
                ),
            ))
            edges.append(TopologyEdge(
                id=f"e-fw-{zone.name}",
                source=CLUSTER_FW_ID,
                target=node_id,
                kind="zone",
                style=EdgeStyle(stroke=color),
            ))

        # 4. Inter-zone flows, upper triangle of the matrix only
        edges.extend(self._flow_edges(matrix, {z.name for z in retained}))

        logger.debug("Built topology graph: %d nodes, %d edges", len(nodes), len(edges))
        return TopologyGraph(
            nodes=nodes,
            edges=edges,
            node_count=len(nodes),
            edge_count=len(edges),
        )

    def _zone_workloads(
        self,
        zone: NetworkZone,
        workloads: Sequence[WorkloadSummary],
        filters: TopologyFilters,
    ) -> list[ZoneWorkload]:
        members = [w for w in workloads if w.belongs_to(zone.name)]
        if filters.hide_stopped_vms:
            members = [w for w in members if w.status == "running"]
        return [
            ZoneWorkload(
                vmid=w.vmid,
                name=w.name,
                status=w.status,
                is_isolated=w.is_isolated,
                firewall_enabled=w.firewall_enabled,
                applied_sgs=list(w.applied_sgs),
                node=w.node,
            )
            for w in members
        ]

    def _flow_edges(self, matrix: ReachabilityMatrix, retained: set[str]) -> list[TopologyEdge]:
        edges = []
        labels = matrix.labels
        for i, from_zone in enumerate(labels):
            for to_zone in labels[i + 1:]:
                if from_zone not in retained or to_zone not in retained:
                    continue
                cell = matrix.cells.get(from_zone, {}).get(to_zone)
                if cell is None or cell.status not in (FlowStatus.ALLOWED, FlowStatus.PARTIAL):
                    continue

                color = self.status_color(cell.status)
                edges.append(TopologyEdge(
                    id=f"e-zone-{from_zone}-{to_zone}",
                    source=zone_node_id(from_zone),
                    target=zone_node_id(to_zone),
                    kind="flow",
                    animated=cell.status == FlowStatus.ALLOWED,
                    style=EdgeStyle(
                        stroke=color,
                        stroke_dasharray=PARTIAL_DASHARRAY if cell.status == FlowStatus.PARTIAL else None,
                    ),
                    label=cell.summary if cell.summary != "None" else None,
                    from_zone=from_zone,
                    to_zone=to_zone,
                    status=cell.status,
                    rule_count=len(cell.rules),
                ))
        return edges


def zone_details(data: SecurityZoneNodeData) -> ZoneDetails:
    """Sidebar summary for one zone node."""
    applied: list[str] = []
    for vm in data.vms:
        for sg in vm.applied_sgs:
            if sg not in applied:
                applied.append(sg)
    return ZoneDetails(
        zone=data.label,
        vm_count=len(data.vms),
        isolated_count=sum(1 for vm in data.vms if vm.is_isolated),
        unprotected_count=sum(1 for vm in data.vms if not vm.firewall_enabled),
        applied_sgs=applied,
    )
