"""One refresh cycle of the security map: fetch, derive the matrix, build the graph."""

from __future__ import annotations

import logging

from segmap.core.orchestrator_client import OrchestratorClient
from segmap.core.reachability import MatrixBuilder
from segmap.core.topology_builder import TopologyBuilder
from segmap.schemas.graph import TopologyFilters
from segmap.schemas.inventory import InventorySnapshot
from segmap.schemas.matrix import MatrixResponse
from segmap.schemas.security_map import SecurityMapResponse

logger = logging.getLogger(__name__)


class SecurityMapService:
    """Derives the flow matrix and topology graph from an inventory snapshot."""

    def __init__(
        self,
        client: OrchestratorClient | None = None,
        topology: TopologyBuilder | None = None,
    ):
        self.client = client
        self.topology = topology or TopologyBuilder()

    def derive(
        self,
        snapshot: InventorySnapshot,
        filters: TopologyFilters | None = None,
    ) -> SecurityMapResponse:
        matrix = MatrixBuilder(snapshot.networks, snapshot.aliases).build(
            snapshot.cluster_rules, snapshot.security_groups
        )
        graph = self.topology.build(
            zones=snapshot.networks,
            workloads=snapshot.vms,
            cluster_options=snapshot.cluster_options,
            cluster_rule_count=len(snapshot.cluster_rules),
            matrix=matrix,
            filters=filters,
        )
        return SecurityMapResponse(flow_matrix=MatrixResponse.from_matrix(matrix), graph=graph)

    async def refresh(
        self,
        connection_id: str,
        filters: TopologyFilters | None = None,
    ) -> SecurityMapResponse:
        """Fetch a fresh snapshot and derive from it.

        Raises OrchestratorError if either fetch fails; no partial result is
        produced.
        """
        logger.debug("Refreshing security map for %s", connection_id)
        if self.client is None:
            async with OrchestratorClient() as client:
                snapshot = await client.fetch_snapshot(connection_id)
        else:
            snapshot = await self.client.fetch_snapshot(connection_id)
        return self.derive(snapshot, filters)
