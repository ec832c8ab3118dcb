"""Security map API endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, status

from segmap.config import settings
from segmap.core.orchestrator_client import OrchestratorError
from segmap.core.segmentation import analyze_segmentation
from segmap.dependencies import MapService
from segmap.schemas.graph import TopologyFilters
from segmap.schemas.inventory import InventorySnapshot
from segmap.schemas.security_map import SecurityMapResponse
from segmap.schemas.segmentation import SegmentationAnalysis, SegmentationRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/derive", response_model=SecurityMapResponse)
async def derive_security_map(
    snapshot: InventorySnapshot,
    service: MapService,
    hide_infra: bool = Query(False, description="Hide storage/cluster/replication networks"),
    hide_stopped: bool = Query(False, description="Hide VMs that are not running"),
):
    filters = TopologyFilters(hide_infra_networks=hide_infra, hide_stopped_vms=hide_stopped)
    return service.derive(snapshot, filters)


@router.post("/segmentation", response_model=SegmentationAnalysis)
async def segmentation_analysis(
    body: SegmentationRequest,
    gateway_offset: int = Query(settings.gateway_offset, description="Last octet of zone gateways"),
):
    return analyze_segmentation(body.aliases, body.groups, body.vms, gateway_offset)


@router.get("/{connection_id}", response_model=SecurityMapResponse)
async def get_security_map(
    connection_id: str,
    service: MapService,
    hide_infra: bool = Query(False, description="Hide storage/cluster/replication networks"),
    hide_stopped: bool = Query(False, description="Hide VMs that are not running"),
):
    filters = TopologyFilters(hide_infra_networks=hide_infra, hide_stopped_vms=hide_stopped)
    try:
        return await service.refresh(connection_id, filters)
    except OrchestratorError as e:
        logger.error("Security map refresh failed for %s: %s", connection_id, e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
