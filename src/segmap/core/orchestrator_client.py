"""Inventory retrieval from the orchestrator firewall API."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from segmap.config import settings
from segmap.schemas.inventory import (
    Alias,
    ClusterFirewallOptions,
    FirewallRule,
    InventorySnapshot,
    NetworkZone,
    SecurityGroup,
    WorkloadSummary,
)

logger = logging.getLogger(__name__)

_API_PREFIX = "/api/v1/firewall"


class OrchestratorError(Exception):
    """An inventory fetch failed; the refresh cycle is abandoned."""


def _items(payload: Any, key: str, what: str) -> list:
    """Pull a list out of an object payload such as ``{"vms": [...]}``."""
    if payload is None:
        return []
    if not isinstance(payload, dict):
        raise OrchestratorError(f"Malformed {what}: expected an object, got {type(payload).__name__}")
    items = payload.get(key) or []
    if not isinstance(items, list):
        raise OrchestratorError(f"Malformed {what}: {key!r} is not a list")
    return items


class OrchestratorClient:
    """Fetches zones, rules and workloads for one cluster connection.

    Pass ``transport`` to substitute the HTTP layer (tests use
    ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str = settings.orchestrator_url,
        token: str | None = settings.orchestrator_token,
        timeout: float = settings.orchestrator_timeout,
        verify: bool = settings.orchestrator_verify_tls,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            verify=verify,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> OrchestratorClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _get(self, path: str) -> Any:
        try:
            response = await self._client.get(f"{_API_PREFIX}{path}")
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Orchestrator request failed: GET %s: %s", path, e)
            raise OrchestratorError(f"GET {path} failed: {e}") from e
        # Some endpoints wrap their payload in {"data": ...}
        if isinstance(payload, dict) and set(payload) == {"data"}:
            return payload["data"]
        return payload

    async def fetch_rule_inventory(self, connection_id: str) -> InventorySnapshot:
        """Zones, cluster rules/options, security groups and aliases."""
        analysis, cluster_rules, options, groups, aliases = await asyncio.gather(
            self._get(f"/microseg/{connection_id}/analyze"),
            self._get(f"/cluster/{connection_id}/rules"),
            self._get(f"/cluster/{connection_id}/options"),
            self._get(f"/groups/{connection_id}"),
            self._get(f"/aliases/{connection_id}"),
        )
        networks = _items(analysis, "networks", f"segmentation analysis for {connection_id}")
        try:
            parsed_groups = [SecurityGroup.model_validate(g) for g in groups or []]
            # The group listing omits rules; fetch them per group
            for group in parsed_groups:
                if not group.rules:
                    rules = await self._get(f"/groups/{connection_id}/{group.group}/rules")
                    group.rules = [FirewallRule.model_validate(r) for r in rules or []]
            return InventorySnapshot(
                networks=[NetworkZone.model_validate(n) for n in networks],
                cluster_rules=[FirewallRule.model_validate(r) for r in cluster_rules or []],
                security_groups=parsed_groups,
                aliases=[Alias.model_validate(a) for a in aliases or []],
                cluster_options=ClusterFirewallOptions.model_validate(options or {}),
            )
        except ValidationError as e:
            raise OrchestratorError(f"Malformed firewall inventory for {connection_id}: {e}") from e

    async def fetch_workloads(self, connection_id: str) -> list[WorkloadSummary]:
        payload = await self._get(f"/microseg/{connection_id}/vms")
        vms = _items(payload, "vms", f"workload inventory for {connection_id}")
        try:
            return [WorkloadSummary.model_validate(vm) for vm in vms]
        except ValidationError as e:
            raise OrchestratorError(f"Malformed workload inventory for {connection_id}: {e}") from e

    async def fetch_snapshot(self, connection_id: str) -> InventorySnapshot:
        """Run both fetches concurrently; either failing aborts the snapshot."""
        inventory, workloads = await asyncio.gather(
            self.fetch_rule_inventory(connection_id),
            self.fetch_workloads(connection_id),
        )
        logger.info(
            "Fetched inventory for %s: %d networks, %d cluster rules, %d groups, %d VMs",
            connection_id, len(inventory.networks), len(inventory.cluster_rules),
            len(inventory.security_groups), len(workloads),
        )
        return inventory.model_copy(update={"vms": workloads})
