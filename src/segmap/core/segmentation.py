"""Micro-segmentation readiness analysis.

Zones are declared as ``net-<suffix>`` aliases. A zone is ready for isolation
when a ``gw-<suffix>`` gateway alias and a ``sg-base-<suffix>`` security group
both exist.
"""

from __future__ import annotations

import logging
from typing import Iterable

from segmap.config import settings
from segmap.schemas.inventory import Alias, NetworkZone, SecurityGroup, WorkloadSummary
from segmap.schemas.segmentation import MissingBaseSG, MissingGateway, SegmentationAnalysis

logger = logging.getLogger(__name__)

NETWORK_PREFIX = "net-"
GATEWAY_PREFIX = "gw-"
BASE_SG_PREFIX = "sg-base-"


def _has_prefix(name: str, prefix: str) -> bool:
    return len(name) > len(prefix) and name.startswith(prefix)


def compute_gateway_ip(cidr: str, offset: int) -> str:
    """Gateway address in a /24-style network: first three octets + offset.

    >>> compute_gateway_ip("10.17.17.0/24", 254)
    '10.17.17.254'
    """
    parts = cidr.split("/", 1)[0].split(".")
    if len(parts) < 4:
        return ""
    return f"{parts[0]}.{parts[1]}.{parts[2]}.{offset}"


def analyze_segmentation(
    aliases: Iterable[Alias],
    groups: Iterable[SecurityGroup],
    workloads: Iterable[WorkloadSummary] = (),
    gateway_offset: int | None = None,
) -> SegmentationAnalysis:
    if gateway_offset is None:
        gateway_offset = settings.gateway_offset
    if gateway_offset <= 0 or gateway_offset > 254:
        gateway_offset = 254

    analysis = SegmentationAnalysis()

    gateways: dict[str, str] = {}
    networks: dict[str, Alias] = {}
    for alias in aliases:
        if _has_prefix(alias.name, GATEWAY_PREFIX):
            analysis.gateway_aliases.append(alias.name)
            gateways[alias.name] = alias.cidr
        elif _has_prefix(alias.name, NETWORK_PREFIX):
            networks[alias.name] = alias

    base_sgs = set()
    for group in groups:
        if _has_prefix(group.group, BASE_SG_PREFIX):
            analysis.base_sgs.append(group.group)
            base_sgs.add(group.group)

    for name in sorted(networks):
        alias = networks[name]
        suffix = name[len(NETWORK_PREFIX):]
        gw_name = GATEWAY_PREFIX + suffix
        sg_name = BASE_SG_PREFIX + suffix
        gateway_ip = compute_gateway_ip(alias.cidr, gateway_offset)

        zone = NetworkZone(
            name=name,
            cidr=alias.cidr,
            comment=alias.comment,
            gateway=gateway_ip,
            has_gateway=bool(gateways.get(gw_name)),
            has_base_sg=sg_name in base_sgs,
        )
        analysis.networks.append(zone)

        if not zone.has_gateway:
            analysis.missing_gateways.append(MissingGateway(
                network_name=name, alias_name=gw_name, gateway_ip=gateway_ip,
            ))
        if not zone.has_base_sg:
            analysis.missing_base_sgs.append(MissingBaseSG(
                network_name=name, sg_name=sg_name, gateway_name=gw_name,
            ))

    for vm in workloads:
        analysis.total_vms += 1
        if not vm.firewall_enabled:
            analysis.unprotected_vms += 1
        elif vm.is_isolated:
            analysis.isolated_vms += 1

    analysis.segmentation_ready = not analysis.missing_base_sgs and not analysis.missing_gateways
    logger.debug(
        "Segmentation analysis: %d networks, %d missing gateways, %d missing base SGs",
        len(analysis.networks), len(analysis.missing_gateways), len(analysis.missing_base_sgs),
    )
    return analysis
