"""Zone-to-zone reachability derived from firewall rule sets."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from segmap.core.endpoint_resolver import Endpoint, EndpointResolver, Wildcard
from segmap.schemas.inventory import Alias, FirewallRule, NetworkZone, SecurityGroup
from segmap.schemas.matrix import FlowStatus, ReachabilityCell, ReachabilityMatrix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _ParsedRule:
    rule: FirewallRule
    source: Endpoint
    dest: Endpoint
    source_zone: str | None
    dest_zone: str | None

    def matches(self, from_zone: str, to_zone: str) -> bool:
        src_ok = isinstance(self.source, Wildcard) or self.source_zone == from_zone
        dst_ok = isinstance(self.dest, Wildcard) or self.dest_zone == to_zone
        return src_ok and dst_ok


def flatten_rules(
    cluster_rules: Iterable[FirewallRule],
    security_groups: Iterable[SecurityGroup] = (),
) -> list[FirewallRule]:
    """Cluster rules followed by every group's rules, disabled ones removed."""
    rules = list(cluster_rules)
    for group in security_groups:
        rules.extend(group.rules)
    return [r for r in rules if r.enable]


def classify(rules: Sequence[FirewallRule]) -> FlowStatus:
    """Status for a pair given the rules that match it.

    Rule order is ignored: any mix of ACCEPT and DROP/REJECT is ``partial``.
    """
    if not rules:
        return FlowStatus.BLOCKED
    has_accept = any(r.is_accept for r in rules)
    has_deny = any(r.is_deny for r in rules)
    if has_accept and has_deny:
        return FlowStatus.PARTIAL
    if has_accept:
        return FlowStatus.ALLOWED
    return FlowStatus.BLOCKED


def summarize_protocols(rules: Sequence[FirewallRule]) -> str:
    """Describe what the accepted rules let through.

    Returns "None" when nothing is accepted, "All" when some accept rule has
    no protocol restriction, otherwise macros and protocols followed by the
    distinct "PROTO port" pairs, joined by " / ".
    """
    if not rules:
        return "None"

    accepted = [r for r in rules if r.is_accept]
    if not accepted:
        return "None"

    if any(not r.proto and not r.macro for r in accepted):
        return "All"

    parts: list[str] = []
    ports: dict[str, None] = {}
    for rule in accepted:
        if rule.macro:
            parts.append(rule.macro)
            continue
        proto = (rule.proto or "").upper()
        if rule.dport:
            ports[f"{proto} {rule.dport}"] = None
        else:
            parts.append(proto)

    return " / ".join(parts + list(ports)) or "All"


class MatrixBuilder:
    """Builds the reachability matrix for a set of zones."""

    def __init__(self, zones: Sequence[NetworkZone], aliases: Iterable[Alias] = ()):
        self.zones = list(zones)
        self.resolver = EndpointResolver(self.zones, aliases)

    def _parse(self, rule: FirewallRule) -> _ParsedRule:
        source = self.resolver.parse(rule.source)
        dest = self.resolver.parse(rule.dest)
        return _ParsedRule(
            rule=rule,
            source=source,
            dest=dest,
            source_zone=self.resolver.resolve(source),
            dest_zone=self.resolver.resolve(dest),
        )

    def build(
        self,
        cluster_rules: Iterable[FirewallRule],
        security_groups: Iterable[SecurityGroup] = (),
    ) -> ReachabilityMatrix:
        parsed = [self._parse(r) for r in flatten_rules(cluster_rules, security_groups)]
        labels = [z.name for z in self.zones]

        cells: dict[str, dict[str, ReachabilityCell]] = {}
        for from_zone in labels:
            row: dict[str, ReachabilityCell] = {}
            for to_zone in labels:
                row[to_zone] = self._cell(from_zone, to_zone, parsed)
            cells[from_zone] = row

        logger.debug("Built %dx%d reachability matrix from %d rules", len(labels), len(labels), len(parsed))
        return ReachabilityMatrix(labels=labels, cells=cells)

    def _cell(self, from_zone: str, to_zone: str, parsed: list[_ParsedRule]) -> ReachabilityCell:
        if from_zone == to_zone:
            return ReachabilityCell(from_zone=from_zone, to_zone=to_zone, status=FlowStatus.SELF)

        matching = [p.rule for p in parsed if p.matches(from_zone, to_zone)]
        return ReachabilityCell(
            from_zone=from_zone,
            to_zone=to_zone,
            status=classify(matching),
            rules=matching,
            summary=summarize_protocols(matching),
        )


def build_flow_matrix(
    zones: Sequence[NetworkZone],
    cluster_rules: Iterable[FirewallRule],
    security_groups: Iterable[SecurityGroup] = (),
    aliases: Iterable[Alias] = (),
) -> ReachabilityMatrix:
    return MatrixBuilder(zones, aliases).build(cluster_rules, security_groups)
