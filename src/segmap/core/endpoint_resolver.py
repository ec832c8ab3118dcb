"""Rule endpoint parsing and zone resolution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Union

from segmap.schemas.inventory import Alias, NetworkZone


@dataclass(frozen=True)
class Wildcard:
    """No source/dest on the rule: matches every zone on that side."""


@dataclass(frozen=True)
class ZoneRef:
    name: str


@dataclass(frozen=True)
class AliasRef:
    name: str
    cidr: str


@dataclass(frozen=True)
class CidrRef:
    value: str


Endpoint = Union[Wildcard, ZoneRef, AliasRef, CidrRef]

WILDCARD = Wildcard()


class EndpointResolver:
    """Maps rule source/dest tokens onto zone names.

    Precedence: exact zone name, then alias name (case-insensitive) via the
    alias CIDR, then the token as a CIDR literal. CIDRs compare as plain
    strings; no subnet containment is computed.
    """

    def __init__(self, zones: Iterable[NetworkZone], aliases: Iterable[Alias] = ()):
        self._zone_names: set[str] = set()
        self._cidr_to_zone: dict[str, str] = {}
        for zone in zones:
            self._zone_names.add(zone.name)
            # Later zones win on duplicate CIDRs
            self._cidr_to_zone[zone.cidr] = zone.name
        self._alias_to_cidr = {a.name.lower(): a.cidr for a in aliases}

    def parse(self, token: str | None) -> Endpoint:
        if not token:
            return WILDCARD
        if token in self._zone_names:
            return ZoneRef(token)
        cidr = self._alias_to_cidr.get(token.lower())
        if cidr is not None:
            return AliasRef(token, cidr)
        return CidrRef(token)

    def resolve(self, endpoint: Endpoint) -> str | None:
        """Return the zone name for an endpoint, or None if it names no zone."""
        if isinstance(endpoint, ZoneRef):
            return endpoint.name
        if isinstance(endpoint, AliasRef):
            zone = self._cidr_to_zone.get(endpoint.cidr)
            if zone is not None:
                return zone
            return self._cidr_to_zone.get(endpoint.name)
        if isinstance(endpoint, CidrRef):
            return self._cidr_to_zone.get(endpoint.value)
        return None

    def resolve_token(self, token: str | None) -> str | None:
        return self.resolve(self.parse(token))
