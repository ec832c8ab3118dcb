"""Tests for rule endpoint parsing and zone resolution."""

from segmap.core.endpoint_resolver import (
    AliasRef,
    CidrRef,
    EndpointResolver,
    Wildcard,
    ZoneRef,
)
from segmap.schemas.inventory import Alias, NetworkZone

ZONES = [
    NetworkZone(name="net-dmz", cidr="10.10.10.0/24"),
    NetworkZone(name="net-app", cidr="10.20.20.0/24"),
]


class TestParse:
    def test_absent_token_is_wildcard(self):
        resolver = EndpointResolver(ZONES)
        assert resolver.parse(None) == Wildcard()
        assert resolver.parse("") == Wildcard()

    def test_zone_name(self):
        resolver = EndpointResolver(ZONES)
        assert resolver.parse("net-dmz") == ZoneRef("net-dmz")

    def test_alias_is_case_insensitive(self):
        resolver = EndpointResolver(ZONES, [Alias(name="WebServers", cidr="10.10.10.0/24")])
        assert resolver.parse("webservers") == AliasRef("webservers", "10.10.10.0/24")

    def test_anything_else_is_cidr(self):
        resolver = EndpointResolver(ZONES)
        assert resolver.parse("192.168.1.0/24") == CidrRef("192.168.1.0/24")


class TestResolve:
    def test_wildcard_resolves_to_nothing(self):
        resolver = EndpointResolver(ZONES)
        assert resolver.resolve_token(None) is None

    def test_direct_zone_name(self):
        resolver = EndpointResolver(ZONES)
        assert resolver.resolve_token("net-app") == "net-app"

    def test_zone_name_is_case_sensitive(self):
        resolver = EndpointResolver(ZONES)
        assert resolver.resolve_token("NET-APP") is None

    def test_alias_via_cidr(self):
        resolver = EndpointResolver(ZONES, [Alias(name="frontends", cidr="10.10.10.0/24")])
        assert resolver.resolve_token("FRONTENDS") == "net-dmz"

    def test_alias_without_matching_zone(self):
        resolver = EndpointResolver(ZONES, [Alias(name="office", cidr="172.16.0.0/16")])
        assert resolver.resolve_token("office") is None

    def test_cidr_literal(self):
        resolver = EndpointResolver(ZONES)
        assert resolver.resolve_token("10.20.20.0/24") == "net-app"

    def test_no_subnet_containment(self):
        resolver = EndpointResolver(ZONES)
        assert resolver.resolve_token("10.20.20.5/32") is None
        assert resolver.resolve_token("10.20.0.0/16") is None

    def test_zone_name_wins_over_alias(self):
        # "net-app" is also an alias pointing at the dmz CIDR
        aliases = [Alias(name="net-app", cidr="10.10.10.0/24")]
        resolver = EndpointResolver(ZONES, aliases)
        assert resolver.parse("net-app") == ZoneRef("net-app")
        assert resolver.resolve_token("net-app") == "net-app"

    def test_unknown_token(self):
        resolver = EndpointResolver(ZONES)
        assert resolver.resolve_token("+some-ipset") is None
