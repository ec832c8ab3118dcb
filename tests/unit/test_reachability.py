"""Tests for the reachability matrix and protocol summaries."""

import pytest

from segmap.core.reachability import (
    MatrixBuilder,
    build_flow_matrix,
    classify,
    flatten_rules,
    summarize_protocols,
)
from segmap.schemas.inventory import Alias, FirewallRule, NetworkZone, SecurityGroup
from segmap.schemas.matrix import FlowStatus, MatrixResponse


def _rule(action="ACCEPT", **kwargs) -> FirewallRule:
    return FirewallRule(action=action, **kwargs)


class TestSummarizeProtocols:
    def test_empty(self):
        assert summarize_protocols([]) == "None"

    def test_only_deny_rules(self):
        assert summarize_protocols([_rule("DROP", proto="tcp", dport="22")]) == "None"

    def test_unrestricted_accept(self):
        rules = [_rule(proto="tcp", dport="22"), _rule()]
        assert summarize_protocols(rules) == "All"

    def test_macro_before_ports(self):
        rules = [_rule(proto="tcp", dport="443"), _rule(macro="SSH")]
        assert summarize_protocols(rules) == "SSH / TCP 443"

    def test_ports_deduplicated(self):
        rules = [
            _rule(proto="tcp", dport="443"),
            _rule(proto="TCP", dport="443"),
            _rule(proto="udp", dport="53"),
        ]
        assert summarize_protocols(rules) == "TCP 443 / UDP 53"

    def test_bare_protocol(self):
        rules = [_rule(proto="icmp"), _rule(macro="DNS")]
        assert summarize_protocols(rules) == "ICMP / DNS"

    def test_deny_rules_ignored(self):
        rules = [_rule(macro="HTTP"), _rule("REJECT", macro="SSH")]
        assert summarize_protocols(rules) == "HTTP"


class TestClassify:
    def test_empty_is_blocked(self):
        assert classify([]) == FlowStatus.BLOCKED

    def test_accept_only(self):
        assert classify([_rule()]) == FlowStatus.ALLOWED

    def test_deny_only(self):
        assert classify([_rule("DROP"), _rule("REJECT")]) == FlowStatus.BLOCKED

    @pytest.mark.parametrize("deny", ["DROP", "REJECT"])
    def test_conflict_is_partial_regardless_of_order(self, deny):
        assert classify([_rule(), _rule(deny)]) == FlowStatus.PARTIAL
        assert classify([_rule(deny), _rule()]) == FlowStatus.PARTIAL

    def test_group_reference_only_is_blocked(self):
        assert classify([_rule("sg-web", type="group")]) == FlowStatus.BLOCKED


class TestFlattenRules:
    def test_disabled_rules_dropped(self):
        groups = [SecurityGroup(group="sg-a", rules=[_rule(enable=0, macro="SSH"), _rule(macro="DNS")])]
        rules = flatten_rules([_rule(enable=False), _rule(macro="HTTP")], groups)
        assert [r.macro for r in rules] == ["HTTP", "DNS"]


class TestMatrixBuilder:
    def test_diagonal_is_self(self, two_zones):
        matrix = build_flow_matrix(two_zones, [_rule()])
        for name in ("A", "B"):
            cell = matrix.cell(name, name)
            assert cell.status == FlowStatus.SELF
            assert cell.rules == []
            assert cell.summary == ""

    def test_asymmetric(self, two_zones):
        matrix = build_flow_matrix(two_zones, [_rule(source="A", dest="B", proto="tcp", dport="22")])
        assert matrix.cell("A", "B").status == FlowStatus.ALLOWED
        assert matrix.cell("A", "B").summary == "TCP 22"
        assert matrix.cell("B", "A").status == FlowStatus.BLOCKED
        assert matrix.cell("B", "A").summary == "None"

    def test_no_rules_all_blocked(self, two_zones):
        matrix = build_flow_matrix(two_zones, [])
        assert matrix.cell("A", "B").status == FlowStatus.BLOCKED
        assert matrix.cell("B", "A").status == FlowStatus.BLOCKED

    def test_conflict_partial_either_order(self, two_zones):
        accept = _rule(source="A", dest="B", macro="SSH")
        drop = _rule("DROP", source="A", dest="B")
        first = build_flow_matrix(two_zones, [accept, drop])
        second = build_flow_matrix(two_zones, [drop, accept])
        assert first.cell("A", "B").status == FlowStatus.PARTIAL
        assert second.cell("A", "B").status == FlowStatus.PARTIAL

    def test_wildcard_source(self):
        zones = [
            NetworkZone(name="A", cidr="10.0.1.0/24"),
            NetworkZone(name="B", cidr="10.0.2.0/24"),
            NetworkZone(name="C", cidr="10.0.3.0/24"),
        ]
        matrix = build_flow_matrix(zones, [_rule(dest="B")])
        assert matrix.cell("A", "B").status == FlowStatus.ALLOWED
        assert matrix.cell("C", "B").status == FlowStatus.ALLOWED
        assert matrix.cell("B", "A").status == FlowStatus.BLOCKED
        assert matrix.cell("A", "C").status == FlowStatus.BLOCKED

    def test_unresolved_token_matches_nothing(self, two_zones):
        matrix = build_flow_matrix(two_zones, [_rule(source="192.168.0.0/16", dest="B")])
        assert matrix.cell("A", "B").status == FlowStatus.BLOCKED

    def test_alias_and_cidr_endpoints(self, two_zones):
        aliases = [Alias(name="backends", cidr="10.0.2.0/24")]
        matrix = build_flow_matrix(
            two_zones,
            [_rule(source="10.0.1.0/24", dest="Backends", macro="HTTPS")],
            aliases=aliases,
        )
        assert matrix.cell("A", "B").status == FlowStatus.ALLOWED
        assert matrix.cell("A", "B").summary == "HTTPS"

    def test_group_rules_included(self, two_zones):
        groups = [SecurityGroup(group="sg-b", rules=[_rule(source="B", dest="A", macro="SSH")])]
        matrix = build_flow_matrix(two_zones, [], groups)
        assert matrix.cell("B", "A").status == FlowStatus.ALLOWED

    def test_matching_rules_recorded(self, two_zones):
        accept = _rule(source="A", dest="B", macro="SSH", comment="ops")
        matrix = build_flow_matrix(two_zones, [accept, _rule("DROP", source="B")])
        assert matrix.cell("A", "B").rules == [accept]

    def test_idempotent(self, snapshot):
        builder = MatrixBuilder(snapshot.networks, snapshot.aliases)
        first = builder.build(snapshot.cluster_rules, snapshot.security_groups)
        second = builder.build(snapshot.cluster_rules, snapshot.security_groups)
        assert first == second
        assert first.model_dump() == second.model_dump()

    def test_empty_zone_list(self):
        matrix = build_flow_matrix([], [_rule()])
        assert matrix.labels == []
        assert matrix.rows() == []

    def test_fixture_inventory(self, snapshot):
        matrix = build_flow_matrix(
            snapshot.networks, snapshot.cluster_rules, snapshot.security_groups, snapshot.aliases
        )
        assert matrix.labels == ["net-dmz", "net-app", "net-db", "net-ceph-cluster"]

        dmz_app = matrix.cell("net-dmz", "net-app")
        assert dmz_app.status == FlowStatus.ALLOWED
        assert dmz_app.summary == "SSH / TCP 443"

        app_db = matrix.cell("net-app", "net-db")
        assert app_db.status == FlowStatus.PARTIAL
        assert app_db.summary == "PostgreSQL"

        assert matrix.cell("net-dmz", "net-ceph-cluster").summary == "TCP 6789"
        # Disabled rule does not count
        assert matrix.cell("net-db", "net-dmz").status == FlowStatus.BLOCKED
        assert matrix.cell("net-db", "net-app").status == FlowStatus.ALLOWED


class TestMatrixOutput:
    def test_rows_follow_labels(self, two_zones):
        matrix = build_flow_matrix(two_zones, [_rule(source="A", dest="B")])
        rows = matrix.rows()
        assert [[c.to_zone for c in row] for row in rows] == [["A", "B"], ["A", "B"]]
        assert rows[0][1].status == FlowStatus.ALLOWED
        assert rows[1][0].status == FlowStatus.BLOCKED

    def test_stats(self, snapshot):
        matrix = build_flow_matrix(
            snapshot.networks, snapshot.cluster_rules, snapshot.security_groups, snapshot.aliases
        )
        stats = matrix.stats()
        assert stats.allowed + stats.partial + stats.blocked == 12
        assert stats.partial == 1

    def test_response_shape(self, two_zones):
        response = MatrixResponse.from_matrix(build_flow_matrix(two_zones, []))
        data = response.model_dump(mode="json")
        assert data["labels"] == ["A", "B"]
        assert data["matrix"][0][0]["status"] == "self"
        assert data["matrix"][0][1]["status"] == "blocked"
        assert data["stats"] == {"allowed": 0, "blocked": 2, "partial": 0}

    def test_unknown_cell(self, two_zones):
        matrix = build_flow_matrix(two_zones, [])
        with pytest.raises(KeyError):
            matrix.cell("A", "Z")
