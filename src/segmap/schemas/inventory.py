"""Inventory schemas: zones, aliases, firewall rules and workloads as fetched."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


class RuleType(str, Enum):
    IN = "in"
    OUT = "out"
    GROUP = "group"
    FORWARD = "forward"


class NetworkZone(BaseModel):
    """A named network segment. `name` is the canonical zone identifier."""

    model_config = ConfigDict(extra="ignore")

    name: str
    cidr: str
    comment: str | None = None
    gateway: str | None = None
    has_gateway: bool = False
    has_base_sg: bool = False


class Alias(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    cidr: str
    comment: str | None = None


class FirewallRule(BaseModel):
    """One firewall policy line.

    For ``type == "group"`` rules the action carries the referenced security
    group name rather than a verdict.
    """

    model_config = ConfigDict(extra="ignore")

    pos: int | None = None
    type: RuleType = RuleType.IN
    action: str
    enable: bool = True
    source: str | None = None
    dest: str | None = None
    proto: str | None = None
    dport: str | None = None
    sport: str | None = None
    macro: str | None = None
    comment: str | None = None

    @field_validator("source", "dest", "proto", "macro", "comment", mode="before")
    @classmethod
    def blank_tokens(cls, v):
        return _blank_to_none(v)

    @field_validator("dport", "sport", mode="before")
    @classmethod
    def port_as_string(cls, v):
        if isinstance(v, int):
            return str(v)
        return _blank_to_none(v)

    @field_validator("enable", mode="before")
    @classmethod
    def enable_flag(cls, v):
        # The API reports 0/1; an absent flag means the rule is active
        if v is None:
            return True
        return v

    @property
    def is_accept(self) -> bool:
        return self.action == "ACCEPT"

    @property
    def is_deny(self) -> bool:
        return self.action in ("DROP", "REJECT")


class SecurityGroup(BaseModel):
    model_config = ConfigDict(extra="ignore")

    group: str
    comment: str | None = None
    rules: list[FirewallRule] = Field(default_factory=list)


class ClusterFirewallOptions(BaseModel):
    model_config = ConfigDict(extra="ignore")

    enable: bool = False
    policy_in: str = "DROP"
    policy_out: str = "ACCEPT"

    @field_validator("enable", mode="before")
    @classmethod
    def enable_flag(cls, v):
        if v is None:
            return False
        return v

    @field_validator("policy_in", mode="before")
    @classmethod
    def default_policy_in(cls, v):
        return _blank_to_none(v) or "DROP"

    @field_validator("policy_out", mode="before")
    @classmethod
    def default_policy_out(cls, v):
        return _blank_to_none(v) or "ACCEPT"


class WorkloadSummary(BaseModel):
    """A VM or container with its segmentation status."""

    model_config = ConfigDict(extra="ignore")

    vmid: int
    name: str = ""
    node: str | None = None
    type: str = "qemu"  # qemu | lxc
    status: str = "unknown"
    network: str | None = None
    networks: list[str] = Field(default_factory=list)
    firewall_enabled: bool = False
    is_isolated: bool = False
    applied_sgs: list[str] = Field(default_factory=list)
    missing_base_sgs: list[str] = Field(default_factory=list)

    @field_validator("networks", "applied_sgs", "missing_base_sgs", mode="before")
    @classmethod
    def null_list(cls, v):
        return v or []

    def belongs_to(self, zone_name: str) -> bool:
        return self.network == zone_name or zone_name in self.networks


class InventorySnapshot(BaseModel):
    """Everything needed for one derivation pass."""

    networks: list[NetworkZone] = Field(default_factory=list)
    cluster_rules: list[FirewallRule] = Field(default_factory=list)
    security_groups: list[SecurityGroup] = Field(default_factory=list)
    aliases: list[Alias] = Field(default_factory=list)
    vms: list[WorkloadSummary] = Field(default_factory=list)
    cluster_options: ClusterFirewallOptions = Field(default_factory=ClusterFirewallOptions)
