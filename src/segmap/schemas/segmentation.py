"""Micro-segmentation analysis schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from segmap.schemas.inventory import Alias, NetworkZone, SecurityGroup, WorkloadSummary


class MissingGateway(BaseModel):
    network_name: str
    alias_name: str
    gateway_ip: str


class MissingBaseSG(BaseModel):
    network_name: str
    sg_name: str
    gateway_name: str


class SegmentationAnalysis(BaseModel):
    networks: list[NetworkZone] = Field(default_factory=list)
    gateway_aliases: list[str] = Field(default_factory=list)
    base_sgs: list[str] = Field(default_factory=list)
    missing_gateways: list[MissingGateway] = Field(default_factory=list)
    missing_base_sgs: list[MissingBaseSG] = Field(default_factory=list)
    total_vms: int = 0
    isolated_vms: int = 0
    unprotected_vms: int = 0
    segmentation_ready: bool = False


class SegmentationRequest(BaseModel):
    aliases: list[Alias] = Field(default_factory=list)
    groups: list[SecurityGroup] = Field(default_factory=list)
    vms: list[WorkloadSummary] = Field(default_factory=list)
