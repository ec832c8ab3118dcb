"""Test fixtures and configuration."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from segmap.schemas.inventory import InventorySnapshot, NetworkZone

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def inventory_path() -> Path:
    return FIXTURES_DIR / "inventory.json"


@pytest.fixture
def inventory_data(inventory_path) -> dict:
    return json.loads(inventory_path.read_text())


@pytest.fixture
def snapshot(inventory_data) -> InventorySnapshot:
    return InventorySnapshot.model_validate(inventory_data)


@pytest.fixture
def two_zones() -> list[NetworkZone]:
    return [NetworkZone(name="A", cidr="10.0.1.0/24"), NetworkZone(name="B", cidr="10.0.2.0/24")]
