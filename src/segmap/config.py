"""Application configuration via pydantic-settings."""

from __future__ import annotations

import json
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "", "case_sensitive": False}

    # Orchestrator (inventory source)
    orchestrator_url: str = "http://localhost:8080"
    orchestrator_token: str | None = None
    orchestrator_timeout: float = 15.0
    orchestrator_verify_tls: bool = True

    # API
    api_token: str | None = None

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Zones whose name contains one of these are hidden by the infra filter
    infra_keywords: list[str] = [
        "ceph",
        "corosync",
        "migration",
        "backup",
        "cluster",
        "storage",
        "replication",
    ]

    # Colors
    zone_palette: list[str] = [
        "#7c4dff",
        "#26a69a",
        "#ffa726",
        "#ec407a",
        "#42a5f5",
        "#8d6e63",
        "#66bb6a",
        "#ab47bc",
    ]
    status_colors: dict[str, str] = {
        "allowed": "#4caf50",
        "blocked": "#f44336",
        "partial": "#ff9800",
        "self": "#9e9e9e",
    }
    ingress_color: str = "#42a5f5"

    @field_validator("cors_origins", "infra_keywords", "zone_palette", mode="before")
    @classmethod
    def parse_list(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, str):
            return json.loads(v)
        return v

    # Segmentation
    gateway_offset: int = 254

    # Logging
    log_level: str = "INFO"


settings = Settings()
