"""Probe payloads for /health, /healthz and /readyz."""

from __future__ import annotations

from pydantic import Field
from sqlmodel import SQLModel

SERVICE_NAME = "batcave-planner"


class HealthStatusResponse(SQLModel):
    ok: bool = Field(description="Whether the probe passed.", examples=[True])
    service: str = Field(default=SERVICE_NAME, examples=[SERVICE_NAME])
