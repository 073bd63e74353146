"""
Shared data models passed from the probe through the engine to reporting.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class ScanStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class ScanResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    port: int
    status: ScanStatus
    banner: str = ""
    timestamp: dt.datetime = Field(default_factory=utcnow)

    @property
    def is_open(self) -> bool:
        return self.status is ScanStatus.OPEN


class ScanSummary(BaseModel):
    target: str
    ports_spec: str
    hosts: int = 0
    ports: int = 0
    total: int = 0
    scanned: int = 0
    open_ports: int = 0
    started_at: dt.datetime = Field(default_factory=utcnow)
    duration_s: Optional[float] = None
    interrupted: bool = False

    def record(self, result: ScanResult) -> None:
        self.scanned += 1
        if result.is_open:
            self.open_ports += 1
