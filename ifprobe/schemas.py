"""
Pydantic models passed between the probe stages.

Nothing here is persisted as a whole; only StateRecord is written to disk
(see ifprobe.state), and everything else lives for a single run.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class Severity(int, Enum):
    """Overall probe result; the value is the process exit code."""

    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3


class Bucket(str, Enum):
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"
    UNKNOWN = "unknown"


class InterfaceIdentity(BaseModel):
    """
    How an interface is known to humans and to the state store.

    - descr: the ifDescr value, also the basis of the state file name
    - alias: the ifAlias value, if the device reports a non-empty one
    """

    index: int = Field(ge=0)
    descr: str
    alias: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.alias:
            return f"{self.descr} ({self.alias})"
        return self.descr


class InterfaceSample(BaseModel):
    """
    One fresh reading of an interface.

    - status_code: raw ifOperStatus value (1=up, 2=down, ...)
    - status: readable name for status_code
    - error_total: sum of the EtherLike error counters the agent reported
    """

    index: int = Field(ge=0)
    status_code: int
    status: str
    error_total: int = Field(ge=0)

    @property
    def is_up(self) -> bool:
        return self.status_code == 1


class StateRecord(BaseModel):
    timestamp: int
    error_total: int = Field(ge=0)


class RateOutcome(BaseModel):
    """Result of comparing a sample against the previous run's counters."""

    bucket: Bucket
    rate: Optional[int] = None
    message: str


class InterfaceResult(BaseModel):
    name: str
    bucket: Bucket
    message: str


class Report(BaseModel):
    severity: Severity
    summary: str
    details: List[str] = Field(default_factory=list)

    def render(self) -> str:
        lines = [f"{self.severity.name}: {self.summary}"]
        lines.extend(self.details)
        return "\n".join(lines)
