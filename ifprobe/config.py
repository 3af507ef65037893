"""
Configuration for the SNMP interface probe.

We use pydantic-settings (Pydantic v2) to load settings from:
- environment variables (prefixed with IFPROBE_)
- a local `.env` file in the working directory
- explicit overrides passed by the command line
"""

import logging
import re
from typing import Any, Dict, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ifprobe.rate import Thresholds

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Probe settings.

    Environment variables (with defaults):

    - IFPROBE_SNMP_HOST:      IP/address of the SNMP device (required)
    - IFPROBE_SNMP_COMMUNITY: community string (default: "public")
    - IFPROBE_SNMP_VERSION:   "1" or "2c" (default: "2c")
    - IFPROBE_SNMP_PORT:      UDP port for SNMP (default: 161)
    - IFPROBE_SNMP_TIMEOUT:   seconds to wait for each response (default: 5)
    - IFPROBE_SNMP_RETRIES:   transport-level retries (default: 1)
    - IFPROBE_STATE_DIR:      where error counters are kept between runs
    - IFPROBE_DESCR_PATTERN:  regex matched against ifDescr
    - IFPROBE_ALIAS_PATTERN:  regex matched against ifAlias
    - IFPROBE_WARNING:        errors/min above which an interface is WARNING
    - IFPROBE_CRITICAL:       errors/min above which an interface is CRITICAL
    """

    snmp_host: str = Field(min_length=1)
    snmp_community: str = "public"
    snmp_version: str = "2c"
    snmp_port: int = Field(default=161, ge=1, le=65535)
    snmp_timeout: float = Field(default=5.0, gt=0)
    snmp_retries: int = Field(default=1, ge=0)

    state_dir: str = "/var/tmp/ifprobe"

    descr_pattern: Optional[str] = None
    alias_pattern: Optional[str] = None

    warning: int = Field(default=5, ge=0)
    critical: int = Field(default=10, ge=0)

    verbose: bool = False

    model_config = SettingsConfigDict(
        env_prefix="IFPROBE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("snmp_version", mode="before")
    @classmethod
    def normalize_version(cls, v):
        """
        Accept the spellings operators actually type:

        - "1", 1          -> "1"
        - "2", "2c", 2    -> "2c"
        """
        value = str(v).strip().lower()
        if value in ("2", "2c", "v2c"):
            return "2c"
        if value in ("1", "v1"):
            return "1"
        raise ValueError(f"unsupported SNMP version {v!r} (use 1 or 2c)")

    @field_validator("descr_pattern", "alias_pattern")
    @classmethod
    def check_pattern(cls, v):
        if v is None or v == "":
            return None
        try:
            re.compile(v)
        except re.error as exc:
            raise ValueError(f"invalid regular expression {v!r}: {exc}")
        return v

    @model_validator(mode="after")
    def require_pattern(self):
        if self.descr_pattern is None and self.alias_pattern is None:
            raise ValueError("at least one of descr pattern or alias pattern is required")
        if self.critical < self.warning:
            logger.warning(
                "critical threshold %d is below warning threshold %d",
                self.critical,
                self.warning,
            )
        return self

    @property
    def thresholds(self) -> Thresholds:
        return Thresholds(warning=self.warning, critical=self.critical)


def load_settings(overrides: Optional[Dict[str, Any]] = None) -> Settings:
    """
    Build Settings from the environment, with explicit overrides on top.

    Overrides whose value is None are dropped so that an unset command line
    flag does not mask an environment variable.
    """
    values = {k: v for k, v in (overrides or {}).items() if v is not None}
    return Settings(**values)
