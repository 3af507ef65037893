"""
Error counter state kept between probe runs.

One small text file per (host, interface):

    <state_dir>/<host>/<interface>.state

    line 1: unix timestamp of the reading
    line 2: cumulative error total at that time

Both path components are sanitized by dropping every character outside
[A-Za-z0-9.-]. Two interfaces whose names differ only in dropped characters
(e.g. "Gi0/1" and "Gi01") therefore share one file; that is a known
limitation of keying by name.
"""

import logging
import re
from pathlib import Path
from typing import Optional, Union

from ifprobe.schemas import StateRecord

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^A-Za-z0-9.\-]")


class StateError(Exception):
    """Raised when a state file cannot be written."""


def sanitize(value: str) -> str:
    return _UNSAFE.sub("", value)


class StateStore:
    def __init__(self, state_dir: Union[str, Path]):
        self.state_dir = Path(state_dir)

    def path_for(self, host: str, if_name: str) -> Path:
        return self.state_dir / sanitize(host) / f"{sanitize(if_name)}.state"

    def load(self, host: str, if_name: str) -> Optional[StateRecord]:
        """
        Return the last saved record, or None.

        A missing, unreadable or malformed file is treated the same as no
        history at all.
        """
        path = self.path_for(host, if_name)
        try:
            lines = path.read_text().splitlines()
            record = StateRecord(timestamp=int(lines[0]), error_total=int(lines[1]))
        except FileNotFoundError:
            logger.debug("no state for %s %s at %s", host, if_name, path)
            return None
        except (OSError, ValueError, IndexError) as exc:
            logger.debug("ignoring unreadable state file %s: %s", path, exc)
            return None
        return record

    def save(self, host: str, if_name: str, record: StateRecord) -> None:
        path = self.path_for(host, if_name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(f"{record.timestamp}\n{record.error_total}\n")
        except OSError as exc:
            raise StateError(f"cannot write state file {path}: {exc}") from exc
        logger.debug("saved state %s -> %s", record, path)
