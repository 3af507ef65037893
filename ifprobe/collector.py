"""
One pass over the device.

This module:
- walks ifDescr/ifAlias and selects interfaces by pattern
- samples status and EtherLike error counters for each selected interface
- hands up interfaces to the rate engine
- records every outcome in a ProbeResults accumulator

A failure on one interface is recorded against that interface and the loop
moves on; only failing to read the interface tables ends the pass early.
"""

import logging
import re
import time
from typing import Callable, Dict, List, Tuple

from ifprobe.matcher import index_column, match_interfaces
from ifprobe.rate import compute_rate
from ifprobe.report import ProbeResults
from ifprobe.schemas import Bucket, InterfaceIdentity, InterfaceSample
from ifprobe.snmp_client import SnmpClient, SnmpError
from ifprobe.state import StateError, StateStore

logger = logging.getLogger(__name__)

# IF-MIB (1.3.6.1.2.1.2.2.1.X / 1.3.6.1.2.1.31.1.1.1.X)
IF_DESCR = "1.3.6.1.2.1.2.2.1.2"
IF_OPER_STATUS = "1.3.6.1.2.1.2.2.1.8"
IF_ALIAS = "1.3.6.1.2.1.31.1.1.1.18"

# EtherLike-MIB dot3StatsTable (1.3.6.1.2.1.10.7.2.1.X), summed into one total
ERROR_COUNTERS: Tuple[Tuple[str, str], ...] = (
    ("dot3StatsAlignmentErrors", "1.3.6.1.2.1.10.7.2.1.2"),
    ("dot3StatsFCSErrors", "1.3.6.1.2.1.10.7.2.1.3"),
    ("dot3StatsSingleCollisionFrames", "1.3.6.1.2.1.10.7.2.1.4"),
    ("dot3StatsMultipleCollisionFrames", "1.3.6.1.2.1.10.7.2.1.5"),
    ("dot3StatsSQETestErrors", "1.3.6.1.2.1.10.7.2.1.6"),
    ("dot3StatsDeferredTransmissions", "1.3.6.1.2.1.10.7.2.1.7"),
    ("dot3StatsLateCollisions", "1.3.6.1.2.1.10.7.2.1.8"),
    ("dot3StatsExcessiveCollisions", "1.3.6.1.2.1.10.7.2.1.9"),
    ("dot3StatsInternalMacTransmitErrors", "1.3.6.1.2.1.10.7.2.1.10"),
    ("dot3StatsCarrierSenseErrors", "1.3.6.1.2.1.10.7.2.1.11"),
    ("dot3StatsFrameTooLongs", "1.3.6.1.2.1.10.7.2.1.13"),
    ("dot3StatsInternalMacReceiveErrors", "1.3.6.1.2.1.10.7.2.1.16"),
)

STATUS_NAMES: Dict[int, str] = {
    1: "up",
    2: "down",
    3: "testing",
    4: "unknown",
    5: "dormant",
    6: "notPresent",
    7: "lowerLayerDown",
}

_NUMERIC = re.compile(r"^\s*\d+\s*$")


class SampleError(Exception):
    """An interface could not be sampled; `reason` goes into its detail line."""

    reason = "is UNKNOWN"


class StatusMissing(SampleError):
    reason = "interface status is UNKNOWN"


class ErrorsMissing(SampleError):
    reason = "interface errors are UNKNOWN"


def status_name(code: int) -> str:
    return STATUS_NAMES.get(code, f"undefined({code})")


def sample_interface(client: SnmpClient, index: int) -> InterfaceSample:
    """
    Read ifOperStatus and the error counters for one interface in a single GET.

    Counters that are missing or not numeric are skipped; the interface is
    only unusable if none of them came back. SnmpError propagates.
    """
    status_oid = f"{IF_OPER_STATUS}.{index}"
    counter_oids = [f"{oid}.{index}" for _, oid in ERROR_COUNTERS]

    values = client.get(status_oid, *counter_oids)
    logger.debug("ifIndex %d raw values: %s", index, values)

    raw_status = values.get(status_oid)
    if raw_status is None or not _NUMERIC.match(raw_status):
        raise StatusMissing(f"no ifOperStatus for ifIndex {index}")
    code = int(raw_status)

    total = 0
    seen = 0
    for oid in counter_oids:
        value = values.get(oid)
        if value is None or not _NUMERIC.match(value):
            continue
        total += int(value)
        seen += 1
    if not seen:
        raise ErrorsMissing(f"no error counters for ifIndex {index}")

    return InterfaceSample(index=index, status_code=code, status=status_name(code), error_total=total)


def discover_interfaces(client: SnmpClient, descr_pattern, alias_pattern) -> List[InterfaceIdentity]:
    """Walk ifDescr/ifAlias and return the matching interfaces in ifIndex order."""
    table = client.get_table(IF_DESCR, IF_ALIAS)
    names = index_column(table, IF_DESCR)
    aliases = index_column(table, IF_ALIAS)

    indexes = match_interfaces(names, aliases, descr_pattern, alias_pattern)
    logger.debug("matched ifIndex %s", indexes)

    return [
        InterfaceIdentity(index=i, descr=names.get(i, str(i)), alias=aliases.get(i) or None)
        for i in indexes
    ]


def poll_once(
    client: SnmpClient,
    store: StateStore,
    settings,
    clock: Callable[[], float] = time.time,
) -> ProbeResults:
    """
    Sample every matching interface once and return the accumulated outcomes.

    SnmpError from the interface table walk is not caught here.
    """
    results = ProbeResults()
    interfaces = discover_interfaces(client, settings.descr_pattern, settings.alias_pattern)

    for iface in interfaces:
        name = iface.display_name
        try:
            sample = sample_interface(client, iface.index)
        except SnmpError as exc:
            logger.debug("SNMP error for ifIndex %d: %s", iface.index, exc)
            results.add(name, Bucket.UNKNOWN, f"{name} is UNKNOWN")
            continue
        except SampleError as exc:
            logger.debug("%s", exc)
            results.add(name, Bucket.UNKNOWN, f"{name} {exc.reason}")
            continue

        if not sample.is_up:
            results.add(name, Bucket.CRITICAL, f"{name} interface status is {sample.status}")
            continue

        results.mark_up()
        try:
            outcome = compute_rate(
                store,
                settings.snmp_host,
                iface.descr,
                int(clock()),
                sample.error_total,
                settings.thresholds,
                display_name=name,
            )
        except StateError as exc:
            logger.warning("%s", exc)
            results.add(name, Bucket.UNKNOWN, f"{name} state is UNKNOWN")
            continue
        results.add(name, outcome.bucket, outcome.message)

    return results
