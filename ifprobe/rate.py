"""
Errors-per-minute computation against the previous run.

The current reading is saved before anything is computed, so the next run
always compares against this one even when this run cannot produce a rate
(no history yet, or the clock went backwards).
"""

import logging
import math
from typing import NamedTuple, Optional

from ifprobe.schemas import Bucket, RateOutcome, StateRecord
from ifprobe.state import StateStore

logger = logging.getLogger(__name__)


class Thresholds(NamedTuple):
    warning: int = 5
    critical: int = 10


def errors_per_minute(prev: StateRecord, current: StateRecord) -> Optional[int]:
    """
    Rate of error growth between two readings, floored to whole errors/min.

    Returns None when no time has elapsed (or the clock ran backwards), and 0
    when the counter did not grow, which also covers counter resets.
    """
    elapsed = current.timestamp - prev.timestamp
    if elapsed <= 0:
        return None
    if current.error_total > prev.error_total:
        return math.floor((current.error_total - prev.error_total) / (elapsed / 60.0))
    return 0


def classify(rate: int, thresholds: Thresholds) -> Bucket:
    if rate > thresholds.critical:
        return Bucket.CRITICAL
    if rate > thresholds.warning:
        return Bucket.WARNING
    return Bucket.OK


def compute_rate(
    store: StateStore,
    host: str,
    if_name: str,
    now: int,
    error_total: int,
    thresholds: Thresholds = Thresholds(),
    display_name: Optional[str] = None,
) -> RateOutcome:
    """
    Load the previous reading for (host, if_name), save the current one and
    classify the resulting rate.

    `if_name` is the state key (the ifDescr value); `display_name` is what
    goes into the message and defaults to `if_name`.
    """
    name = display_name or if_name
    current = StateRecord(timestamp=now, error_total=error_total)

    prev = store.load(host, if_name)
    store.save(host, if_name, current)

    if prev is None:
        logger.debug("%s: no previous reading, rate unknown", name)
        return RateOutcome(bucket=Bucket.OK, message=f"{name} is up, unknown errors/min")

    rate = errors_per_minute(prev, current)
    if rate is None:
        logger.debug(
            "%s: clock skew, previous reading at %d is not before %d; skipping rate",
            name,
            prev.timestamp,
            now,
        )
        return RateOutcome(bucket=Bucket.OK, message=f"{name} is up, unknown errors/min")

    logger.debug(
        "%s: errors %d -> %d over %ds = %d/min",
        name,
        prev.error_total,
        error_total,
        now - prev.timestamp,
        rate,
    )
    return RateOutcome(
        bucket=classify(rate, thresholds),
        rate=rate,
        message=f"{name} is up, {rate} errors/min",
    )
