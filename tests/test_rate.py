"""Tests for the errors/min rate engine."""

from __future__ import annotations

import pytest

from ifprobe.rate import Thresholds, classify, compute_rate, errors_per_minute
from ifprobe.schemas import Bucket, StateRecord
from ifprobe.state import StateStore

HOST = "router1"


def seed(store: StateStore, timestamp: int, errors: int) -> None:
    store.save(HOST, "eth0", StateRecord(timestamp=timestamp, error_total=errors))


def test_sixty_errors_in_sixty_seconds(store: StateStore):
    seed(store, 1000, 100)
    outcome = compute_rate(store, HOST, "eth0", 1060, 160, Thresholds(warning=100, critical=200))
    assert outcome.rate == 60
    assert outcome.bucket == Bucket.OK
    assert outcome.message == "eth0 is up, 60 errors/min"


def test_rate_is_floored():
    prev = StateRecord(timestamp=0, error_total=0)
    assert errors_per_minute(prev, StateRecord(timestamp=120, error_total=3)) == 1
    assert errors_per_minute(prev, StateRecord(timestamp=7, error_total=1)) == 8


def test_no_history_saves_and_reports_unknown(store: StateStore):
    outcome = compute_rate(store, HOST, "eth0", 1000, 7)
    assert outcome.bucket == Bucket.OK
    assert outcome.rate is None
    assert outcome.message == "eth0 is up, unknown errors/min"
    assert store.load(HOST, "eth0") == StateRecord(timestamp=1000, error_total=7)


@pytest.mark.parametrize("now", [1000, 900])
def test_clock_skew_reports_without_rate(store: StateStore, now: int):
    seed(store, 1000, 100)
    outcome = compute_rate(store, HOST, "eth0", now, 500)
    assert outcome.bucket == Bucket.OK
    assert outcome.rate is None
    assert outcome.message == "eth0 is up, unknown errors/min"
    # the new reading is still written
    assert store.load(HOST, "eth0") == StateRecord(timestamp=now, error_total=500)


@pytest.mark.parametrize("errors", [100, 40])
def test_no_growth_or_reset_is_zero(store: StateStore, errors: int):
    seed(store, 1000, 100)
    outcome = compute_rate(store, HOST, "eth0", 1300, errors)
    assert outcome.rate == 0
    assert outcome.bucket == Bucket.OK
    assert outcome.message == "eth0 is up, 0 errors/min"


def test_warning_and_critical(store: StateStore):
    seed(store, 0, 0)
    outcome = compute_rate(store, HOST, "eth0", 60, 6)
    assert (outcome.rate, outcome.bucket) == (6, Bucket.WARNING)

    outcome = compute_rate(store, HOST, "eth0", 120, 17)
    assert (outcome.rate, outcome.bucket) == (11, Bucket.CRITICAL)


def test_thresholds_are_exclusive():
    assert classify(5, Thresholds()) == Bucket.OK
    assert classify(10, Thresholds()) == Bucket.WARNING
    assert classify(11, Thresholds()) == Bucket.CRITICAL


def test_critical_checked_before_warning():
    # inverted thresholds are accepted as-is
    assert classify(7, Thresholds(warning=10, critical=5)) == Bucket.CRITICAL


def test_display_name_in_message(store: StateStore):
    outcome = compute_rate(store, HOST, "eth0", 1000, 0, display_name="eth0 (uplink)")
    assert outcome.message == "eth0 (uplink) is up, unknown errors/min"
    assert store.load(HOST, "eth0") is not None
