"""Tests for severity aggregation and output rendering."""

from __future__ import annotations

from ifprobe.report import ProbeResults, aggregate, overall_severity
from ifprobe.schemas import Bucket, Severity


def results_with(*buckets: Bucket) -> ProbeResults:
    results = ProbeResults()
    for n, bucket in enumerate(buckets):
        results.add(f"eth{n}", bucket, f"eth{n} {bucket.value}")
    return results


def test_zero_interfaces():
    report = aggregate(ProbeResults())
    assert report.severity == Severity.UNKNOWN
    assert report.render() == "UNKNOWN: 0 interfaces checked"


def test_all_ok():
    results = results_with(Bucket.OK, Bucket.OK)
    results.mark_up()
    results.mark_up()
    report = aggregate(results)
    assert report.severity == Severity.OK
    assert report.summary == "2 of 2 interfaces up, no errors"


def test_unknown_beats_critical():
    assert overall_severity(results_with(Bucket.CRITICAL, Bucket.UNKNOWN)) == Severity.UNKNOWN


def test_warning_beats_critical():
    assert overall_severity(results_with(Bucket.CRITICAL, Bucket.WARNING, Bucket.OK)) == Severity.WARNING


def test_critical_alone():
    assert overall_severity(results_with(Bucket.OK, Bucket.CRITICAL)) == Severity.CRITICAL


def test_unknowns_not_counted_as_errors():
    results = results_with(Bucket.UNKNOWN, Bucket.WARNING, Bucket.CRITICAL)
    results.mark_up()
    report = aggregate(results)
    assert report.summary == "1 of 3 interfaces up, 2 interfaces with errors"


def test_detail_order():
    results = results_with(Bucket.OK, Bucket.UNKNOWN, Bucket.CRITICAL, Bucket.WARNING, Bucket.CRITICAL, Bucket.OK)
    report = aggregate(results)
    assert report.details == [
        "eth2 critical",
        "eth4 critical",
        "eth3 warning",
        "eth1 unknown",
        "eth0 ok",
        "eth5 ok",
    ]


def test_render():
    results = results_with(Bucket.CRITICAL, Bucket.OK)
    results.mark_up()
    assert aggregate(results).render() == (
        "CRITICAL: 1 of 2 interfaces up, 1 interfaces with errors\n"
        "eth0 critical\n"
        "eth1 ok"
    )
