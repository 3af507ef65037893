"""
Collect per-interface outcomes and turn them into the probe's output.

The output is one summary line followed by one detail line per interface:

    CRITICAL: 2 of 3 interfaces up, 1 interfaces with errors
    eth2 interface status is down
    eth0 (uplink) is up, 0 errors/min
    eth1 is up, unknown errors/min
"""

from typing import List

from ifprobe.schemas import Bucket, InterfaceResult, Report, Severity

# Order in which buckets are listed in the detail lines
DETAIL_ORDER = (Bucket.CRITICAL, Bucket.WARNING, Bucket.UNKNOWN, Bucket.OK)


class ProbeResults:
    """Accumulates outcomes for one run, in processing order."""

    def __init__(self):
        self.results: List[InterfaceResult] = []
        self.up_count = 0

    def add(self, name: str, bucket: Bucket, message: str) -> InterfaceResult:
        result = InterfaceResult(name=name, bucket=bucket, message=message)
        self.results.append(result)
        return result

    def mark_up(self) -> None:
        self.up_count += 1

    @property
    def total(self) -> int:
        return len(self.results)

    def in_bucket(self, bucket: Bucket) -> List[InterfaceResult]:
        return [r for r in self.results if r.bucket is bucket]


def overall_severity(results: ProbeResults) -> Severity:
    """
    Each check overwrites the previous one, so the last that applies wins:
    any unknown beats everything, then any warning, then any critical.
    """
    severity = Severity.OK
    if results.in_bucket(Bucket.CRITICAL):
        severity = Severity.CRITICAL
    if results.in_bucket(Bucket.WARNING):
        severity = Severity.WARNING
    if results.in_bucket(Bucket.UNKNOWN):
        severity = Severity.UNKNOWN
    return severity


def aggregate(results: ProbeResults) -> Report:
    if results.total == 0:
        return Report(severity=Severity.UNKNOWN, summary="0 interfaces checked")

    with_errors = len(results.in_bucket(Bucket.WARNING)) + len(results.in_bucket(Bucket.CRITICAL))
    summary = f"{results.up_count} of {results.total} interfaces up, "
    if with_errors:
        summary += f"{with_errors} interfaces with errors"
    else:
        summary += "no errors"

    details = [r.message for bucket in DETAIL_ORDER for r in results.in_bucket(bucket)]
    return Report(severity=overall_severity(results), summary=summary, details=details)
