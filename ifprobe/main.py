"""
Command line entry point.

Run as:

    ifprobe -H 192.0.2.1 -C public -d '^GigabitEthernet'

or

    python -m ifprobe -H 192.0.2.1 -a uplink -w 5 -c 10 -v

Prints one summary line plus one line per interface and exits with
0/1/2/3 for OK/WARNING/CRITICAL/UNKNOWN.
"""

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from ifprobe.collector import poll_once
from ifprobe.config import load_settings
from ifprobe.report import aggregate
from ifprobe.schemas import Severity
from ifprobe.snmp_client import SnmpClient, SnmpError
from ifprobe.state import StateStore

DESCRIPTION = """\
Check the operational status of the interfaces whose ifDescr or ifAlias
matches a regular expression, and the rate at which their EtherLike error
counters grow between runs.

An interface that is not up is CRITICAL. For up interfaces the sum of the
dot3Stats error counters is compared with the value saved by the previous
run; more than --warning errors/min is WARNING and more than --critical
errors/min is CRITICAL. An interface that cannot be read is UNKNOWN, and any
UNKNOWN interface makes the whole result UNKNOWN.
"""

EPILOG = """\
Every option can also be set in the environment as IFPROBE_<NAME>, e.g.
IFPROBE_SNMP_COMMUNITY or IFPROBE_STATE_DIR. Error counters are kept in
<state-dir>/<host>/<ifDescr>.state; characters other than letters, digits,
'.' and '-' are dropped from both names.
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ifprobe",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-H", "--host", dest="snmp_host", help="Device to query (required)")
    parser.add_argument("-C", "--community", dest="snmp_community", help="SNMP community (default: public)")
    parser.add_argument("-V", "--snmp-version", dest="snmp_version", help="SNMP version, 1 or 2c (default: 2c)")
    parser.add_argument("-p", "--port", dest="snmp_port", type=int, help="SNMP port (default: 161)")
    parser.add_argument("-t", "--timeout", dest="snmp_timeout", type=float, help="SNMP timeout in seconds (default: 5)")
    parser.add_argument("-s", "--state-dir", dest="state_dir", help="Directory for saved error counters")
    parser.add_argument("-d", "--descr", dest="descr_pattern", help="Regex matched against ifDescr")
    parser.add_argument("-a", "--alias", dest="alias_pattern", help="Regex matched against ifAlias")
    parser.add_argument("-w", "--warning", type=int, help="Errors/min for WARNING (default: 5)")
    parser.add_argument("-c", "--critical", type=int, help="Errors/min for CRITICAL (default: 10)")
    parser.add_argument("-v", "--verbose", action="store_true", default=None, help="Print diagnostics to stderr")
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    # pysnmp is chatty at DEBUG and its internals are not what -v is for
    logging.getLogger("pysnmp").setLevel(logging.WARNING)


def _unknown(message: str) -> int:
    print(f"{Severity.UNKNOWN.name}: {message}")
    return Severity.UNKNOWN.value


def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(bool(args.verbose))

    try:
        settings = load_settings(vars(args))
    except ValidationError as exc:
        reasons = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" if err["loc"] else err["msg"]
            for err in exc.errors()
        )
        return _unknown(reasons)
    if settings.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        client = SnmpClient.from_settings(settings).open()
        results = poll_once(client, StateStore(settings.state_dir), settings)
    except SnmpError as exc:
        return _unknown(str(exc))

    report = aggregate(results)
    print(report.render())
    return report.severity.value


def main() -> None:
    sys.exit(run())
