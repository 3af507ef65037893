"""Select interfaces by regex over the ifDescr and ifAlias columns."""

import re
from typing import Dict, List, Mapping, Optional, Union

PatternLike = Union[str, re.Pattern]


def index_column(table: Mapping[str, str], column: str) -> Dict[int, str]:
    """
    Turn a table dump keyed by `"<column>.<index>"` into `index -> value`.

    Rows from other columns, and rows whose suffix is not a plain integer
    index, are ignored.
    """
    prefix = column.lstrip(".") + "."
    result: Dict[int, str] = {}
    for oid, value in table.items():
        oid = oid.lstrip(".")
        if not oid.startswith(prefix):
            continue
        suffix = oid[len(prefix):]
        if suffix.isdigit():
            result[int(suffix)] = value
    return result


def _compile(pattern: Optional[PatternLike]) -> Optional[re.Pattern]:
    if pattern is None:
        return None
    if isinstance(pattern, str):
        return re.compile(pattern)
    return pattern


def match_interfaces(
    name_table: Mapping[int, str],
    alias_table: Mapping[int, str],
    descr_pattern: Optional[PatternLike] = None,
    alias_pattern: Optional[PatternLike] = None,
) -> List[int]:
    """
    Indices whose ifDescr matches `descr_pattern` or whose ifAlias matches
    `alias_pattern`, ascending and without duplicates.

    Patterns are searched, not anchored: "eth" matches "eth0".
    """
    descr_re = _compile(descr_pattern)
    alias_re = _compile(alias_pattern)
    if descr_re is None and alias_re is None:
        raise ValueError("at least one of descr_pattern or alias_pattern is required")

    matched = set()
    if descr_re is not None:
        matched.update(i for i, v in name_table.items() if descr_re.search(v))
    if alias_re is not None:
        matched.update(i for i, v in alias_table.items() if alias_re.search(v))
    return sorted(matched)
