"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable

import pytest

from ifprobe.collector import ERROR_COUNTERS, IF_ALIAS, IF_DESCR, IF_OPER_STATUS
from ifprobe.config import Settings
from ifprobe.snmp_client import SnmpError
from ifprobe.state import StateStore


class FakeSnmpClient:
    """
    Stands in for SnmpClient with canned data.

    `interfaces` maps ifIndex -> (descr, alias, status, counters), where
    counters is a list of values for the error counters in order (None means
    the agent does not have that instance).
    """

    def __init__(self, interfaces: Dict[int, tuple], failing: Iterable[int] = ()):
        self.interfaces = interfaces
        self.failing = set(failing)
        self.get_calls: list[tuple[str, ...]] = []
        self.opened = False

    def open(self) -> "FakeSnmpClient":
        self.opened = True
        return self

    def get_table(self, *columns: str) -> Dict[str, str]:
        table = {}
        for index, (descr, alias, _, _) in self.interfaces.items():
            if IF_DESCR in columns:
                table[f"{IF_DESCR}.{index}"] = descr
            if IF_ALIAS in columns and alias is not None:
                table[f"{IF_ALIAS}.{index}"] = alias
        return table

    def get(self, *oids: str) -> Dict[str, str]:
        self.get_calls.append(oids)
        index = int(oids[0].rsplit(".", 1)[1])
        if index in self.failing:
            raise SnmpError("No SNMP response received before timeout")

        _, _, status, counters = self.interfaces[index]
        values = {}
        if status is not None:
            values[f"{IF_OPER_STATUS}.{index}"] = str(status)
        for (_, oid), value in zip(ERROR_COUNTERS, counters):
            if value is not None:
                values[f"{oid}.{index}"] = str(value)
        return {oid: v for oid, v in values.items() if oid in oids}


def counters(total: int) -> list:
    """Error counters whose sum is `total`, spread over the first two."""
    return [total // 2, total - total // 2] + [0] * (len(ERROR_COUNTERS) - 2)


class Clock:
    def __init__(self, now: float):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path: Path):
    import os

    for key in list(os.environ):
        if key.startswith("IFPROBE_"):
            monkeypatch.delenv(key)
    # keep a stray .env in the checkout from leaking into Settings
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def store(tmp_path: Path) -> StateStore:
    return StateStore(tmp_path / "state")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        snmp_host="192.0.2.1",
        state_dir=str(tmp_path / "state"),
        descr_pattern="^eth",
    )
