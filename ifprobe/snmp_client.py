"""
SNMP client abstraction.

The probe needs exactly two things from the device:

1. Table retrieval: walk one or more column OIDs and get back every instance
   as `"<column>.<index>" -> value`.
2. Instance retrieval: GET a batch of fully qualified OIDs in one request.

pysnmp exposes an asyncio API; the probe itself is strictly sequential, so
each request runs to completion on its own event loop before the next one
starts. Values are returned as their printable strings and interpretation
(numeric or not) is left to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List

from pysnmp.error import PySnmpError
from pysnmp.hlapi.v3arch.asyncio import (
    CommunityData,
    ContextData,
    ObjectIdentity,
    ObjectType,
    SnmpEngine,
    UdpTransportTarget,
    bulk_walk_cmd,
    get_cmd,
    walk_cmd,
)
from pysnmp.proto.rfc1905 import EndOfMibView, NoSuchInstance, NoSuchObject

logger = logging.getLogger(__name__)

# Values an agent sends back in place of data it does not have
_EXCEPTION_VALUES = (NoSuchInstance, NoSuchObject, EndOfMibView)

BULK_MAX_REPETITIONS = 25

# SNMPv1 error-status for an instance the agent does not have
NO_SUCH_NAME = 2


class SnmpError(Exception):
    """Raised when SNMP retrieval fails."""


def _strip_dot(oid: str) -> str:
    return oid.lstrip(".")


def _check_response(errorIndication, errorStatus, errorIndex, varBinds) -> None:
    if errorIndication:
        raise SnmpError(str(errorIndication))
    if errorStatus:
        msg = f"{errorStatus.prettyPrint()} at {errorIndex and varBinds[int(errorIndex) - 1][0] or '?'}"
        raise SnmpError(msg)


class SnmpClient:
    """
    One logical SNMP session against a single device.

    Call `open()` once before any request; it resolves the target address and
    is the only step whose failure should abort a whole run.
    """

    def __init__(
        self,
        host: str,
        community: str = "public",
        version: str = "2c",
        port: int = 161,
        timeout: float = 5.0,
        retries: int = 1,
    ):
        self.host = host
        self.community = community
        self.version = version
        self.port = port
        self.timeout = timeout
        self.retries = retries
        self._opened = False

    @classmethod
    def from_settings(cls, settings) -> "SnmpClient":
        return cls(
            host=settings.snmp_host,
            community=settings.snmp_community,
            version=settings.snmp_version,
            port=settings.snmp_port,
            timeout=settings.snmp_timeout,
            retries=settings.snmp_retries,
        )

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def _auth(self) -> CommunityData:
        # mpModel 0 is SNMPv1, 1 is SNMPv2c
        return CommunityData(self.community, mpModel=0 if self.version == "1" else 1)

    async def _target(self) -> UdpTransportTarget:
        try:
            return await UdpTransportTarget.create(
                (self.host, self.port), timeout=self.timeout, retries=self.retries
            )
        except (PySnmpError, OSError) as exc:
            raise SnmpError(f"cannot open SNMP session to {self.host}: {exc}") from exc

    def open(self) -> "SnmpClient":
        asyncio.run(self._target())
        self._opened = True
        logger.debug("SNMP v%s session to %s:%d ready", self.version, self.host, self.port)
        return self

    def _require_open(self) -> None:
        if not self._opened:
            raise SnmpError("SNMP session is not open")

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def _get_once(self, oids: List[str]):
        engine = SnmpEngine()
        try:
            return await get_cmd(
                engine,
                self._auth(),
                await self._target(),
                ContextData(),
                *[ObjectType(ObjectIdentity(_strip_dot(oid))) for oid in oids],
                lookupMib=False,
            )
        finally:
            engine.close_dispatcher()

    async def _get(self, oids: Iterable[str]) -> Dict[str, str]:
        pending = list(oids)
        while pending:
            errorIndication, errorStatus, errorIndex, varBinds = await self._get_once(pending)
            # SNMPv1 rejects the whole request when one instance is missing;
            # drop the offending OID and ask again for the rest
            if (
                self.version == "1"
                and not errorIndication
                and errorStatus
                and int(errorStatus) == NO_SUCH_NAME
                and 0 < int(errorIndex) <= len(pending)
            ):
                missing = pending.pop(int(errorIndex) - 1)
                logger.debug("%s: noSuchName for %s", self.host, missing)
                continue
            break
        else:
            return {}

        _check_response(errorIndication, errorStatus, errorIndex, varBinds)

        result: Dict[str, str] = {}
        for name, value in varBinds:
            if isinstance(value, _EXCEPTION_VALUES):
                continue
            result[str(name)] = value.prettyPrint()
        return result

    async def _walk(self, column: str) -> Dict[str, str]:
        engine = SnmpEngine()
        auth = self._auth()
        target = await self._target()
        prefix = column + "."
        result: Dict[str, str] = {}

        if self.version == "1":
            responses = walk_cmd(
                engine,
                auth,
                target,
                ContextData(),
                ObjectType(ObjectIdentity(column)),
                lexicographicMode=False,
                lookupMib=False,
            )
        else:
            responses = bulk_walk_cmd(
                engine,
                auth,
                target,
                ContextData(),
                0,
                BULK_MAX_REPETITIONS,
                ObjectType(ObjectIdentity(column)),
                lexicographicMode=False,
                lookupMib=False,
            )

        try:
            async for errorIndication, errorStatus, errorIndex, varBinds in responses:
                _check_response(errorIndication, errorStatus, errorIndex, varBinds)
                for name, value in varBinds:
                    oid = str(name)
                    if not oid.startswith(prefix) or isinstance(value, _EXCEPTION_VALUES):
                        continue
                    result[oid] = value.prettyPrint()
        finally:
            engine.close_dispatcher()
        return result

    def get(self, *oids: str) -> Dict[str, str]:
        """
        GET all `oids` in a single request.

        Instances the agent does not know are left out of the result rather
        than reported as errors. SNMPv1 agents refuse the whole request with
        noSuchName instead, so the missing OID is dropped and the GET repeated.
        """
        self._require_open()
        return asyncio.run(self._get(oids))

    def get_table(self, *columns: str) -> Dict[str, str]:
        """Walk every column and merge the results into one mapping."""
        self._require_open()
        result: Dict[str, str] = {}
        for column in columns:
            result.update(asyncio.run(self._walk(_strip_dot(column))))
        return result
