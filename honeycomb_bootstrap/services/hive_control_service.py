from __future__ import annotations

import json
import logging
from typing import Any, Optional, Protocol

import aiohttp
import base58

from honeycomb_bootstrap.models.project import Criteria, ProjectHandle, ProjectSpec
from honeycomb_bootstrap.services.config import HiveControlConfig, NetworkConfig
from honeycomb_bootstrap.services.credential_service import Credential
from honeycomb_bootstrap.services.errors import BootstrapError

logger = logging.getLogger(__name__)


class SubmissionError(BootstrapError):
    def __init__(self, message: str, *, instruction: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.instruction = instruction
        self.status = status


class ProjectSdk(Protocol):
    """Typed project instructions, submitted as the connected identity."""

    async def create_project(self, spec: ProjectSpec) -> ProjectHandle: ...

    async def change_driver(self, project: ProjectHandle, driver: str) -> str: ...

    async def add_criteria(self, project: ProjectHandle, criteria: Criteria) -> str: ...


def canonical_json(payload: dict[str, Any]) -> bytes:
    return json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")


class HiveControlService:
    """Client for the hive-control instruction gateway.

    The gateway encodes and lands the on-chain instructions. Every request
    carries the payer address and an Ed25519 signature by `identity` over the
    canonical JSON body.
    """

    def __init__(
        self,
        config: HiveControlConfig,
        *,
        network: NetworkConfig,
        identity: Credential,
        session: aiohttp.ClientSession,
    ) -> None:
        self._config = config
        self._network = network
        self._identity = identity
        self._session = session

    def _signed_body(self, *, instruction: str, args: dict[str, Any]) -> dict[str, Any]:
        body: dict[str, Any] = {
            "instruction": instruction,
            "payer": self._identity.address,
            "rpcEndpoint": self._network.endpoint,
            "commitment": self._network.commitment,
            "args": args,
        }
        signature = self._identity.sign(canonical_json(body))
        body["signature"] = base58.b58encode(signature).decode("ascii")
        return body

    async def _submit(self, *, instruction: str, args: dict[str, Any]) -> dict[str, Any]:
        url = f"{self._config.endpoint}/instructions/{instruction}"
        body = self._signed_body(instruction=instruction, args=args)
        timeout = aiohttp.ClientTimeout(total=self._config.timeout_seconds)

        try:
            async with self._session.post(url, json=body, timeout=timeout) as resp:
                status = resp.status
                payload = await resp.text()
        except Exception as exc:
            logger.exception("hive-control request failed (instruction=%s)", instruction)
            raise SubmissionError(f"Failed submitting {instruction}", instruction=instruction) from exc

        if not 200 <= status < 300:
            raise SubmissionError(
                f"Gateway rejected {instruction} HTTP {status} {payload}".strip(),
                instruction=instruction,
                status=status,
            )

        try:
            parsed = json.loads(payload) if payload else {}
        except ValueError as exc:
            raise SubmissionError(
                f"Gateway returned invalid JSON for {instruction}", instruction=instruction, status=status
            ) from exc
        if not isinstance(parsed, dict):
            raise SubmissionError(f"Gateway returned unexpected payload for {instruction}", instruction=instruction)
        return parsed

    @staticmethod
    def _field(result: dict[str, Any], key: str, *, instruction: str) -> str:
        value = result.get(key)
        if not isinstance(value, str) or not value:
            raise SubmissionError(f"Gateway response for {instruction} is missing {key!r}", instruction=instruction)
        return value

    async def create_project(self, spec: ProjectSpec) -> ProjectHandle:
        args = spec.model_dump(mode="json", by_alias=True)
        result = await self._submit(instruction="createProject", args=args)
        return ProjectHandle(address=self._field(result, "project", instruction="createProject"))

    async def change_driver(self, project: ProjectHandle, driver: str) -> str:
        args = {"project": project.address, "driver": driver}
        result = await self._submit(instruction="changeDriver", args=args)
        return self._field(result, "signature", instruction="changeDriver")

    async def add_criteria(self, project: ProjectHandle, criteria: Criteria) -> str:
        args = {"project": project.address, "criteria": criteria.model_dump(mode="json")}
        result = await self._submit(instruction="addCriteria", args=args)
        return self._field(result, "signature", instruction="addCriteria")
