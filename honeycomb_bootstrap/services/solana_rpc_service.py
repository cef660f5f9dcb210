from __future__ import annotations

import itertools
import logging
from typing import Any

import aiohttp

from honeycomb_bootstrap.services.config import NetworkConfig
from honeycomb_bootstrap.services.errors import BootstrapError

logger = logging.getLogger(__name__)

LAMPORTS_PER_SOL = 1_000_000_000


class LedgerServiceError(BootstrapError):
    pass


class SolanaRpcService:
    """Minimal read-only Solana JSON-RPC client.

    Only the account reads the bootstrap needs; transaction submission goes
    through the hive-control gateway.
    """

    def __init__(self, config: NetworkConfig, *, session: aiohttp.ClientSession) -> None:
        self._config = config
        self._session = session
        self._ids = itertools.count(1)

    @property
    def endpoint(self) -> str:
        return self._config.endpoint

    async def _rpc(self, method: str, params: list[Any]) -> Any:
        body = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        timeout = aiohttp.ClientTimeout(total=self._config.timeout_seconds)

        try:
            async with self._session.post(self._config.endpoint, json=body, timeout=timeout) as resp:
                if resp.status != 200:
                    details = await resp.text()
                    raise LedgerServiceError(
                        f"Unexpected RPC response ({method}) HTTP {resp.status} {details}".strip()
                    )
                payload = await resp.json(content_type=None)
        except LedgerServiceError:
            raise
        except Exception as exc:
            logger.exception("Solana RPC request failed (method=%s endpoint=%s)", method, self._config.endpoint)
            raise LedgerServiceError(f"Solana RPC request failed ({method})") from exc

        if not isinstance(payload, dict):
            raise LedgerServiceError(f"Malformed RPC response ({method})")

        error = payload.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else error
            raise LedgerServiceError(f"RPC error ({method}): {message}")

        return payload.get("result")

    def _commitment(self) -> dict[str, str]:
        return {"commitment": self._config.commitment}

    async def get_balance(self, address: str) -> int:
        """Balance of `address` in lamports (0 for accounts that do not exist)."""

        result = await self._rpc("getBalance", [address, self._commitment()])
        try:
            return int(result["value"])
        except (TypeError, KeyError, ValueError) as exc:
            raise LedgerServiceError(f"Malformed getBalance result: {result!r}") from exc
