from __future__ import annotations

import os
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class HiveControlConfig:
    """Runtime configuration for the hive-control instruction gateway.

    `endpoint` is the gateway base URL including scheme, e.g.
    "https://hive-control.example.com/v1".
    """

    endpoint: str
    _DEFAULT_TIMEOUT_SECONDS: ClassVar[float] = 30.0
    timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS

    @staticmethod
    def from_env(
        *,
        endpoint_env: str = "HIVE_CONTROL_URL",
        timeout_env: str = "HIVE_CONTROL_TIMEOUT_SECONDS",
    ) -> "HiveControlConfig":
        endpoint = os.getenv(endpoint_env)
        if not endpoint:
            raise ValueError(f"Missing required environment variable: {endpoint_env}")

        timeout_raw = os.getenv(timeout_env)
        timeout_seconds = HiveControlConfig._DEFAULT_TIMEOUT_SECONDS
        if timeout_raw:
            try:
                timeout_seconds = float(timeout_raw)
            except ValueError as exc:
                raise ValueError(f"Invalid {timeout_env}; must be a number") from exc

        return HiveControlConfig(endpoint=endpoint.rstrip("/"), timeout_seconds=timeout_seconds)
