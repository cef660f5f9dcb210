from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

SERVICE_NAMES: tuple[str, ...] = (
    "assembler",
    "assetmanager",
    "tokenmanager",
    "paywall",
    "staking",
    "missions",
    "raffles",
    "guildkit",
    "gamestate",
    "matchmaking",
)

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class BootstrapConfig:
    """Operator inputs for a single bootstrap run.

    Key slots and the mint list are local paths; the project name, criteria
    collection and service list are fixed for this deployment.
    """

    authority_key_path: Path = Path("keys/authority.json")
    driver_key_path: Path = Path("keys/driver.json")
    mints_path: Path = Path("mints.json")
    project_name: str = "SolPatrol"
    criteria_collection: str = "7Zcfq1fdQYYjKreRoKSf6ungwrFGCgoPcapEeTkj1cQX"
    service_names: tuple[str, ...] = SERVICE_NAMES
    services_count: int = 6
    strict_keys: bool = False

    @property
    def requested_services(self) -> tuple[str, ...]:
        return self.service_names[: self.services_count]

    @staticmethod
    def from_env(
        *,
        authority_env: str = "SOLANA_WALLET",
        driver_env: str = "SOLANA_DRIVER_WALLET",
        mints_env: str = "HONEYCOMB_MINTS_FILE",
        services_count_env: str = "HONEYCOMB_SERVICES_COUNT",
        strict_keys_env: str = "HONEYCOMB_STRICT_KEYS",
    ) -> "BootstrapConfig":
        defaults = BootstrapConfig()

        services_count = defaults.services_count
        count_raw = os.getenv(services_count_env)
        if count_raw:
            try:
                services_count = int(count_raw)
            except ValueError as exc:
                raise ValueError(f"Invalid {services_count_env}; must be an integer") from exc
        if not 0 <= services_count <= len(SERVICE_NAMES):
            raise ValueError(f"Invalid {services_count_env}; must be between 0 and {len(SERVICE_NAMES)}")

        return BootstrapConfig(
            authority_key_path=Path(os.getenv(authority_env) or defaults.authority_key_path),
            driver_key_path=Path(os.getenv(driver_env) or defaults.driver_key_path),
            mints_path=Path(os.getenv(mints_env) or defaults.mints_path),
            services_count=services_count,
            strict_keys=(os.getenv(strict_keys_env) or "").strip().lower() in _TRUTHY,
        )
