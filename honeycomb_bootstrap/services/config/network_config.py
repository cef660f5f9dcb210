from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from typing import ClassVar, Optional


class Network(str, enum.Enum):
    DEVNET = "devnet"
    MAINNET = "mainnet"


@dataclass(frozen=True)
class NetworkConfig:
    """Cluster the run talks to.

    Only two presets exist; anything the environment says that is not a known
    network name falls back to devnet so a typo never lands on mainnet.
    """

    network: Network
    endpoint: str
    commitment: str = "processed"
    _DEFAULT_TIMEOUT_SECONDS: ClassVar[float] = 30.0
    timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS

    @staticmethod
    def devnet() -> "NetworkConfig":
        return NetworkConfig(network=Network.DEVNET, endpoint="https://api.devnet.solana.com")

    @staticmethod
    def mainnet() -> "NetworkConfig":
        return NetworkConfig(network=Network.MAINNET, endpoint="https://api.metaplex.solana.com")

    @staticmethod
    def for_name(name: Optional[str]) -> "NetworkConfig":
        if (name or "").strip().lower() == Network.MAINNET.value:
            return NetworkConfig.mainnet()
        return NetworkConfig.devnet()

    @staticmethod
    def from_env(
        *,
        network_env: str = "SOLANA_NETWORK",
        legacy_network_env: str = "TEST_NETWORK_SOL",
    ) -> "NetworkConfig":
        return NetworkConfig.for_name(os.getenv(network_env) or os.getenv(legacy_network_env))
