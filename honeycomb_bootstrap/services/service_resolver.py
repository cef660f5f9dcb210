from __future__ import annotations

from typing import Callable

from honeycomb_bootstrap.models.service import (
    AssemblerService,
    AssetManagerService,
    GameStateService,
    GuildKitService,
    MatchMakingService,
    MissionsService,
    PaywallService,
    RafflesService,
    ServiceDescriptor,
    StakingService,
    TokenManagerService,
)
from honeycomb_bootstrap.services.errors import BootstrapError


class UnknownServiceError(BootstrapError, ValueError):
    pass


_RESOLVERS: dict[str, Callable[[str], ServiceDescriptor]] = {
    "assembler": lambda id_: AssemblerService(assembler_id=id_),
    "assetmanager": lambda id_: AssetManagerService(asset_manager_id=id_),
    "tokenmanager": lambda _: TokenManagerService(),
    "paywall": lambda _: PaywallService(),
    "staking": lambda id_: StakingService(pool_id=id_),
    "missions": lambda id_: MissionsService(project_id=id_),
    "raffles": lambda id_: RafflesService(project_id=id_),
    "guildkit": lambda _: GuildKitService(),
    "gamestate": lambda _: GameStateService(),
    "matchmaking": lambda _: MatchMakingService(),
}


def known_services() -> tuple[str, ...]:
    return tuple(_RESOLVERS)


def resolve(name: str, associated_id: str) -> ServiceDescriptor:
    """Map a service name (case-insensitive) to its descriptor.

    `associated_id` is embedded only by the variants that carry an id.
    """

    factory = _RESOLVERS.get(name.strip().lower())
    if factory is None:
        raise UnknownServiceError(f"Invalid service: {name!r}")
    return factory(associated_id)
