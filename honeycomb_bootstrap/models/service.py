from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from honeycomb_bootstrap.models.address import Address


class _Service(BaseModel):
    """Shared config: wire names use the SDK's `__kind` tag and camelCase ids."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @property
    def associated_id(self) -> str | None:
        return None


class AssemblerService(_Service):
    kind: Literal["Assembler"] = Field(default="Assembler", alias="__kind")
    assembler_id: Address = Field(alias="assemblerId")

    @property
    def associated_id(self) -> str | None:
        return self.assembler_id


class AssetManagerService(_Service):
    kind: Literal["AssetManager"] = Field(default="AssetManager", alias="__kind")
    asset_manager_id: Address = Field(alias="assetManagerId")

    @property
    def associated_id(self) -> str | None:
        return self.asset_manager_id


class TokenManagerService(_Service):
    kind: Literal["TokenManager"] = Field(default="TokenManager", alias="__kind")


class PaywallService(_Service):
    kind: Literal["Paywall"] = Field(default="Paywall", alias="__kind")


class StakingService(_Service):
    kind: Literal["Staking"] = Field(default="Staking", alias="__kind")
    pool_id: Address = Field(alias="poolId")

    @property
    def associated_id(self) -> str | None:
        return self.pool_id


class MissionsService(_Service):
    kind: Literal["Missions"] = Field(default="Missions", alias="__kind")
    project_id: Address = Field(alias="projectId")

    @property
    def associated_id(self) -> str | None:
        return self.project_id


class RafflesService(_Service):
    kind: Literal["Raffles"] = Field(default="Raffles", alias="__kind")
    project_id: Address = Field(alias="projectId")

    @property
    def associated_id(self) -> str | None:
        return self.project_id


class GuildKitService(_Service):
    kind: Literal["GuildKit"] = Field(default="GuildKit", alias="__kind")


class GameStateService(_Service):
    kind: Literal["GameState"] = Field(default="GameState", alias="__kind")


class MatchMakingService(_Service):
    kind: Literal["MatchMaking"] = Field(default="MatchMaking", alias="__kind")


ServiceDescriptor = Annotated[
    Union[
        AssemblerService,
        AssetManagerService,
        TokenManagerService,
        PaywallService,
        StakingService,
        MissionsService,
        RafflesService,
        GuildKitService,
        GameStateService,
        MatchMakingService,
    ],
    Field(discriminator="kind"),
]
