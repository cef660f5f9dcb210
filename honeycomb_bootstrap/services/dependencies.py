from __future__ import annotations

from typing import Optional

import aiohttp

from honeycomb_bootstrap.models.project import ProjectSpec, default_profile_data_configs
from honeycomb_bootstrap.services.bootstrap_service import BootstrapService, Connector, LedgerSession
from honeycomb_bootstrap.services.config import BootstrapConfig, HiveControlConfig, NetworkConfig
from honeycomb_bootstrap.services.credential_service import Credential
from honeycomb_bootstrap.services.hive_control_service import HiveControlService
from honeycomb_bootstrap.services.mint_list_service import load_unique_mints
from honeycomb_bootstrap.services.solana_rpc_service import SolanaRpcService


def get_project_spec(config: BootstrapConfig) -> ProjectSpec:
    """Project definition for this deployment; the mint count comes from the local mint list."""

    mints = load_unique_mints(config.mints_path)
    return ProjectSpec(
        name=config.project_name,
        expected_mint_addresses=len(mints),
        profile_data_configs=default_profile_data_configs(),
    )


def get_connector(*, session: aiohttp.ClientSession, hive_control: HiveControlConfig) -> Connector:
    """Provider for the Connect step: both collaborators share the run's HTTP session."""

    async def connect(network: NetworkConfig, identity: Credential) -> LedgerSession:
        return LedgerSession(
            ledger=SolanaRpcService(network, session=session),
            sdk=HiveControlService(hive_control, network=network, identity=identity, session=session),
        )

    return connect


def get_bootstrap_service(
    *,
    config: BootstrapConfig,
    network_name: Optional[str] = None,
    hive_control: HiveControlConfig,
    session: aiohttp.ClientSession,
) -> BootstrapService:
    return BootstrapService(
        config=config,
        project=get_project_spec(config),
        connect=get_connector(session=session, hive_control=hive_control),
        select_network=(lambda: NetworkConfig.for_name(network_name)) if network_name else NetworkConfig.from_env,
    )
