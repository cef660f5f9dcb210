"""Tests for the bootstrap step sequence."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Callable

import pytest

from honeycomb_bootstrap.models.address import generate_address
from honeycomb_bootstrap.models.project import ProjectSpec, default_profile_data_configs
from honeycomb_bootstrap.services.bootstrap_service import (
    MIN_BALANCE_LAMPORTS,
    BootstrapService,
    BootstrapState,
    InsufficientFundsError,
    LedgerSession,
)
from honeycomb_bootstrap.services.config import SERVICE_NAMES, BootstrapConfig, NetworkConfig
from honeycomb_bootstrap.services.credential_service import Credential, CredentialCorruptError
from honeycomb_bootstrap.services.hive_control_service import SubmissionError
from honeycomb_bootstrap.services.service_resolver import UnknownServiceError

from tests.fakes import FakeLedger, FakeProjectSdk


@pytest.fixture
def config(tmp_path: Path) -> BootstrapConfig:
    return BootstrapConfig(
        authority_key_path=tmp_path / "keys" / "authority.json",
        driver_key_path=tmp_path / "keys" / "driver.json",
        mints_path=tmp_path / "mints.json",
    )


@pytest.fixture
def project() -> ProjectSpec:
    return ProjectSpec(
        name="SolPatrol",
        expected_mint_addresses=3,
        profile_data_configs=default_profile_data_configs(),
    )


def _service(
    config: BootstrapConfig,
    project: ProjectSpec,
    ledger: FakeLedger,
    sdk: FakeProjectSdk,
    *,
    network: NetworkConfig | None = None,
    new_service_id: Callable[[], str] = generate_address,
) -> BootstrapService:
    async def connect(net: NetworkConfig, identity: Credential) -> LedgerSession:
        return LedgerSession(ledger=ledger, sdk=sdk)

    return BootstrapService(
        config=config,
        project=project,
        connect=connect,
        select_network=lambda: network or NetworkConfig.devnet(),
        new_service_id=new_service_id,
    )


@pytest.mark.asyncio
async def test_run_executes_every_step_in_order(config, project, ledger, sdk) -> None:
    report = await _service(config, project, ledger, sdk).run()

    assert report.completed_states == [state.value for state in BootstrapState]
    assert sdk.call_names() == ["create_project", "change_driver", "add_criteria"]
    assert report.network == "devnet"
    assert report.rpc_endpoint == ledger.endpoint
    assert report.balance_lamports == ledger.balance
    assert report.authority_created is True


@pytest.mark.asyncio
async def test_run_submits_project_spec_and_driver(config, project, ledger, sdk) -> None:
    report = await _service(config, project, ledger, sdk).run()

    _, submitted = sdk.calls[0]
    assert submitted == project
    _, (handle, driver) = sdk.calls[1]
    assert handle.address == report.project
    assert driver == report.driver
    assert report.driver != report.authority
    _, (_, criteria) = sdk.calls[2]
    assert criteria.collection == config.criteria_collection


@pytest.mark.asyncio
async def test_run_resolves_only_the_service_prefix(config, project, ledger, sdk) -> None:
    report = await _service(config, project, ledger, sdk).run()

    kinds = [service.kind for service in report.services]
    assert kinds == ["Assembler", "AssetManager", "TokenManager", "Paywall", "Staking", "Missions"]
    assert len(set(s.associated_id for s in report.services if s.associated_id)) == 4


@pytest.mark.asyncio
async def test_run_logs_each_resolved_service(config, project, ledger, sdk, caplog) -> None:
    with caplog.at_level(logging.INFO):
        report = await _service(config, project, ledger, sdk).run()

    staking = next(s for s in report.services if s.kind == "Staking")
    assert f"Staking service: {staking.associated_id}" in caplog.text
    assert "Paywall service: -" in caplog.text
    assert "Raffles service" not in caplog.text


@pytest.mark.asyncio
async def test_balance_equal_to_minimum_passes(config, project, sdk) -> None:
    ledger = FakeLedger(balance=MIN_BALANCE_LAMPORTS)
    report = await _service(config, project, ledger, sdk).run()
    assert report.balance_lamports == MIN_BALANCE_LAMPORTS


@pytest.mark.asyncio
@pytest.mark.parametrize("balance", [0, MIN_BALANCE_LAMPORTS - 1])
async def test_balance_below_minimum_aborts_before_any_submission(config, project, sdk, balance) -> None:
    ledger = FakeLedger(balance=balance)

    with pytest.raises(InsufficientFundsError, match="at least 0.1 SOL") as excinfo:
        await _service(config, project, ledger, sdk).run()

    assert excinfo.value.state == "PreflightBalance"
    assert excinfo.value.minimum == MIN_BALANCE_LAMPORTS
    assert excinfo.value.key_path == config.authority_key_path
    assert sdk.calls == []
    assert not config.driver_key_path.exists()


@pytest.mark.asyncio
async def test_preflight_reads_the_authority_balance(config, project, ledger, sdk) -> None:
    report = await _service(config, project, ledger, sdk).run()
    assert ledger.balance_calls == [report.authority]


@pytest.mark.asyncio
async def test_authority_key_is_reused_across_runs(config, project, ledger) -> None:
    first = await _service(config, project, ledger, FakeProjectSdk()).run()
    second = await _service(config, project, ledger, FakeProjectSdk()).run()

    assert first.authority == second.authority
    assert first.driver == second.driver
    assert second.authority_created is False


@pytest.mark.asyncio
async def test_rerunning_create_project_surfaces_submission_error(config, project, ledger) -> None:
    first_sdk = FakeProjectSdk()
    await _service(config, project, ledger, first_sdk).run()

    second_sdk = FakeProjectSdk(chain=first_sdk.chain)
    with pytest.raises(SubmissionError) as excinfo:
        await _service(config, project, ledger, second_sdk).run()

    assert excinfo.value.state == "CreateProject"
    assert excinfo.value.status == 409
    assert second_sdk.call_names() == ["create_project"]


@pytest.mark.asyncio
async def test_collaborator_failure_becomes_submission_error(config, project, ledger) -> None:
    sdk = FakeProjectSdk(fail_on="create_project")

    with pytest.raises(SubmissionError, match="createProject submission failed") as excinfo:
        await _service(config, project, ledger, sdk).run()

    assert isinstance(excinfo.value.__cause__, ConnectionError)
    assert excinfo.value.instruction == "createProject"


@pytest.mark.asyncio
async def test_driver_rotation_failure_does_not_roll_back_project(config, project, ledger) -> None:
    sdk = FakeProjectSdk(fail_on="change_driver")

    with pytest.raises(SubmissionError) as excinfo:
        await _service(config, project, ledger, sdk).run()

    assert excinfo.value.state == "RotateDriverAuthority"
    assert sdk.call_names() == ["create_project", "change_driver"]
    assert project.name in sdk.chain.projects


@pytest.mark.asyncio
async def test_criteria_failure_aborts_before_services(config, project, ledger, caplog) -> None:
    sdk = FakeProjectSdk(fail_on="add_criteria")
    issued: list[str] = []

    def new_service_id() -> str:
        issued.append(generate_address())
        return issued[-1]

    with caplog.at_level(logging.INFO):
        with pytest.raises(SubmissionError) as excinfo:
            await _service(config, project, ledger, sdk, new_service_id=new_service_id).run()

    assert excinfo.value.state == "AttachCriteria"
    assert issued == []
    assert not any(" service: " in record.getMessage() for record in caplog.records)


@pytest.mark.asyncio
async def test_wrapped_submission_failure_is_logged_once_with_traceback(config, project, ledger, caplog) -> None:
    sdk = FakeProjectSdk(fail_on="create_project")

    with caplog.at_level(logging.INFO):
        with pytest.raises(SubmissionError):
            await _service(config, project, ledger, sdk).run()

    errors = [record for record in caplog.records if record.levelno >= logging.ERROR]
    assert [record.exc_info is not None for record in errors] == [True, False]
    assert errors[0].getMessage() == "createProject submission failed"
    assert errors[1].getMessage().startswith("Bootstrap aborted in CreateProject (completed: ")


@pytest.mark.asyncio
async def test_gateway_submission_error_is_not_logged_again(config, project, ledger, caplog) -> None:
    first_sdk = FakeProjectSdk()
    await _service(config, project, ledger, first_sdk).run()

    with caplog.at_level(logging.INFO):
        with pytest.raises(SubmissionError):
            await _service(config, project, ledger, FakeProjectSdk(chain=first_sdk.chain)).run()

    errors = [record for record in caplog.records if record.levelno >= logging.ERROR]
    assert len(errors) == 1
    assert errors[0].exc_info is None


@pytest.mark.asyncio
async def test_unknown_service_aborts_at_the_last_step(config, project, ledger, sdk) -> None:
    config = dataclasses.replace(config, service_names=("staking", "bogus"), services_count=2)

    with pytest.raises(UnknownServiceError) as excinfo:
        await _service(config, project, ledger, sdk).run()

    assert excinfo.value.state == "ResolveServices"
    assert sdk.call_names() == ["create_project", "change_driver", "add_criteria"]


@pytest.mark.asyncio
async def test_strict_keys_abort_before_connecting(config, project, ledger, sdk) -> None:
    config = dataclasses.replace(config, strict_keys=True)
    config.authority_key_path.parent.mkdir(parents=True)
    config.authority_key_path.write_text("corrupt", encoding="utf-8")

    with pytest.raises(CredentialCorruptError) as excinfo:
        await _service(config, project, ledger, sdk).run()

    assert excinfo.value.state == "ProvisionAuthority"
    assert ledger.balance_calls == []


@pytest.mark.asyncio
async def test_mainnet_selection_is_reported(config, project, sdk) -> None:
    ledger = FakeLedger(balance=MIN_BALANCE_LAMPORTS, endpoint=NetworkConfig.mainnet().endpoint)
    report = await _service(config, project, ledger, sdk, network=NetworkConfig.mainnet()).run()
    assert (report.network, report.rpc_endpoint) == ("mainnet", "https://api.metaplex.solana.com")


@pytest.mark.asyncio
async def test_full_service_list_resolves_all_ten(config, project, ledger, sdk) -> None:
    config = dataclasses.replace(config, services_count=len(SERVICE_NAMES))
    report = await _service(config, project, ledger, sdk).run()
    assert len(report.services) == 10
