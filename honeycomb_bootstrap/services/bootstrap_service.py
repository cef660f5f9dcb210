from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Optional, Protocol, TypeVar, cast

from honeycomb_bootstrap.models.address import generate_address
from honeycomb_bootstrap.models.project import Criteria, ProjectHandle, ProjectSpec
from honeycomb_bootstrap.models.report import BootstrapReport
from honeycomb_bootstrap.models.service import ServiceDescriptor
from honeycomb_bootstrap.services import credential_service, service_resolver
from honeycomb_bootstrap.services.config import BootstrapConfig, NetworkConfig
from honeycomb_bootstrap.services.credential_service import Credential
from honeycomb_bootstrap.services.errors import BootstrapError
from honeycomb_bootstrap.services.hive_control_service import ProjectSdk, SubmissionError
from honeycomb_bootstrap.services.solana_rpc_service import LAMPORTS_PER_SOL

logger = logging.getLogger(__name__)

MIN_BALANCE_LAMPORTS = LAMPORTS_PER_SOL // 10

T = TypeVar("T")


class InsufficientFundsError(BootstrapError):
    def __init__(self, *, address: str, balance: int, minimum: int, key_path: Path) -> None:
        super().__init__(
            f"Insufficient SOL: {address} holds {balance / LAMPORTS_PER_SOL} SOL, "
            f"you need at least {minimum / LAMPORTS_PER_SOL} SOL to create a project "
            f"(fund the key in {key_path})"
        )
        self.address = address
        self.balance = balance
        self.minimum = minimum
        self.key_path = key_path


class Ledger(Protocol):
    @property
    def endpoint(self) -> str: ...

    async def get_balance(self, address: str) -> int: ...


@dataclass(frozen=True)
class LedgerSession:
    """Collaborators bound to one network and one signing identity."""

    ledger: Ledger
    sdk: ProjectSdk


Connector = Callable[[NetworkConfig, Credential], Awaitable[LedgerSession]]


class BootstrapState(str, enum.Enum):
    SELECT_NETWORK = "SelectNetwork"
    PROVISION_AUTHORITY = "ProvisionAuthority"
    CONNECT = "Connect"
    PREFLIGHT_BALANCE = "PreflightBalance"
    CREATE_PROJECT = "CreateProject"
    PROVISION_DRIVER = "ProvisionDriver"
    ROTATE_DRIVER_AUTHORITY = "RotateDriverAuthority"
    ATTACH_CRITERIA = "AttachCriteria"
    RESOLVE_SERVICES = "ResolveServices"


@dataclass
class BootstrapRun:
    """What the completed steps have produced so far."""

    network: Optional[NetworkConfig] = None
    authority: Optional[Credential] = None
    authority_created: bool = False
    session: Optional[LedgerSession] = None
    balance: int = 0
    project: Optional[ProjectHandle] = None
    driver: Optional[Credential] = None
    services: list[ServiceDescriptor] = field(default_factory=list)
    completed: list[BootstrapState] = field(default_factory=list)


class BootstrapService:
    """One-shot project bootstrap.

    Steps run strictly in `BootstrapState` order, each at most once. The first
    failing step aborts the run: the raised `BootstrapError` is tagged with the
    step name and nothing already landed on chain is undone. A project created
    before a later failure stays on chain and must be inspected by hand.
    """

    def __init__(
        self,
        *,
        config: BootstrapConfig,
        project: ProjectSpec,
        connect: Connector,
        select_network: Callable[[], NetworkConfig] = NetworkConfig.from_env,
        new_service_id: Callable[[], str] = generate_address,
    ) -> None:
        self._config = config
        self._project = project
        self._connect = connect
        self._select_network = select_network
        self._new_service_id = new_service_id

    def _steps(self) -> list[tuple[BootstrapState, Callable[[BootstrapRun], Awaitable[None]]]]:
        return [
            (BootstrapState.SELECT_NETWORK, self._select_network_step),
            (BootstrapState.PROVISION_AUTHORITY, self._provision_authority),
            (BootstrapState.CONNECT, self._connect_step),
            (BootstrapState.PREFLIGHT_BALANCE, self._preflight_balance),
            (BootstrapState.CREATE_PROJECT, self._create_project),
            (BootstrapState.PROVISION_DRIVER, self._provision_driver),
            (BootstrapState.ROTATE_DRIVER_AUTHORITY, self._rotate_driver_authority),
            (BootstrapState.ATTACH_CRITERIA, self._attach_criteria),
            (BootstrapState.RESOLVE_SERVICES, self._resolve_services),
        ]

    async def run(self) -> BootstrapReport:
        run = BootstrapRun()
        for state, step in self._steps():
            logger.debug("Bootstrap step: %s", state.value)
            try:
                await step(run)
            except BootstrapError as exc:
                exc.state = state.value
                logger.error(
                    "Bootstrap aborted in %s (completed: %s): %s",
                    state.value,
                    ", ".join(s.value for s in run.completed) or "none",
                    exc,
                )
                raise
            run.completed.append(state)

        return self._report(run)

    # -----------------
    # Steps
    # -----------------

    async def _select_network_step(self, run: BootstrapRun) -> None:
        run.network = self._select_network()

    async def _provision_authority(self, run: BootstrapRun) -> None:
        run.authority, existed = credential_service.provision(
            self._config.authority_key_path, strict=self._config.strict_keys
        )
        run.authority_created = not existed
        if not existed:
            logger.warning(
                "New authority key %s written to %s; fund it with at least %s SOL before bootstrapping",
                run.authority.address,
                self._config.authority_key_path,
                MIN_BALANCE_LAMPORTS / LAMPORTS_PER_SOL,
            )

    async def _connect_step(self, run: BootstrapRun) -> None:
        run.session = await self._connect(cast(NetworkConfig, run.network), cast(Credential, run.authority))

    async def _preflight_balance(self, run: BootstrapRun) -> None:
        authority = cast(Credential, run.authority)
        ledger = cast(LedgerSession, run.session).ledger
        run.balance = await ledger.get_balance(authority.address)
        logger.info("Signer: %s", authority.address)
        logger.info("Balance: %s SOL", run.balance / LAMPORTS_PER_SOL)
        logger.info("Network: %s", cast(NetworkConfig, run.network).network.value)
        logger.info("RPC endpoint: %s", ledger.endpoint)

        if run.balance < MIN_BALANCE_LAMPORTS:
            raise InsufficientFundsError(
                address=authority.address,
                balance=run.balance,
                minimum=MIN_BALANCE_LAMPORTS,
                key_path=self._config.authority_key_path,
            )

    async def _create_project(self, run: BootstrapRun) -> None:
        sdk = cast(LedgerSession, run.session).sdk
        run.project = await self._submit("createProject", sdk.create_project(self._project))
        logger.info("%s Project: %s", self._project.name, run.project.address)

    async def _provision_driver(self, run: BootstrapRun) -> None:
        run.driver, _ = credential_service.provision(self._config.driver_key_path, strict=self._config.strict_keys)

    async def _rotate_driver_authority(self, run: BootstrapRun) -> None:
        sdk = cast(LedgerSession, run.session).sdk
        driver = cast(Credential, run.driver)
        signature = await self._submit(
            "changeDriver", sdk.change_driver(cast(ProjectHandle, run.project), driver.address)
        )
        logger.info("Driver set to %s (tx %s)", driver.address, signature)

    async def _attach_criteria(self, run: BootstrapRun) -> None:
        sdk = cast(LedgerSession, run.session).sdk
        criteria = Criteria(collection=self._config.criteria_collection)
        signature = await self._submit("addCriteria", sdk.add_criteria(cast(ProjectHandle, run.project), criteria))
        logger.info("Criteria collection %s attached (tx %s)", criteria.collection, signature)

    async def _resolve_services(self, run: BootstrapRun) -> None:
        for name in self._config.requested_services:
            service = service_resolver.resolve(name, self._new_service_id())
            run.services.append(service)
            logger.info("%s service: %s", service.kind, service.associated_id or "-")

    # -----------------
    # Private helpers
    # -----------------

    @staticmethod
    async def _submit(instruction: str, call: Awaitable[T]) -> T:
        try:
            return await call
        except BootstrapError:
            raise
        except Exception as exc:
            logger.exception("%s submission failed", instruction)
            raise SubmissionError(f"{instruction} submission failed: {exc}", instruction=instruction) from exc

    def _report(self, run: BootstrapRun) -> BootstrapReport:
        # Only reached after every step completed, so all fields are set.
        return BootstrapReport(
            network=cast(NetworkConfig, run.network).network.value,
            rpc_endpoint=cast(LedgerSession, run.session).ledger.endpoint,
            authority=cast(Credential, run.authority).address,
            authority_created=run.authority_created,
            balance_lamports=run.balance,
            project=cast(ProjectHandle, run.project).address,
            driver=cast(Credential, run.driver).address,
            services=run.services,
            completed_states=[s.value for s in run.completed],
        )
