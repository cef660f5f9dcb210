"""Command-line entry point: bootstrap the Honeycomb project once."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
from pathlib import Path
from typing import Optional, Sequence

import aiohttp

from honeycomb_bootstrap.models.report import BootstrapReport
from honeycomb_bootstrap.services.config import SERVICE_NAMES, BootstrapConfig, HiveControlConfig
from honeycomb_bootstrap.services.dependencies import get_bootstrap_service
from honeycomb_bootstrap.services.errors import BootstrapError

logger = logging.getLogger(__name__)


def _ensure_logging(level: int = logging.INFO) -> None:
    formatter = logging.Formatter("%(levelname)s: %(message)s")
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    else:
        root.setLevel(level)
        for handler in root.handlers:
            handler.setFormatter(formatter)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="honeycomb-bootstrap",
        description="Create the Honeycomb project, rotate its driver and attach its criteria.",
    )
    parser.add_argument("--network", choices=("devnet", "mainnet"), help="Override SOLANA_NETWORK.")
    parser.add_argument("--authority-key", type=Path, help="Authority key file (overrides SOLANA_WALLET).")
    parser.add_argument("--driver-key", type=Path, help="Driver key file (overrides SOLANA_DRIVER_WALLET).")
    parser.add_argument("--mints", type=Path, help="JSON list of mint addresses (overrides HONEYCOMB_MINTS_FILE).")
    parser.add_argument(
        "--services",
        type=int,
        choices=range(0, len(SERVICE_NAMES) + 1),
        metavar=f"0..{len(SERVICE_NAMES)}",
        help="How many services of the fixed list to resolve.",
    )
    parser.add_argument(
        "--strict-keys",
        action="store_true",
        default=None,
        help="Fail instead of regenerating when a key file is corrupt.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def load_config(args: argparse.Namespace) -> BootstrapConfig:
    config = BootstrapConfig.from_env()
    overrides = {
        "authority_key_path": args.authority_key,
        "driver_key_path": args.driver_key,
        "mints_path": args.mints,
        "services_count": args.services,
        "strict_keys": args.strict_keys,
    }
    return dataclasses.replace(config, **{k: v for k, v in overrides.items() if v is not None})


async def bootstrap(args: argparse.Namespace) -> BootstrapReport:
    config = load_config(args)
    hive_control = HiveControlConfig.from_env()

    async with aiohttp.ClientSession() as session:
        service = get_bootstrap_service(
            config=config,
            network_name=args.network,
            hive_control=hive_control,
            session=session,
        )
        return await service.run()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _ensure_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        report = asyncio.run(bootstrap(args))
    except BootstrapError as exc:
        # Step failures were already logged by the run itself.
        if exc.state is None:
            logger.error("Bootstrap failed: %s", exc)
        return 1
    except ValueError as exc:
        logger.error("Configuration error: %s", exc)
        return 2

    logger.info("Bootstrap complete: project %s on %s", report.project, report.network)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
