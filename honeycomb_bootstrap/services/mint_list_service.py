from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from honeycomb_bootstrap.models.address import Address
from honeycomb_bootstrap.services.errors import BootstrapError

logger = logging.getLogger(__name__)

_MINT_LIST = TypeAdapter(list[Address])


class MintListError(BootstrapError):
    pass


def unique_mints(mints: list[str]) -> list[str]:
    """Drop repeated addresses, keeping the first occurrence of each."""

    return list(dict.fromkeys(mints))


def load_unique_mints(path: Path) -> list[str]:
    """Read a JSON array of mint addresses and return the distinct ones in file order."""

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise MintListError(f"Mint list not found: {path}") from exc
    except (OSError, ValueError) as exc:
        raise MintListError(f"Failed reading mint list: {path}") from exc

    try:
        mints = _MINT_LIST.validate_python(payload)
    except ValidationError as exc:
        raise MintListError(f"Mint list must be a JSON array of base58 addresses: {path}\n{exc}") from exc

    unique = unique_mints(mints)
    logger.info("Loaded %d mints (%d unique) from %s", len(mints), len(unique), path)
    return unique
