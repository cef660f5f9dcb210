from __future__ import annotations

from typing import Annotated

import base58
import nacl.signing
from pydantic import AfterValidator

ADDRESS_LENGTH = 32


def address_from_bytes(raw: bytes) -> str:
    if len(raw) != ADDRESS_LENGTH:
        raise ValueError(f"address must be {ADDRESS_LENGTH} bytes (got {len(raw)})")
    return base58.b58encode(raw).decode("ascii")


def address_to_bytes(address: str) -> bytes:
    try:
        raw = base58.b58decode(address)
    except ValueError as exc:
        raise ValueError(f"Invalid base58 address: {address!r}") from exc
    if len(raw) != ADDRESS_LENGTH:
        raise ValueError(f"Invalid address length: {address!r} decodes to {len(raw)} bytes")
    return raw


def validate_address(value: str) -> str:
    value = value.strip()
    address_to_bytes(value)
    return value


def generate_address() -> str:
    """Public half of a freshly generated keypair; the secret half is discarded."""

    return address_from_bytes(bytes(nacl.signing.SigningKey.generate().verify_key))


Address = Annotated[str, AfterValidator(validate_address)]
