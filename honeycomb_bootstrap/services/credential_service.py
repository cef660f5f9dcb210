from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import nacl.signing

from honeycomb_bootstrap.models.address import address_from_bytes
from honeycomb_bootstrap.services.errors import BootstrapError

logger = logging.getLogger(__name__)

_SEED_LENGTH = 32
_KEYPAIR_LENGTH = 64
_KEY_FILE_MODE = 0o600


class CredentialIOError(BootstrapError):
    pass


class CredentialCorruptError(CredentialIOError):
    pass


@dataclass(frozen=True)
class Credential:
    """Ed25519 keypair bound to the key slot it was loaded from."""

    slot: Path
    signing_key: nacl.signing.SigningKey

    @property
    def public_key(self) -> bytes:
        return bytes(self.signing_key.verify_key)

    @property
    def address(self) -> str:
        return address_from_bytes(self.public_key)

    def secret_key(self) -> bytes:
        # Solana CLI layout: 32-byte seed followed by the 32-byte public key.
        return bytes(self.signing_key) + self.public_key

    def sign(self, message: bytes) -> bytes:
        return self.signing_key.sign(message).signature


def _parse_keypair(raw: bytes) -> nacl.signing.SigningKey:
    values = json.loads(raw)
    if not isinstance(values, list) or len(values) != _KEYPAIR_LENGTH:
        raise ValueError(f"expected a JSON array of {_KEYPAIR_LENGTH} integers")
    secret = bytes(values)
    signing_key = nacl.signing.SigningKey(secret[:_SEED_LENGTH])
    if bytes(signing_key.verify_key) != secret[_SEED_LENGTH:]:
        raise ValueError("public key does not match the secret seed")
    return signing_key


def _write_keypair(credential: Credential) -> None:
    slot = credential.slot
    try:
        slot.parent.mkdir(parents=True, exist_ok=True)
        # Owner-only, like solana-keygen.
        fd = os.open(slot, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, _KEY_FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(json.dumps(list(credential.secret_key())))
        os.chmod(slot, _KEY_FILE_MODE)
    except OSError as exc:
        raise CredentialIOError(f"Failed writing key file: {slot}") from exc


def _quarantine(slot: Path) -> Path:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
    backup = slot.with_name(f"{slot.name}.corrupt-{stamp}")
    counter = 0
    while backup.exists():
        counter += 1
        backup = slot.with_name(f"{slot.name}.corrupt-{stamp}-{counter}")
    try:
        # A hard link fails instead of overwriting an existing backup.
        os.link(slot, backup)
        slot.unlink()
    except OSError as exc:
        raise CredentialIOError(f"Failed moving corrupt key file aside: {slot}") from exc
    return backup


def provision(slot: Path | str, *, strict: bool = False) -> tuple[Credential, bool]:
    """Load the keypair stored in `slot`, generating and persisting one if needed.

    Returns:
        (credential, existed): `existed` is False when the key was generated by
        this call, so the caller knows the address still needs funding.

    Raises:
        CredentialCorruptError: the slot holds unparseable data and `strict` is set.
        CredentialIOError: the slot cannot be read or written.

    Without `strict`, an unparseable slot is renamed to `<slot>.corrupt-<timestamp>`
    before a replacement key is written.
    """

    slot = Path(slot)
    try:
        raw = slot.read_bytes()
    except FileNotFoundError:
        raw = None
    except OSError as exc:
        raise CredentialIOError(f"Failed reading key file: {slot}") from exc

    if raw is not None:
        try:
            return (Credential(slot=slot, signing_key=_parse_keypair(raw)), True)
        except (ValueError, TypeError) as exc:
            if strict:
                raise CredentialCorruptError(f"Key file is not a valid keypair: {slot} ({exc})") from exc
            backup = _quarantine(slot)
            logger.warning("Key file %s is not a valid keypair (%s); moved to %s and regenerating", slot, exc, backup)

    credential = Credential(slot=slot, signing_key=nacl.signing.SigningKey.generate())
    _write_keypair(credential)
    logger.info("Generated new keypair %s in %s", credential.address, slot)
    return (credential, False)
