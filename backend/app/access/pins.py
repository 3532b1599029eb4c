"""PIN format rules and salted scrypt hashing."""

import hashlib
import hmac
import re
import secrets
from functools import lru_cache

from backend.app.errors import InvalidInputError

PIN_PATTERN = re.compile(r"[0-9]{4,12}")

# scrypt cost parameters (16 MiB per hash)
SCRYPT_N = 2**14
SCRYPT_R = 8
SCRYPT_P = 1
SCRYPT_DKLEN = 64

HASH_SCHEME = "scrypt"


def validate_pin(pin: str) -> str:
    """Return ``pin`` if it is 4-12 ASCII digits.

    Raises:
        InvalidInputError: If the PIN is malformed
    """
    if not PIN_PATTERN.fullmatch(pin):
        raise InvalidInputError("PIN must be 4 to 12 digits")
    return pin


def _derive(pin: str, salt: bytes) -> bytes:
    return hashlib.scrypt(
        pin.encode("utf-8"),
        salt=salt,
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=SCRYPT_DKLEN,
    )


def hash_pin(pin: str) -> str:
    """Hash a PIN as ``scrypt$<salt hex>$<digest hex>``."""
    salt = secrets.token_bytes(16)
    return f"{HASH_SCHEME}${salt.hex()}${_derive(pin, salt).hex()}"


def check_pin(candidate: str, stored_hash: str) -> bool:
    """Compare a candidate PIN against a stored hash in constant time.

    Malformed stored hashes never match.
    """
    try:
        scheme, salt_hex, digest_hex = stored_hash.split("$")
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(digest_hex)
    except ValueError:
        return False

    if scheme != HASH_SCHEME:
        return False

    return hmac.compare_digest(_derive(candidate, salt), expected)


@lru_cache(maxsize=1)
def _placeholder_hash() -> str:
    return hash_pin("0" * 12)


def check_pin_without_user(candidate: str) -> bool:
    """Run a full PIN check against a placeholder hash and report no match.

    Callers use this when the target user does not exist, so the response
    takes as long as a real mismatch.
    """
    check_pin(candidate, _placeholder_hash())
    return False
