"""Ledger address and code hash helpers.

Generates and validates Stellar-style addresses used as identities in the
service: account addresses start with ``G``, contract addresses with ``C``,
followed by 55 base32 characters.
"""

import re
import secrets
from typing import Optional

BASE32_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
ADDRESS_BODY_LENGTH = 55

ACCOUNT_PREFIX = "G"
CONTRACT_PREFIX = "C"

_ADDRESS_PATTERN = re.compile(r"^[GC][A-Z2-7]{55}$")
_CODE_HASH_PATTERN = re.compile(r"^[0-9a-f]{64}$")


def generate_address(prefix: str = ACCOUNT_PREFIX) -> str:
    """Generate a random ledger address.

    Args:
        prefix: ``G`` for an account address, ``C`` for a contract address

    Returns:
        56 character address string

    Raises:
        ValueError: If prefix is not a known address prefix
    """
    if prefix not in (ACCOUNT_PREFIX, CONTRACT_PREFIX):
        raise ValueError(f"Unknown address prefix: '{prefix}'")
    body = "".join(secrets.choice(BASE32_ALPHABET) for _ in range(ADDRESS_BODY_LENGTH))
    return prefix + body


def generate_contract_address() -> str:
    """Generate a random contract address (``C...``)."""
    return generate_address(CONTRACT_PREFIX)


def validate_address(address: str, prefix: Optional[str] = None) -> bool:
    """Validate address format.

    Args:
        address: Address string to validate
        prefix: Expected prefix (``G`` or ``C``), or None for any

    Returns:
        True if address format is valid, False otherwise
    """
    if not address or not isinstance(address, str):
        return False
    if not _ADDRESS_PATTERN.match(address):
        return False
    if prefix and not address.startswith(prefix):
        return False
    return True


def normalize_code_hash(code_hash: str) -> str:
    """Normalize and validate a 32-byte code hash given as hex.

    Accepts an optional ``0x`` prefix and upper-case digits.

    Raises:
        ValueError: If the value is not 64 hex characters
    """
    if not isinstance(code_hash, str):
        raise ValueError("Code hash must be a hex string")
    value = code_hash.strip().lower()
    if value.startswith("0x"):
        value = value[2:]
    if not _CODE_HASH_PATTERN.match(value):
        raise ValueError(f"Invalid code hash: expected 64 hex characters, got '{code_hash}'")
    return value
