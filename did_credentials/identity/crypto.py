"""
Key and address helpers for the identity module.
"""
import hashlib
import re
from typing import Dict, Tuple

from eth_account import Account

# Import base58 for legacy MNID decoding
try:
    import base58
except ImportError:
    raise ImportError(
        "base58 package is required for identity module. "
        "Install with: pip install base58"
    )

ETH_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")
MNID_VERSION = 1
MNID_CHECKSUM_LENGTH = 4


def is_eth_address(value: str) -> bool:
    """Check whether value is a 0x-prefixed 20-byte hex address"""
    return bool(ETH_ADDRESS_PATTERN.match(value))


def is_mnid(value: str) -> bool:
    """
    Check whether value is a legacy multi-network identifier (MNID).

    An MNID is the base58 encoding of version || network || address || checksum,
    where the checksum is the first four bytes of the SHA3-256 of the rest.
    """
    try:
        decoded = base58.b58decode(value)
    except ValueError:
        return False
    if len(decoded) <= 20 + MNID_CHECKSUM_LENGTH + 1 or decoded[0] != MNID_VERSION:
        return False
    payload, checksum = decoded[:-MNID_CHECKSUM_LENGTH], decoded[-MNID_CHECKSUM_LENGTH:]
    return hashlib.sha3_256(payload).digest()[:MNID_CHECKSUM_LENGTH] == checksum


def decode_mnid(value: str) -> Dict[str, str]:
    """
    Split an MNID into its network id and address.

    Raises:
        ValueError: If value is not an MNID
    """
    if not is_mnid(value):
        raise ValueError(f"Not a valid MNID: {value}")
    decoded = base58.b58decode(value)
    network = decoded[1:-24]
    address = decoded[-24:-4]
    return {
        "network": "0x" + network.hex(),
        "address": "0x" + address.hex(),
    }


def generate_keypair() -> Tuple[str, str]:
    """
    Generate a fresh secp256k1 key.

    Returns:
        Tuple of (private key as 64 hex chars without prefix, lowercase address)
    """
    account = Account.create()
    private_key = account.key.hex()
    if private_key.startswith("0x"):
        private_key = private_key[2:]
    return private_key, account.address.lower()

