"""
secp256k1 JWT algorithms used by DID-JWTs.

Both algorithms are registered on a ``jwt.PyJWS`` instance. Signing keys are
``Signer`` objects; verification keys are DID document verification method
entries (``ethereumAddress``, ``blockchainAccountId`` or ``publicKeyHex``).
"""
import hashlib
import logging
from typing import Any, Dict, Optional

from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError as EthKeysValidationError
from jwt.algorithms import Algorithm

from ..signer import Signer

logger = logging.getLogger(__name__)

ES256K = "ES256K"
ES256K_R = "ES256K-R"


def _strip_hex(value: str) -> str:
    return value[2:] if value.startswith("0x") else value


def public_key_from_hex(value: str) -> keys.PublicKey:
    """
    Parse a compressed or uncompressed secp256k1 public key.

    Raises:
        ValueError: If the value is not a valid public key encoding
    """
    raw = bytes.fromhex(_strip_hex(value))
    if len(raw) == 33:
        return keys.PublicKey.from_compressed_bytes(raw)
    if len(raw) == 65 and raw[0] == 4:
        raw = raw[1:]
    if len(raw) != 64:
        raise ValueError(f"Unsupported public key length: {len(raw)}")
    return keys.PublicKey(raw)


def entry_address(entry: Dict[str, Any]) -> Optional[str]:
    """Lowercase Ethereum address a verification method entry commits to, if any"""
    if entry.get("ethereumAddress"):
        return entry["ethereumAddress"].lower()
    account_id = entry.get("blockchainAccountId")
    if account_id:
        # Either "0xabc@eip155:1" or CAIP-10 "eip155:1:0xabc"
        candidate = account_id.split("@")[0] if "@" in account_id else account_id.split(":")[-1]
        return candidate.lower()
    if entry.get("publicKeyHex"):
        try:
            return public_key_from_hex(entry["publicKeyHex"]).to_address().lower()
        except (ValueError, EthKeysValidationError):
            return None
    return None


def _recover_address(digest: bytes, r: int, s: int, v: int) -> Optional[str]:
    try:
        signature = keys.Signature(vrs=(v, r, s))
        return signature.recover_public_key_from_msg_hash(digest).to_address().lower()
    except (BadSignature, EthKeysValidationError, ValueError):
        return None


class _Secp256k1Algorithm(Algorithm):
    """Shared plumbing for the secp256k1 algorithms"""

    recoverable = False

    def prepare_key(self, key: Any) -> Any:
        return key

    def sign(self, msg: bytes, key: Signer) -> bytes:
        parts = key.sign(msg)
        return parts.to_bytes(recoverable=self.recoverable)

    @staticmethod
    def to_jwk(key_obj: Any, as_dict: bool = False) -> Any:
        raise NotImplementedError("JWK export is not supported for DID verification methods")

    @staticmethod
    def from_jwk(jwk: Any) -> Any:
        raise NotImplementedError("JWK import is not supported for DID verification methods")


class ES256KRecoverable(_Secp256k1Algorithm):
    """ES256K-R: r || s || v, verified by recovering the signer's address"""

    recoverable = True

    def verify(self, msg: bytes, key: Dict[str, Any], sig: bytes) -> bool:
        if len(sig) != 65:
            return False
        address = entry_address(key)
        if not address:
            return False
        digest = hashlib.sha256(msg).digest()
        r = int.from_bytes(sig[:32], "big")
        s = int.from_bytes(sig[32:64], "big")
        v = sig[64] - 27 if sig[64] >= 27 else sig[64]
        return _recover_address(digest, r, s, v) == address


class ES256KPlain(_Secp256k1Algorithm):
    """ES256K: r || s, verified against a public key or, failing that, an address"""

    def verify(self, msg: bytes, key: Dict[str, Any], sig: bytes) -> bool:
        if len(sig) != 64:
            return False
        address = entry_address(key)
        if not address:
            logger.debug(f"ES256K key entry {key.get('id')} has no usable public key or address")
            return False
        digest = hashlib.sha256(msg).digest()
        r = int.from_bytes(sig[:32], "big")
        s = int.from_bytes(sig[32:], "big")
        # No recovery id on the wire, so try both
        return any(_recover_address(digest, r, s, v) == address for v in (0, 1))
