"""
Local signer backed by a raw secp256k1 private key.
"""
import hashlib

from eth_keys import keys

from .ec_constants import SECP256K1_MIN, SECP256K1_MAX
from . import SignatureParts


class SimpleSigner:
    """Signs JWT input with an in-memory private key"""

    def __init__(self, private_key: str):
        """
        Initialize the signer.

        Args:
            private_key: 32-byte private key as hex, with or without 0x prefix

        Raises:
            ValueError: If the key is not valid hex or outside the curve range
        """
        key_hex = private_key[2:] if private_key.startswith("0x") else private_key
        try:
            key_bytes = bytes.fromhex(key_hex)
        except ValueError as e:
            raise ValueError(f"Private key must be hex encoded: {e}") from e
        if len(key_bytes) != 32:
            raise ValueError(f"Private key must be 32 bytes, got {len(key_bytes)}")

        key_int = int.from_bytes(key_bytes, "big")
        if not SECP256K1_MIN <= key_int <= SECP256K1_MAX:
            raise ValueError("Private key is outside the valid SECP256K1 range")

        self._key = keys.PrivateKey(key_bytes)

    @property
    def address(self) -> str:
        """Lowercase Ethereum address of the key"""
        return self._key.public_key.to_address().lower()

    @property
    def public_key_hex(self) -> str:
        """Uncompressed public key as hex with the 04 prefix"""
        return "04" + self._key.public_key.to_bytes().hex()

    def sign(self, data: bytes) -> SignatureParts:
        digest = hashlib.sha256(data).digest()
        signature = self._key.sign_msg_hash(digest)
        return SignatureParts(r=signature.r, s=signature.s, recovery_param=signature.v)

    def __repr__(self) -> str:
        return f"SimpleSigner(address={self.address})"
