"""
Signer interfaces for the did-credentials SDK.

A signer turns the JWT signing input into a secp256k1 signature. Any object
with a compatible ``sign`` method can be passed to ``Credentials``, so remote
signers (HSMs, wallets) work the same way as the bundled ``SimpleSigner``.
"""
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

__all__ = ['Signer', 'SignatureParts', 'SimpleSigner']


@dataclass(frozen=True)
class SignatureParts:
    """
    Raw secp256k1 signature.

    Attributes:
        r: Signature r value
        s: Signature s value
        recovery_param: Public key recovery id (0 or 1), if known
    """
    r: int
    s: int
    recovery_param: Optional[int] = None

    def to_bytes(self, recoverable: bool = False) -> bytes:
        """
        Serialize as r || s, or r || s || v for recoverable signatures.

        Raises:
            ValueError: If a recoverable encoding is requested without a recovery id
        """
        raw = self.r.to_bytes(32, "big") + self.s.to_bytes(32, "big")
        if not recoverable:
            return raw
        if self.recovery_param is None:
            raise ValueError("Recoverable signature requires a recovery_param")
        return raw + bytes([self.recovery_param])


@runtime_checkable
class Signer(Protocol):
    """Protocol for custom signers"""

    def sign(self, data: bytes) -> SignatureParts:
        """Sign the SHA-256 digest of data and return the signature parts"""
        ...


from .local import SimpleSigner  # noqa: E402
