"""
Signing/verification gateway for the did-credentials SDK.

Every component signs and verifies tokens through a gateway. ``JWTGateway``
is the bundled implementation; anything implementing ``Gateway`` (for example
a remote signing service) can be passed to ``Credentials`` instead.
"""
from typing import Any, Dict, Optional, Protocol, Tuple

from ..signer import Signer
from .algorithms import ES256K, ES256K_R
from .jwt_gateway import JWTGateway, VerifiedJWT, verification_keys

__all__ = ['Gateway', 'JWTGateway', 'VerifiedJWT', 'verification_keys', 'ES256K', 'ES256K_R']


class Gateway(Protocol):
    """Protocol for signing/verification gateways"""

    def now(self) -> int:
        """Current time in seconds"""
        ...

    def sign(
        self,
        payload: Dict[str, Any],
        issuer: str,
        signer: Signer,
        alg: str = ES256K_R,
        expires_in: Optional[int] = None,
    ) -> str:
        """Sign payload as issuer and return the token"""
        ...

    def decode(self, token: str) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """Decode header and payload without verification"""
        ...

    def verify(self, token: str, resolver: Any, audience: Optional[str] = None) -> VerifiedJWT:
        """Verify token and return its payload and issuer"""
        ...
