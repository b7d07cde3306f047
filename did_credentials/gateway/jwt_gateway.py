"""
JWT signing and verification for DID-based issuers.

Tokens are regular three-part JWTs. The issuer (``iss``) is a DID whose
document is resolved to find the keys the signature may verify against.
"""
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import jwt

from ..exceptions import AudienceMismatchError, JWTVerificationError
from ..signer import Signer
from .algorithms import ES256K, ES256K_R, ES256KPlain, ES256KRecoverable

logger = logging.getLogger(__name__)

# Tolerated clock drift between issuer and verifier, in seconds
NBF_SKEW = 300

SUPPORTED_ALGORITHMS = (ES256K_R, ES256K)


@dataclass
class VerifiedJWT:
    """
    A JWT whose signature, timestamps and audience have been checked.

    Attributes:
        payload: Decoded JWT payload
        issuer: DID of the issuer
        header: Decoded JWT header
        doc: Resolved DID document of the issuer
        signer: Verification method entry that matched the signature
        jwt: The original token
    """
    payload: Dict[str, Any]
    issuer: str
    header: Dict[str, Any] = field(default_factory=dict)
    doc: Dict[str, Any] = field(default_factory=dict)
    signer: Dict[str, Any] = field(default_factory=dict)
    jwt: str = ""


def verification_keys(doc: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Collect candidate verification method entries from a DID document"""
    entries = []
    seen = set()
    for section in ("publicKey", "verificationMethod"):
        for entry in doc.get(section) or []:
            if not isinstance(entry, dict):
                continue
            key_id = entry.get("id") or json.dumps(entry, sort_keys=True)
            if key_id in seen:
                continue
            if any(entry.get(k) for k in ("ethereumAddress", "blockchainAccountId", "publicKeyHex")):
                seen.add(key_id)
                entries.append(entry)
    return entries


class JWTGateway:
    """Signs payloads as DID-JWTs and verifies incoming DID-JWTs"""

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        """
        Initialize the gateway.

        Args:
            clock: Returns the current time in seconds; defaults to time.time
        """
        self.clock = clock or time.time
        self._jws = jwt.PyJWS(algorithms=[])
        self._jws.register_algorithm(ES256K_R, ES256KRecoverable())
        self._jws.register_algorithm(ES256K, ES256KPlain())

    def now(self) -> int:
        return int(self.clock())

    def sign(
        self,
        payload: Dict[str, Any],
        issuer: str,
        signer: Signer,
        alg: str = ES256K_R,
        expires_in: Optional[int] = None,
    ) -> str:
        """
        Create a signed JWT.

        ``iat`` is set from the clock; ``exp`` is ``iat + expires_in`` unless
        the payload carries its own ``exp``. Keys whose value is None are
        left out.

        Args:
            payload: Claims to sign
            issuer: DID placed in ``iss``
            signer: Signer for the issuer's key
            alg: ES256K-R or ES256K
            expires_in: Lifetime in seconds

        Returns:
            Compact JWT string
        """
        if alg not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"Unsupported algorithm {alg}")

        iat = self.now()
        full_payload: Dict[str, Any] = {"iat": iat}
        if expires_in is not None:
            full_payload["exp"] = iat + expires_in
        full_payload.update({k: v for k, v in payload.items() if v is not None})
        full_payload["iss"] = issuer

        encoded = json.dumps(full_payload, separators=(",", ":")).encode("utf-8")
        token = self._jws.encode(encoded, key=signer, algorithm=alg)
        logger.debug(f"Signed {alg} JWT for {issuer[:16]}… (type: {payload.get('type')})")
        return token

    def decode(self, token: str) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """
        Decode a JWT without verifying it.

        Returns:
            Tuple of (header, payload)

        Raises:
            JWTVerificationError: If the token is not a well-formed JWT
        """
        if not isinstance(token, str) or not token:
            raise JWTVerificationError("Incorrect format JWT")
        try:
            header = jwt.get_unverified_header(token)
            payload = jwt.decode(token, options={"verify_signature": False})
        except jwt.PyJWTError as e:
            raise JWTVerificationError(f"Incorrect format JWT: {e}") from e
        return header, payload

    def verify(self, token: str, resolver, audience: Optional[str] = None) -> VerifiedJWT:
        """
        Verify a JWT issued by a DID.

        Args:
            token: Compact JWT string
            resolver: Resolver (or plain callable) used to fetch the issuer's DID document
            audience: DID expected in ``aud``; required when the token has one

        Returns:
            VerifiedJWT with the decoded payload and issuer

        Raises:
            JWTVerificationError: On malformed tokens, bad signatures or expiry
            AudienceMismatchError: If ``aud`` does not include audience
            ResolutionError: If the issuer's DID document cannot be resolved
        """
        header, payload = self.decode(token)

        alg = header.get("alg")
        if alg not in SUPPORTED_ALGORITHMS:
            raise JWTVerificationError(f"Unsupported algorithm {alg}")

        issuer = payload.get("iss")
        if not issuer:
            raise JWTVerificationError("JWT iss is required")

        resolve = getattr(resolver, "resolve", resolver)
        doc = resolve(issuer)
        candidates = verification_keys(doc)
        if not candidates:
            raise JWTVerificationError(f"No public keys found in DID document for {issuer}")

        matched = None
        for entry in candidates:
            try:
                self._jws.decode_complete(token, key=entry, algorithms=[alg])
            except jwt.InvalidSignatureError:
                continue
            except jwt.PyJWTError as e:
                raise JWTVerificationError(f"Invalid JWT: {e}") from e
            matched = entry
            break
        if matched is None:
            raise JWTVerificationError("Signature invalid for JWT")

        self._check_timestamps(payload)
        self._check_audience(payload, audience)

        logger.debug(f"Verified {alg} JWT from {issuer[:16]}…")
        return VerifiedJWT(
            payload=payload,
            issuer=issuer,
            header=header,
            doc=doc,
            signer=matched,
            jwt=token,
        )

    def _check_timestamps(self, payload: Dict[str, Any]) -> None:
        now = self.now()
        nbf = payload.get("nbf")
        iat = payload.get("iat")
        exp = payload.get("exp")
        if nbf is not None:
            if nbf > now + NBF_SKEW:
                raise JWTVerificationError(f"JWT not valid before nbf: {nbf}")
        elif iat is not None and iat > now + NBF_SKEW:
            raise JWTVerificationError(f"JWT not valid yet (issued in the future) iat: {iat}")
        if exp is not None and exp <= now - NBF_SKEW:
            raise JWTVerificationError(f"JWT has expired: exp: {exp} < now: {now}")

    @staticmethod
    def _check_audience(payload: Dict[str, Any], audience: Optional[str]) -> None:
        aud = payload.get("aud")
        if aud is None:
            return
        if not audience:
            raise JWTVerificationError(
                "JWT audience is required but your app address has not been configured"
            )
        allowed = aud if isinstance(aud, list) else [aud]
        if audience not in allowed:
            raise AudienceMismatchError(aud, audience)
