"""
W3C verifiable credentials and presentations in JWT form.

Credentials carry their W3C body under ``vc`` and presentations under
``vp``, as described by the JWT encoding of the Verifiable Credentials Data
Model. Signing and verification go through the identity's gateway.
"""
import logging
from typing import Any, Dict, Mapping

from .builder import NO_SIGNING_IDENTITY, RequestBuilder
from .exceptions import ConfigurationError, ValidationError
from .gateway import Gateway, VerifiedJWT
from .identity import Identity

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT = "https://www.w3.org/2018/credentials/v1"
DEFAULT_VC_TYPE = "VerifiableCredential"
DEFAULT_VP_TYPE = "VerifiablePresentation"


def _as_list(value: Any) -> list:
    if value is None:
        return []
    return list(value) if isinstance(value, (list, tuple)) else [value]


def _validate_context(body: Mapping[str, Any], kind: str) -> None:
    context = _as_list(body.get("@context"))
    if not context or context[0] != DEFAULT_CONTEXT:
        raise ValidationError(f"{kind} @context must start with {DEFAULT_CONTEXT}", field="@context")


def _validate_timestamp(payload: Mapping[str, Any], name: str) -> None:
    value = payload.get(name)
    if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
        raise ValidationError(f"'{name}' must be a unix timestamp in seconds", field=name)


def validate_credential_payload(payload: Mapping[str, Any]) -> None:
    """
    Check the shape of a JWT credential payload.

    Raises:
        ValidationError: If ``vc`` is missing or not W3C shaped
    """
    vc = payload.get("vc")
    if not isinstance(vc, Mapping):
        raise ValidationError("Credential payload must include a 'vc' object", field="vc")
    _validate_context(vc, "Credential")
    if DEFAULT_VC_TYPE not in _as_list(vc.get("type")):
        raise ValidationError(f"Credential type must include {DEFAULT_VC_TYPE}", field="type")
    if not vc.get("credentialSubject"):
        raise ValidationError("Credential must include a credentialSubject", field="credentialSubject")
    _validate_timestamp(payload, "nbf")
    _validate_timestamp(payload, "exp")


def validate_presentation_payload(payload: Mapping[str, Any]) -> None:
    """
    Check the shape of a JWT presentation payload.

    Raises:
        ValidationError: If ``vp`` is missing or not W3C shaped
    """
    vp = payload.get("vp")
    if not isinstance(vp, Mapping):
        raise ValidationError("Presentation payload must include a 'vp' object", field="vp")
    _validate_context(vp, "Presentation")
    types = _as_list(vp.get("type"))
    if DEFAULT_VP_TYPE not in types and DEFAULT_VC_TYPE not in types:
        raise ValidationError(f"Presentation type must include {DEFAULT_VP_TYPE}", field="type")
    if not _as_list(vp.get("verifiableCredential")):
        raise ValidationError(
            "Presentation must include at least one verifiableCredential",
            field="verifiableCredential"
        )
    _validate_timestamp(payload, "nbf")
    _validate_timestamp(payload, "exp")


class VerifiableCredentialAdapter:
    """Issues and verifies JWT credentials and presentations"""

    def __init__(self, identity: Identity, gateway: Gateway, builder: RequestBuilder):
        self.identity = identity
        self.gateway = gateway
        self.builder = builder

    def issue_credential(self, payload: Dict[str, Any]) -> str:
        """
        Sign a credential as this identity.

        Raises:
            ConfigurationError: If this identity cannot sign
            ValidationError: If the payload is not a W3C credential
        """
        if not self.identity.can_sign:
            raise ConfigurationError(NO_SIGNING_IDENTITY)
        validate_credential_payload(payload)
        token = self.builder.sign_jwt(dict(payload))
        logger.debug(f"Issued credential for {payload.get('sub')}")
        return token

    def create_presentation(self, payload: Dict[str, Any]) -> str:
        """Sign a presentation as this identity"""
        if not self.identity.can_sign:
            raise ConfigurationError(NO_SIGNING_IDENTITY)
        validate_presentation_payload(payload)
        return self.builder.sign_jwt(dict(payload))

    def verify_credential(self, token: str) -> VerifiedJWT:
        """
        Verify a credential JWT and its W3C shape.

        Raises:
            JWTVerificationError: If the token does not verify
            ValidationError: If the payload is not a W3C credential
        """
        verified = self.gateway.verify(token, self.identity.resolver, audience=self.identity.did)
        validate_credential_payload(verified.payload)
        return verified

    def verify_presentation(self, token: str) -> VerifiedJWT:
        """
        Verify a presentation JWT.

        The presented credentials are returned as-is; callers verify them
        individually if needed.
        """
        verified = self.gateway.verify(token, self.identity.resolver, audience=self.identity.did)
        validate_presentation_payload(verified.payload)
        return verified
