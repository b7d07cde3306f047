"""
Disclosure response verification.

Verifies a response token, correlates it with the challenge it embeds and
normalizes the disclosed data into a ``Profile``.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from .aggregator import aggregate
from .exceptions import AudienceMismatchError, CorrelationError, JWTVerificationError
from .gateway import Gateway, VerifiedJWT
from .identity import Identity
from .models import DisclosureResponseParams, Profile, RequestType

logger = logging.getLogger(__name__)

# Profile keys set by the verifier; self-asserted claims cannot override them
RESERVED_PROFILE_KEYS = frozenset({
    "did", "verified", "invalid", "pushToken", "push_token", "nad", "boxPub", "box_pub",
})


class ResponseVerifier:
    """Verifies disclosure responses addressed to an identity"""

    def __init__(self, identity: Identity, gateway: Gateway, max_workers: Optional[int] = None):
        self.identity = identity
        self.gateway = gateway
        self.max_workers = max_workers

    def verify(self, token: str, require_challenge: bool = True) -> Profile:
        """
        Verify a disclosure response and build the profile it discloses.

        Args:
            token: Response JWT
            require_challenge: Fail if the response does not embed its request

        Returns:
            Profile

        Raises:
            CorrelationError: If the challenge is missing, addressed elsewhere
                              or of the wrong type
            JWTVerificationError: If the response itself does not verify
        """
        response = self.gateway.verify(token, self.identity.resolver, audience=self.identity.did)
        payload = response.payload

        challenge = payload.get("req")
        if challenge:
            self._check_challenge(challenge)
        elif require_challenge:
            raise CorrelationError("Challenge was not included in response")

        return self._build_profile(response)

    def _check_challenge(self, challenge: str) -> None:
        request = self.gateway.verify(challenge, self.identity.resolver, audience=self.identity.did)
        if request.issuer != self.identity.did:
            raise AudienceMismatchError(request.issuer, self.identity.did)
        request_type = request.payload.get("type")
        if request_type != RequestType.DISCLOSURE_REQUEST.value:
            raise CorrelationError(f"Challenge payload type invalid: {request_type}")

    def verify_credential(self, token: str) -> Dict[str, Any]:
        """Verify one embedded credential and return its payload"""
        return self.gateway.verify(token, self.identity.resolver, audience=self.identity.did).payload

    def _build_profile(self, response: VerifiedJWT) -> Profile:
        payload = dict(response.payload)
        tokens = _credential_tokens(payload.pop("verified")) if "verified" in payload else None
        try:
            fields = DisclosureResponseParams.model_validate(payload)
        except PydanticValidationError as e:
            raise JWTVerificationError(f"Invalid disclosure response payload: {e}") from e

        profile: Dict[str, Any] = {}
        _merge_claims(profile, _published_profile(response.doc), "published")
        _merge_claims(profile, fields.own or {}, "self-asserted")

        profile["did"] = response.issuer
        if fields.box_pub:
            profile["boxPub"] = fields.box_pub
        # Only a lone capability is a push token
        if fields.capabilities and len(fields.capabilities) == 1:
            profile["pushToken"] = fields.capabilities[0]
        if fields.nad:
            profile["nad"] = fields.nad

        if tokens is not None:
            partition = aggregate(tokens, self.verify_credential, max_workers=self.max_workers)
            profile["verified"] = partition.verified
            profile["invalid"] = partition.invalid

        logger.debug(f"Built profile for {response.issuer[:16]}… with {len(profile)} fields")
        return Profile.model_validate(profile)


def _credential_tokens(value: Any) -> List[Any]:
    """Normalize the ``verified`` entry of a response to a list of tokens"""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return value
    raise JWTVerificationError(
        f"Invalid disclosure response payload: verified must be a list, got {type(value).__name__}"
    )


def _published_profile(doc: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    """Profile published in the issuer's DID document, if any"""
    published = (doc or {}).get("uportProfile") or {}
    if not isinstance(published, Mapping):
        logger.warning("Ignoring uportProfile in DID document: not an object")
        return {}
    return published


def _merge_claims(profile: Dict[str, Any], claims: Mapping[str, Any], source: str) -> None:
    for key, value in claims.items():
        if key in RESERVED_PROFILE_KEYS:
            logger.warning(f"Ignoring {source} claim '{key}' that collides with a profile field")
            continue
        profile[key] = value
