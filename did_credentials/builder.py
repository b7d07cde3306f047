"""
Request builder for the did-credentials SDK.

Each request variant has an explicit set of recognized fields. Unrecognized
parameters are dropped before signing, and every validation happens before
the gateway is called.
"""
import logging
from typing import Dict, Any, Optional, List, Mapping, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigurationError, ValidationError
from .gateway import Gateway, ES256K, ES256K_R
from .identity import Identity
from .models import (
    AccountType, DisclosureRequestParams, DisclosureResponseParams, RequestType
)

logger = logging.getLogger(__name__)

NO_SIGNING_IDENTITY = "No Signing Identity configured"

# Default lifetime of requests and responses, in seconds
DEFAULT_REQUEST_EXPIRY = 600

TYPED_DATA_FIELDS = ("types", "primaryType", "domain", "message")


def _parse_params(model, params, kind: str):
    if params is None:
        params = {}
    if isinstance(params, model):
        return params
    if not isinstance(params, Mapping):
        raise ValidationError(f"{kind} parameters must be a mapping, got {type(params).__name__}")

    recognized = set()
    for name, info in model.model_fields.items():
        recognized.add(name)
        if info.alias:
            recognized.add(info.alias)
    ignored = sorted(k for k in params if k not in recognized)
    if ignored:
        logger.warning(f"Ignoring unsupported {kind} parameters: {', '.join(ignored)}")

    try:
        return model.model_validate(dict(params))
    except PydanticValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error.get("loc", ()))
        raise ValidationError(f"Invalid {kind} parameter '{field}': {error.get('msg')}", field=field) from e


def normalize_claims(params: DisclosureRequestParams) -> Optional[Dict[str, Dict[str, Any]]]:
    """
    Merge legacy ``requested``/``verified`` lists with modern ``claims``.

    ``requested`` names become ``user_info`` entries and ``verified`` names
    become ``verifiable`` entries, each with a null spec. Explicit ``claims``
    entries are applied afterwards and win on conflict.

    Returns:
        Normalized claims mapping, or None if nothing was requested
    """
    claims: Dict[str, Dict[str, Any]] = {}
    if params.requested:
        claims["user_info"] = {name: None for name in params.requested}
    if params.verified:
        claims["verifiable"] = {name: None for name in params.verified}
    for section, entries in (params.claims or {}).items():
        target = claims.setdefault(section, {})
        for name, spec in entries.items():
            target[name] = spec.model_dump(exclude_none=True) if spec is not None else None
    return claims or None


class RequestBuilder:
    """Builds and signs the request and response messages of the protocol"""

    def __init__(self, identity: Identity, gateway: Gateway):
        self.identity = identity
        self.gateway = gateway

    @property
    def alg(self) -> str:
        """Signing algorithm implied by the identity's DID method"""
        return ES256K if self.identity.is_legacy else ES256K_R

    def sign_jwt(self, payload: Dict[str, Any], expires_in: Optional[int] = None) -> str:
        """
        Sign an arbitrary payload as this identity.

        Raises:
            ConfigurationError: If no signer or DID is configured
        """
        if not self.identity.can_sign:
            raise ConfigurationError(NO_SIGNING_IDENTITY)
        return self.gateway.sign(
            payload,
            issuer=self.identity.did,
            signer=self.identity.signer,
            alg=self.alg,
            expires_in=expires_in,
        )

    @staticmethod
    def _expiry(
        exp: Optional[int], expires_in: Optional[int], default: Optional[int] = None
    ) -> Tuple[Optional[int], Optional[int]]:
        """
        Pick between an absolute and a relative expiry.

        An absolute ``exp`` wins; the relative value is then ignored.

        Returns:
            Tuple of (absolute exp for the payload, expires_in for the gateway)
        """
        if exp is not None:
            if expires_in is not None:
                logger.debug(f"Both exp and expires_in given, using exp={exp}")
            return exp, None
        return None, expires_in if expires_in is not None else default

    def disclosure_request(
        self,
        params: Union[Mapping[str, Any], DisclosureRequestParams, None] = None,
        expires_in: Optional[int] = None,
    ) -> str:
        """
        Create a signed selective disclosure request.

        Args:
            params: Request parameters (requested, verified, claims, notifications,
                    callbackUrl, networkId, rpcUrl, vc, exp, accountType, boxPub)
            expires_in: Lifetime in seconds when no ``exp`` is given (default 600)

        Returns:
            Signed request JWT

        Raises:
            ValidationError: For unsupported account types, an rpcUrl without
                             networkId, or malformed parameters
            ConfigurationError: If this identity cannot sign
        """
        request = _parse_params(DisclosureRequestParams, params, "disclosure request")
        payload: Dict[str, Any] = {}

        if request.requested:
            payload["requested"] = list(request.requested)
        if request.verified:
            payload["verified"] = list(request.verified)
        claims = normalize_claims(request)
        if claims:
            payload["claims"] = claims
        if request.notifications:
            payload["permissions"] = ["notifications"]
        if request.callback_url:
            payload["callback"] = request.callback_url
        if request.network_id:
            payload["net"] = request.network_id
        if request.rpc_url:
            if not request.network_id:
                raise ValidationError("rpcUrl was specified but no networkId", field="networkId")
            payload["rpc"] = request.rpc_url
        if request.vc:
            payload["vc"] = list(request.vc)
        if request.account_type:
            try:
                payload["act"] = AccountType(request.account_type).value
            except ValueError:
                raise ValidationError(
                    f"Unsupported accountType {request.account_type}", field="accountType"
                ) from None
        if request.box_pub:
            payload["boxPub"] = request.box_pub

        exp, lifetime = self._expiry(request.exp, expires_in, DEFAULT_REQUEST_EXPIRY)
        payload["exp"] = exp
        payload["type"] = RequestType.DISCLOSURE_REQUEST.value
        return self.sign_jwt(payload, lifetime)

    def disclosure_response(
        self,
        params: Union[Mapping[str, Any], DisclosureResponseParams, None] = None,
        expires_in: Optional[int] = None,
    ) -> str:
        """
        Create a signed disclosure response.

        When the response embeds the request (``req``) it answers, the
        request's issuer becomes the response audience.
        """
        response = _parse_params(DisclosureResponseParams, params, "disclosure response")
        payload = response.model_dump(by_alias=True, exclude_none=True)

        if response.req:
            _, request_payload = self.gateway.decode(response.req)
            if request_payload.get("iss"):
                payload["aud"] = request_payload["iss"]

        payload["type"] = RequestType.DISCLOSURE_RESPONSE.value
        return self.sign_jwt(payload, expires_in if expires_in is not None else DEFAULT_REQUEST_EXPIRY)

    def verification_signature_request(
        self,
        unsigned_claim: Dict[str, Any],
        sub: str,
        aud: Optional[str] = None,
        riss: Optional[str] = None,
        callback_url: Optional[str] = None,
        vc: Optional[List[str]] = None,
        rexp: Optional[int] = None,
        rexp_in: Optional[int] = None,
        expires_in: Optional[int] = None,
    ) -> str:
        """
        Ask the counterparty to countersign a claim.

        Args:
            unsigned_claim: Claim to be signed
            sub: Subject DID of the claim
            aud: Audience of the request
            riss: DID expected to sign the claim
            callback_url: Where the signed claim should be posted
            vc: Credential type hints
            rexp: Absolute expiry of the requested credential
            rexp_in: Expiry of the requested credential relative to now
                     (ignored when rexp is given)
            expires_in: Lifetime of this request token

        Returns:
            Signed request JWT
        """
        if not unsigned_claim:
            raise ValidationError("Verification signature request must include a claim", field="claim")
        if rexp is None and rexp_in is not None:
            rexp = self.gateway.now() + rexp_in
        elif rexp is not None and rexp_in is not None:
            logger.debug(f"Both rexp and rexp_in given, using rexp={rexp}")

        payload = {
            "unsignedClaim": unsigned_claim,
            "sub": sub,
            "riss": riss,
            "aud": aud,
            "vc": vc,
            "rexp": rexp,
            "callback": callback_url,
            "type": RequestType.VERIFICATION_SIGNATURE_REQUEST.value,
        }
        return self.sign_jwt(payload, expires_in)

    def verification(
        self,
        sub: str,
        claim: Dict[str, Any],
        exp: Optional[int] = None,
        vc: Optional[List[str]] = None,
        callback_url: Optional[str] = None,
        expires_in: Optional[int] = None,
    ) -> str:
        """Create a signed attestation about sub"""
        exp, lifetime = self._expiry(exp, expires_in)
        payload = {
            "sub": sub,
            "claim": claim,
            "exp": exp,
            "vc": vc,
            "callbackUrl": callback_url,
        }
        return self.sign_jwt(payload, lifetime)

    def typed_data_signature_request(
        self,
        typed_data: Dict[str, Any],
        from_: Optional[str] = None,
        net: Optional[str] = None,
        callback: Optional[str] = None,
        expires_in: Optional[int] = None,
    ) -> str:
        """
        Ask the counterparty to sign EIP-712 typed data.

        Raises:
            ValidationError: If typed_data lacks types, primaryType, domain or message
        """
        for field in TYPED_DATA_FIELDS:
            if not isinstance(typed_data, Mapping) or field not in typed_data:
                raise ValidationError(f"Invalid EIP712 Request, must include '{field}'", field=field)

        payload = {
            "typedData": dict(typed_data),
            "from": from_,
            "net": net,
            "callback": callback,
            "type": RequestType.TYPED_DATA_SIGNATURE_REQUEST.value,
        }
        return self.sign_jwt(payload, expires_in)

    def personal_sign_request(
        self,
        data: str,
        from_: Optional[str] = None,
        net: Optional[str] = None,
        callback: Optional[str] = None,
        expires_in: Optional[int] = None,
    ) -> str:
        """Ask the counterparty to sign opaque data with personal_sign"""
        if data is None:
            raise ValidationError("Personal sign request must include 'data'", field="data")
        payload = {
            "data": data,
            "from": from_,
            "net": net,
            "callback": callback,
            "type": RequestType.PERSONAL_SIGN_REQUEST.value,
        }
        return self.sign_jwt(payload, expires_in)

    def tx_request(
        self,
        tx: Mapping[str, Any],
        callback_url: Optional[str] = None,
        expires_in: Optional[int] = None,
        network_id: Optional[str] = None,
        label: Optional[str] = None,
    ) -> str:
        """
        Create a signed transaction request.

        Args:
            tx: Transaction object with at least ``to``; ``fn`` carries the
                human readable function call
            callback_url: Where the transaction hash should be posted
            expires_in: Lifetime in seconds (default 600)
            network_id: Chain id the transaction is meant for
            label: Human readable label shown to the user
        """
        if not tx.get("to"):
            raise ValidationError("Transaction request must include 'to'", field="to")
        payload = dict(tx)
        payload.update({
            "type": RequestType.ETH_TX_REQUEST.value,
            "callback": callback_url,
            "net": network_id,
            "label": label,
        })
        return self.sign_jwt(payload, expires_in if expires_in is not None else DEFAULT_REQUEST_EXPIRY)
