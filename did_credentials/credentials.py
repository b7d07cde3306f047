"""
Credentials - Main entry point of the did-credentials SDK.
"""
import logging
import time
from typing import Dict, Any, Optional, List, Callable, Mapping, Union

from .builder import RequestBuilder
from .contract import Contract
from .gateway import Gateway, JWTGateway, VerifiedJWT
from .identity import Identity, create_identity, resolve_identity
from .models import DisclosureRequestParams, DisclosureResponseParams, NetworkEntry, Profile
from .signer import Signer
from .vc import VerifiableCredentialAdapter
from .verifier import ResponseVerifier


class Credentials:
    """
    Issues and verifies identity disclosures and credentials for one DID.

    This class handles:
    1. Building signed requests (disclosure, verification signature,
       typed data signature, personal sign and transaction requests)
    2. Verifying disclosure responses and the credentials they carry
    3. Issuing and verifying W3C verifiable credentials

    Configure it with a private key, a DID or address, or a custom signer.
    An instance without a signer can still verify.
    """

    def __init__(
        self,
        did: Optional[str] = None,
        address: Optional[str] = None,
        private_key: Optional[str] = None,
        signer: Optional[Signer] = None,
        resolver=None,
        networks: Optional[Dict[str, Mapping[str, str]]] = None,
        clock: Optional[Callable[[], float]] = None,
        gateway: Optional[Gateway] = None,
        max_workers: Optional[int] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize Credentials

        Args:
            did: DID of this identity (a bare MNID or address is also accepted)
            address: Ethereum address or legacy MNID, used when no did is given
            private_key: Hex secp256k1 private key used for signing
            signer: Custom signer (takes precedence over private_key)
            resolver: Custom DID resolver (defaults to ethr + web)
            networks: Private networks keyed by chain id, each with rpcUrl and registryAddress
            clock: Returns the current time in seconds (defaults to time.time)
            gateway: Custom signing/verification gateway
            max_workers: Thread pool size for verifying embedded credentials
            logger: Optional logger instance to use for debug/info logging

        Raises:
            ConfigurationError: If the configuration is contradictory or malformed
        """
        self.logger = logger or logging.getLogger(__name__)
        self.identity: Identity = resolve_identity(
            did=did,
            address=address,
            private_key=private_key,
            signer=signer,
            resolver=resolver,
            networks=networks,
        )
        self.clock = clock or time.time
        self.gateway = gateway or JWTGateway(clock=self.clock)
        self.builder = RequestBuilder(self.identity, self.gateway)
        self.verifier = ResponseVerifier(self.identity, self.gateway, max_workers=max_workers)
        self.vc = VerifiableCredentialAdapter(self.identity, self.gateway, self.builder)

        self.logger.info(
            f"Credentials configured for {self.identity.did or 'no DID'} "
            f"(signing: {self.identity.can_sign}, networks: {len(self.identity.networks)})"
        )

    @staticmethod
    def create_identity() -> Dict[str, str]:
        """
        Generate a new identity.

        Returns:
            Dictionary with ``did`` and ``privateKey``
        """
        return create_identity()

    @property
    def did(self) -> Optional[str]:
        return self.identity.did

    @property
    def signer(self) -> Optional[Signer]:
        return self.identity.signer

    @property
    def resolver(self):
        return self.identity.resolver

    @property
    def networks(self) -> Dict[str, NetworkEntry]:
        return self.identity.networks

    def add_network(self, chain_id: str, config: Mapping[str, str]) -> NetworkEntry:
        """Register a private network after construction"""
        return self.identity.add_network(chain_id, config)

    def sign_jwt(self, payload: Dict[str, Any], expires_in: Optional[int] = None) -> str:
        """
        Sign an arbitrary payload as this identity.

        Raises:
            ConfigurationError: If no signer or DID is configured
        """
        return self.builder.sign_jwt(payload, expires_in)

    def create_disclosure_request(
        self,
        params: Union[Mapping[str, Any], DisclosureRequestParams, None] = None,
        expires_in: Optional[int] = None
    ) -> str:
        """
        Create a selective disclosure request.

        Args:
            params: requested, verified, claims, notifications, callbackUrl,
                    networkId, rpcUrl, vc, exp, accountType, boxPub
            expires_in: Lifetime in seconds when no exp is given (default 600)

        Returns:
            Signed request JWT
        """
        return self.builder.disclosure_request(params, expires_in)

    def create_disclosure_response(
        self,
        params: Union[Mapping[str, Any], DisclosureResponseParams, None] = None,
        expires_in: Optional[int] = None
    ) -> str:
        """Create a disclosure response (own, req, verified, nad, capabilities, boxPub)"""
        return self.builder.disclosure_response(params, expires_in)

    def create_verification(
        self,
        sub: str,
        claim: Dict[str, Any],
        exp: Optional[int] = None,
        vc: Optional[List[str]] = None,
        callback_url: Optional[str] = None
    ) -> str:
        """Create a signed attestation of claim about sub"""
        return self.builder.verification(sub, claim, exp=exp, vc=vc, callback_url=callback_url)

    def create_verification_signature_request(
        self,
        unsigned_claim: Dict[str, Any],
        sub: str,
        aud: Optional[str] = None,
        riss: Optional[str] = None,
        callback_url: Optional[str] = None,
        vc: Optional[List[str]] = None,
        rexp: Optional[int] = None,
        rexp_in: Optional[int] = None,
        expires_in: Optional[int] = None
    ) -> str:
        """Ask the counterparty to countersign unsigned_claim"""
        return self.builder.verification_signature_request(
            unsigned_claim,
            sub,
            aud=aud,
            riss=riss,
            callback_url=callback_url,
            vc=vc,
            rexp=rexp,
            rexp_in=rexp_in,
            expires_in=expires_in,
        )

    def create_typed_data_signature_request(
        self,
        typed_data: Dict[str, Any],
        from_: Optional[str] = None,
        net: Optional[str] = None,
        callback: Optional[str] = None
    ) -> str:
        """Ask the counterparty to sign EIP-712 typed data"""
        return self.builder.typed_data_signature_request(typed_data, from_=from_, net=net, callback=callback)

    def create_personal_sign_request(
        self,
        data: str,
        from_: Optional[str] = None,
        net: Optional[str] = None,
        callback: Optional[str] = None
    ) -> str:
        """Ask the counterparty to sign data with personal_sign"""
        return self.builder.personal_sign_request(data, from_=from_, net=net, callback=callback)

    def tx_request(
        self,
        tx: Mapping[str, Any],
        callback_url: Optional[str] = None,
        expires_in: Optional[int] = None,
        network_id: Optional[str] = None,
        label: Optional[str] = None
    ) -> str:
        """Create a transaction request for tx"""
        return self.builder.tx_request(
            tx, callback_url=callback_url, expires_in=expires_in, network_id=network_id, label=label
        )

    def contract(self, abi: List[Dict[str, Any]]) -> Contract:
        """
        Wrap a contract ABI so its functions produce transaction requests.

        Example:
            ``credentials.contract(abi).at(address).updateStatus("hello")``
        """
        return Contract(abi, self.builder.tx_request)

    def authenticate_disclosure_response(self, token: str) -> Profile:
        """
        Verify a response to one of this identity's disclosure requests.

        Raises:
            CorrelationError: If the challenge is missing, not ours, or not a disclosure request
        """
        return self.verifier.verify(token, require_challenge=True)

    def verify_disclosure(self, token: str) -> Profile:
        """Verify an unsolicited disclosure response"""
        return self.verifier.verify(token, require_challenge=False)

    def issue_verifiable_credential(self, payload: Dict[str, Any]) -> str:
        """Issue a W3C verifiable credential JWT"""
        return self.vc.issue_credential(payload)

    def create_presentation(self, payload: Dict[str, Any]) -> str:
        """Sign a W3C verifiable presentation JWT"""
        return self.vc.create_presentation(payload)

    def verify_credential(self, token: str) -> VerifiedJWT:
        """Verify a W3C verifiable credential JWT"""
        return self.vc.verify_credential(token)

    def verify_presentation(self, token: str) -> VerifiedJWT:
        """
        Verify a W3C verifiable presentation JWT.

        Returns:
            VerifiedJWT with the payload and issuer DID
        """
        return self.vc.verify_presentation(token)
