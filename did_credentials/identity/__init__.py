"""
Identity module for the did-credentials SDK.

This module turns the heterogeneous constructor inputs of ``Credentials``
(raw key, Ethereum address, legacy MNID, explicit DID, custom signer or
resolver) into one canonical ``Identity``. Resolution is pure: it builds
capabilities but never touches the network.
"""
import logging
from typing import Optional, Dict, Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ConfigurationError
from ..models import NetworkEntry
from ..signer import Signer, SimpleSigner
from .crypto import (
    is_eth_address, is_mnid, decode_mnid, generate_keypair
)
from .types import Identity

__all__ = [
    'resolve_identity',
    'create_identity',
    'normalize_did',
    'validate_network',
    'is_mnid',
    'decode_mnid',
    'Identity',
]

logger = logging.getLogger(__name__)

ETHR_METHOD_PREFIX = "did:ethr:"
LEGACY_METHOD_PREFIX = "did:uport:"


def normalize_did(value: str) -> str:
    """
    Turn a DID or bare identifier into a full DID string.

    Args:
        value: ``did:...`` string, bare MNID or bare 0x address

    Returns:
        DID string

    Raises:
        ConfigurationError: If the value cannot be interpreted as an identifier
    """
    if value.startswith("did:"):
        if len(value.split(":", 2)) < 3 or not value.split(":", 2)[2]:
            raise ConfigurationError(f"Malformed DID: {value}")
        return value
    if is_eth_address(value):
        return ETHR_METHOD_PREFIX + value
    if is_mnid(value):
        return LEGACY_METHOD_PREFIX + value
    raise ConfigurationError(f"Unsupported identifier: {value}")


def validate_network(chain_id: str, config: Any) -> NetworkEntry:
    """
    Validate the shape of one ``networks`` entry.

    Raises:
        ConfigurationError: If the entry lacks a string rpcUrl or registryAddress
    """
    if isinstance(config, NetworkEntry):
        return config
    if not isinstance(config, Mapping):
        raise ConfigurationError(f"Network {chain_id} must be a mapping, got {type(config).__name__}")
    try:
        return NetworkEntry.model_validate(dict(config))
    except PydanticValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        raise ConfigurationError(f"Invalid configuration for network {chain_id}: {fields}") from e


def _did_from_address(address: str) -> str:
    if is_mnid(address):
        return LEGACY_METHOD_PREFIX + address
    if is_eth_address(address):
        return ETHR_METHOD_PREFIX + address
    raise ConfigurationError(f"Address is neither an Ethereum address nor an MNID: {address}")


def resolve_identity(
    did: Optional[str] = None,
    address: Optional[str] = None,
    private_key: Optional[str] = None,
    signer: Optional[Signer] = None,
    resolver=None,
    networks: Optional[Dict[str, Any]] = None,
) -> Identity:
    """
    Derive the canonical identity from constructor input.

    Args:
        did: Explicit DID (or bare MNID / address)
        address: Ethereum address or legacy MNID
        private_key: Hex private key, used for signing and to derive the DID
        signer: Custom signer; takes precedence over private_key for signing
        resolver: Custom resolver; defaults to ethr + web methods
        networks: Extra networks keyed by chain id

    Returns:
        Identity object

    Raises:
        ConfigurationError: If the inputs contradict each other or are malformed
    """
    if did and address:
        raise ConfigurationError("Configure either did or address, not both")

    validated_networks = {
        chain_id: validate_network(chain_id, config)
        for chain_id, config in (networks or {}).items()
    }

    key_address = None
    if private_key:
        try:
            key_signer = SimpleSigner(private_key)
        except ValueError as e:
            raise ConfigurationError(f"Invalid private key: {e}") from e
        key_address = key_signer.address
        if signer is None:
            signer = key_signer

    resolved_did = None
    if did:
        resolved_did = normalize_did(did)
    elif address:
        if key_address and is_eth_address(address) and address.lower() != key_address:
            raise ConfigurationError(
                f"Address {address} does not match the configured private key"
            )
        resolved_did = _did_from_address(address)
    elif key_address:
        resolved_did = ETHR_METHOD_PREFIX + key_address

    if resolver is None:
        from ..resolver import default_resolver
        resolver = default_resolver(validated_networks)

    if resolved_did:
        logger.debug(f"Resolved identity {resolved_did[:16]}… (signer: {signer is not None})")
    return Identity(
        did=resolved_did,
        signer=signer,
        resolver=resolver,
        networks=validated_networks,
    )


def create_identity() -> Dict[str, str]:
    """
    Create a new identity without any network interaction.

    Returns:
        Dictionary with ``did`` (did:ethr) and ``privateKey`` (64 hex chars)
    """
    private_key, address = generate_keypair()
    did = ETHR_METHOD_PREFIX + address
    logger.debug(f"Created new DID {did[:16]}…")
    return {"did": did, "privateKey": private_key}
