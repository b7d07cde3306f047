"""
Data types for the identity module.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, TYPE_CHECKING

from ..models import NetworkEntry
from ..signer import Signer

if TYPE_CHECKING:
    from ..resolver import Resolver

logger = logging.getLogger(__name__)


@dataclass
class Identity:
    """
    Represents the DID this SDK instance acts as.

    Attributes:
        did: Decentralized Identifier string, or None for a verify-only instance
        signer: Signer implementation for this identity, if it can sign
        resolver: Resolver used to look up counterparties' DID documents
        networks: Private network entries keyed by chain id
    """
    did: Optional[str]
    signer: Optional[Signer]
    resolver: "Resolver"
    networks: Dict[str, NetworkEntry] = field(default_factory=dict)

    @property
    def can_sign(self) -> bool:
        return self.did is not None and self.signer is not None

    @property
    def is_legacy(self) -> bool:
        """True for did:uport identities, which sign without a recovery id"""
        return bool(self.did) and self.did.startswith("did:uport:")

    def add_network(self, chain_id: str, config: Dict[str, str]) -> NetworkEntry:
        """
        Register an extra network after construction.

        Raises:
            ConfigurationError: If config does not have the expected shape
        """
        from . import validate_network

        entry = validate_network(chain_id, config)
        self.networks[chain_id] = entry
        logger.info(f"Added network {chain_id} ({entry.rpc_url})")
        return entry
