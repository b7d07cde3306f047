"""
Resolver for the ``did:ethr`` method.

The controlling key of ``did:ethr:[network:]<address>`` is the owner
recorded in the ERC-1056 DID registry, which defaults to the address itself.
"""
import logging
import threading
from typing import Any, Dict, Optional

from web3 import Web3

from ..config import NetworkConfig, get_resolver_timeout
from ..exceptions import ResolutionError
from ..identity.crypto import is_eth_address
from ..models import NetworkEntry

logger = logging.getLogger(__name__)

DEFAULT_NETWORK = "mainnet"

# Minimal ABI for the ERC-1056 EthereumDIDRegistry
DID_REGISTRY_ABI = [
    {
        "constant": True,
        "inputs": [{"internalType": "address", "name": "identity", "type": "address"}],
        "name": "identityOwner",
        "outputs": [{"internalType": "address", "name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function"
    }
]


def build_ethr_document(did: str, owner: str) -> Dict[str, Any]:
    """
    Build the DID document of a did:ethr identity controlled by owner.

    Args:
        did: The DID (without fragment)
        owner: Ethereum address of the controlling key

    Returns:
        DID document dictionary
    """
    key_id = f"{did}#owner"
    return {
        "@context": "https://w3id.org/did/v1",
        "id": did,
        "publicKey": [
            {
                "id": key_id,
                "type": "Secp256k1VerificationKey2018",
                "owner": did,
                "ethereumAddress": owner.lower(),
            }
        ],
        "authentication": [
            {
                "type": "Secp256k1SignatureAuthentication2018",
                "publicKey": key_id,
            }
        ],
    }


class EthrResolver:
    """Resolves did:ethr DIDs against the DID registry of their network"""

    def __init__(self, networks: Dict[str, NetworkEntry], timeout: Optional[float] = None):
        """
        Initialize the resolver.

        Args:
            networks: Private networks keyed by chain id, consulted before the bundled ones
            timeout: RPC timeout in seconds
        """
        self.networks = networks
        self.timeout = timeout if timeout is not None else get_resolver_timeout()
        self._contracts: Dict[str, Any] = {}
        self._lock = threading.RLock()

    def _network(self, network: str) -> NetworkEntry:
        if network in self.networks:
            return self.networks[network]
        for chain_id, entry in self.networks.items():
            if entry.name == network or chain_id.lower() == network.lower():
                return entry
        try:
            bundled = NetworkConfig.get_network(network)
        except ValueError as e:
            raise ResolutionError(f"No registry configured for network '{network}'") from e
        name = next(n for n, cfg in NetworkConfig.load_networks().items() if cfg is bundled)
        return NetworkEntry.model_validate({
            "rpcUrl": NetworkConfig.get_rpc_url(name),
            "registryAddress": bundled["didRegistry"],
            "name": name,
        })

    def _registry(self, network: str):
        with self._lock:
            entry = self._network(network)
            cache_key = f"{entry.rpc_url}|{entry.registry_address}"
            if cache_key not in self._contracts:
                w3 = Web3(Web3.HTTPProvider(entry.rpc_url, request_kwargs={"timeout": self.timeout}))
                self._contracts[cache_key] = w3.eth.contract(
                    address=Web3.to_checksum_address(entry.registry_address),
                    abi=DID_REGISTRY_ABI
                )
            return self._contracts[cache_key]

    def identity_owner(self, network: str, address: str) -> str:
        """
        Look up the current owner of an identity.

        Raises:
            ResolutionError: If the registry call fails
        """
        registry = self._registry(network)
        try:
            owner = registry.functions.identityOwner(Web3.to_checksum_address(address)).call()
        except Exception as e:
            logger.error(f"DID registry lookup failed on {network}: {e}")
            raise ResolutionError(f"DID registry lookup failed for {address}: {e}") from e
        return owner

    def resolve(self, did: str) -> Dict[str, Any]:
        """
        Resolve a did:ethr DID.

        Raises:
            ResolutionError: If the DID is malformed or the registry is unreachable
        """
        parts = did.split(":")
        if len(parts) not in (3, 4) or parts[1] != "ethr":
            raise ResolutionError(f"Not a did:ethr DID: {did}", did=did)
        address = parts[-1]
        network = parts[2] if len(parts) == 4 else DEFAULT_NETWORK
        if not is_eth_address(address):
            raise ResolutionError(f"Invalid Ethereum address in DID: {did}", did=did)

        owner = self.identity_owner(network, address)
        return build_ethr_document(did, owner)
