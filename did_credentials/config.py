"""
Network configuration for the did-credentials SDK.

Bundled networks live in ``networks.json`` and are keyed by name; every
entry also carries its chain id so DIDs such as ``did:ethr:0x5:0x...`` can be
resolved by either.
"""
import json
import logging
import os
from importlib import resources
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_RESOLVER_TIMEOUT = 10


class NetworkConfig:
    """Access to the bundled DID registry network settings"""

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """
        Load network definitions, caching them after the first read.

        Returns:
            Mapping of network name to its configuration
        """
        if cls._networks_cache is None:
            path = resources.files("did_credentials").joinpath("networks.json")
            cls._networks_cache = json.loads(path.read_text(encoding="utf-8"))
            logger.debug(f"Loaded {len(cls._networks_cache)} bundled networks")
        return cls._networks_cache

    @classmethod
    def get_network(cls, network: str) -> Dict[str, Any]:
        """
        Get a network configuration by name or chain id.

        Raises:
            ValueError: If the network is unknown
        """
        networks = cls.load_networks()
        if network in networks:
            return networks[network]
        for config in networks.values():
            if str(config.get("chainId", "")).lower() == network.lower():
                return config
        raise ValueError(
            f"Network '{network}' not found. Available networks: {', '.join(networks.keys())}"
        )

    @classmethod
    def get_rpc_url(cls, network: str, override: Optional[str] = None) -> str:
        """
        Get the RPC URL of a network.

        Precedence: explicit override, then ``<NETWORK>_RPC_URL`` from the
        environment, then the bundled value.
        """
        if override:
            return override
        env_var = f"{network.upper().replace('-', '_')}_RPC_URL"
        env_value = os.environ.get(env_var)
        if env_value:
            return env_value
        return cls.get_network(network)["rpc"]

    @classmethod
    def get_chain_id(cls, network: str) -> str:
        return cls.get_network(network)["chainId"]

    @classmethod
    def get_did_registry_address(cls, network: str) -> str:
        return cls.get_network(network)["didRegistry"]

    @classmethod
    def registry_networks(cls) -> Dict[str, Dict[str, str]]:
        """
        Bundled networks in the shape accepted by ``Credentials(networks=...)``.

        Returns:
            Mapping of chain id to ``{"rpcUrl", "registryAddress", "name"}``
        """
        result = {}
        for name, config in cls.load_networks().items():
            result[config["chainId"]] = {
                "rpcUrl": cls.get_rpc_url(name),
                "registryAddress": config["didRegistry"],
                "name": name,
            }
        return result


def get_resolver_timeout() -> float:
    """HTTP timeout in seconds for DID resolution (``DID_CREDENTIALS_RESOLVER_TIMEOUT``)"""
    value = os.environ.get("DID_CREDENTIALS_RESOLVER_TIMEOUT")
    if not value:
        return DEFAULT_RESOLVER_TIMEOUT
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Invalid DID_CREDENTIALS_RESOLVER_TIMEOUT: {value}, using {DEFAULT_RESOLVER_TIMEOUT}")
        return DEFAULT_RESOLVER_TIMEOUT
