"""
Tests for the NetworkConfig module.
"""
import pytest
import os
from unittest.mock import patch

from did_credentials.config import NetworkConfig, get_resolver_timeout, DEFAULT_RESOLVER_TIMEOUT

# Sample network configuration
MOCK_NETWORKS = {
    "test-network": {
        "chainId": "0x7b",
        "rpc": "https://test.example.com",
        "didRegistry": "0x0987654321098765432109876543210987654321"
    }
}


class TestNetworkConfig:
    """Test NetworkConfig class."""

    def test_load_bundled_networks(self):
        """The packaged networks.json is readable"""
        networks = NetworkConfig.load_networks()
        assert {"mainnet", "sepolia"} <= set(networks)
        assert networks["mainnet"]["chainId"] == "0x1"

    def test_load_networks_cached(self):
        """Test that networks are cached after first load."""
        NetworkConfig._networks_cache = MOCK_NETWORKS

        with patch("importlib.resources.files") as mock_files:
            result = NetworkConfig.load_networks()
            mock_files.assert_not_called()

        assert result == MOCK_NETWORKS

    def test_get_network(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        result = NetworkConfig.get_network("test-network")
        assert result == MOCK_NETWORKS["test-network"]

    def test_get_network_by_chain_id(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        assert NetworkConfig.get_network("0x7B") is MOCK_NETWORKS["test-network"]

    def test_get_network_not_found(self):
        """Test getting a non-existent network."""
        NetworkConfig._networks_cache = MOCK_NETWORKS

        with pytest.raises(ValueError) as exc_info:
            NetworkConfig.get_network("non-existent-network")

        # Verify error message includes available networks
        assert "test-network" in str(exc_info.value)

    def test_get_rpc_url_default(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        with patch.dict(os.environ, {}, clear=True):
            assert NetworkConfig.get_rpc_url("test-network") == "https://test.example.com"

    def test_get_rpc_url_override(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        result = NetworkConfig.get_rpc_url("test-network", override="https://override.example.com")
        assert result == "https://override.example.com"

    def test_get_rpc_url_env_var(self):
        """Test RPC URL from environment variable."""
        NetworkConfig._networks_cache = MOCK_NETWORKS

        with patch.dict(os.environ, {"TEST_NETWORK_RPC_URL": "https://env.example.com"}):
            result = NetworkConfig.get_rpc_url("test-network")
            assert result == "https://env.example.com"

    def test_get_chain_id(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        assert NetworkConfig.get_chain_id("test-network") == "0x7b"

    def test_get_did_registry_address(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        result = NetworkConfig.get_did_registry_address("test-network")
        assert result == "0x0987654321098765432109876543210987654321"

    def test_registry_networks(self):
        """Bundled networks in the constructor's networks shape"""
        NetworkConfig._networks_cache = MOCK_NETWORKS
        with patch.dict(os.environ, {}, clear=True):
            assert NetworkConfig.registry_networks() == {
                "0x7b": {
                    "rpcUrl": "https://test.example.com",
                    "registryAddress": "0x0987654321098765432109876543210987654321",
                    "name": "test-network",
                }
            }


class TestResolverTimeout:

    def test_default(self, monkeypatch):
        monkeypatch.delenv("DID_CREDENTIALS_RESOLVER_TIMEOUT", raising=False)
        assert get_resolver_timeout() == DEFAULT_RESOLVER_TIMEOUT

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("DID_CREDENTIALS_RESOLVER_TIMEOUT", "2.5")
        assert get_resolver_timeout() == 2.5

    def test_invalid_value(self, monkeypatch, caplog):
        monkeypatch.setenv("DID_CREDENTIALS_RESOLVER_TIMEOUT", "soon")
        assert get_resolver_timeout() == DEFAULT_RESOLVER_TIMEOUT
        assert "DID_CREDENTIALS_RESOLVER_TIMEOUT" in caplog.text
