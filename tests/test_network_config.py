"""
Tests for the NetworkConfig module.
"""
from unittest.mock import patch

import pytest

from crosstalk_sdk.config import NetworkConfig
from crosstalk_sdk.packet import METADATA_FIXED_LENGTH

# Sample network configuration
MOCK_NETWORKS = {
    "test-network": {
        "chainId": "test_1-1",
        "gateway": "router1testgateway",
        "gasLimit": 100,
        "gasPrice": 200,
        "ackGasLimit": 300,
        "ackGasPrice": 400,
    }
}


class TestNetworkConfig:
    """Test NetworkConfig class."""

    def test_load_bundled_networks(self):
        networks = NetworkConfig.load_networks()
        assert "localnet" in networks
        assert "devnet" in networks

    def test_load_networks_cached(self):
        """Networks are cached after the first load."""
        NetworkConfig._networks_cache = MOCK_NETWORKS

        with patch("importlib.resources.files") as mock_files:
            result = NetworkConfig.load_networks()
            mock_files.assert_not_called()

        assert result == MOCK_NETWORKS

    def test_get_network(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        assert NetworkConfig.get_network("test-network")["chainId"] == "test_1-1"

    def test_get_network_not_found(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        with pytest.raises(ValueError) as excinfo:
            NetworkConfig.get_network("non-existent")
        assert "Available networks: test-network" in str(excinfo.value)

    def test_default_network(self):
        assert NetworkConfig.get_chain_id() == "router_9600-1"

    def test_network_from_environment(self, monkeypatch):
        monkeypatch.setenv("CROSSTALK_NETWORK", "devnet")
        assert NetworkConfig.get_chain_id() == "router_9601-1"

    def test_gateway_address(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        assert NetworkConfig.get_gateway_address("test-network") == "router1testgateway"

    def test_gateway_address_override(self, monkeypatch):
        monkeypatch.setenv("CROSSTALK_GATEWAY_ADDRESS", "router1override")
        assert NetworkConfig.get_gateway_address("devnet") == "router1override"


class TestDefaultMetadata:

    def test_from_network_settings(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        metadata = NetworkConfig.default_metadata("test-network", asm_address="router1asm")

        assert metadata.gas_limit == 100
        assert metadata.ack_gas_price == 400
        assert metadata.relayer_fee == 0
        assert metadata.ack_type == 0
        assert metadata.is_read_call is False
        assert len(metadata.to_bytes()) == METADATA_FIXED_LENGTH + len("router1asm")

    def test_devnet_relayer_fee(self):
        assert NetworkConfig.default_metadata("devnet").relayer_fee == 10**15
