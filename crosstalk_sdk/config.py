"""
Network configuration for the Crosstalk SDK.
"""
import importlib.resources
import json
import logging
import os
from typing import Any, Dict, Optional

from .packet import RequestMetadata

logger = logging.getLogger(__name__)

DEFAULT_NETWORK = "localnet"


class NetworkConfig:
    """
    Access to the bundled network definitions.

    ``CROSSTALK_NETWORK`` selects the default network and
    ``CROSSTALK_GATEWAY_ADDRESS`` overrides the gateway address of whichever
    network is used.
    """

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """
        Load network definitions, cached after the first call.

        Returns:
            Mapping of network name to its settings
        """
        if cls._networks_cache is None:
            text = importlib.resources.files("crosstalk_sdk").joinpath("networks.json").read_text()
            cls._networks_cache = json.loads(text)
            logger.debug(f"Loaded {len(cls._networks_cache)} network definitions")
        return cls._networks_cache

    @classmethod
    def get_network(cls, network: Optional[str] = None) -> Dict[str, Any]:
        """
        Get the settings of a network.

        Args:
            network: Network name, defaults to $CROSSTALK_NETWORK or localnet

        Raises:
            ValueError: If the network is unknown
        """
        name = network or os.environ.get("CROSSTALK_NETWORK", DEFAULT_NETWORK)
        networks = cls.load_networks()
        if name not in networks:
            available = ", ".join(sorted(networks))
            raise ValueError(f"Unknown network '{name}'. Available networks: {available}")
        return networks[name]

    @classmethod
    def get_gateway_address(cls, network: Optional[str] = None) -> str:
        override = os.environ.get("CROSSTALK_GATEWAY_ADDRESS")
        if override:
            return override
        return cls.get_network(network)["gateway"]

    @classmethod
    def get_chain_id(cls, network: Optional[str] = None) -> str:
        return cls.get_network(network)["chainId"]

    @classmethod
    def default_metadata(cls, network: Optional[str] = None, asm_address: str = "") -> RequestMetadata:
        """Request metadata built from the network's default gas and fee settings."""
        settings = cls.get_network(network)
        return RequestMetadata(
            gas_limit=settings["gasLimit"],
            gas_price=settings["gasPrice"],
            ack_gas_limit=settings["ackGasLimit"],
            ack_gas_price=settings["ackGasPrice"],
            relayer_fee=settings.get("relayerFee", 0),
            ack_type=settings.get("ackType", 0),
            is_read_call=False,
            asm_address=asm_address,
        )
