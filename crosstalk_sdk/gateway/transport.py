"""
Transport layer for the Gateway.

This module defines the interface the host uses to hand gateway
instructions over to whatever actually relays them to the other chain.
"""
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from ..messages import GatewayMsg
from ..models import Coin
from ..response import SubMsgResult

# Configure logger
logger = logging.getLogger(__name__)


class GatewayTransport(ABC):
    """
    Abstract base class for Gateway transport implementations.

    A transport executes one gateway instruction synchronously and reports
    its outcome as a ``SubMsgResult``. Retries and delivery to the other
    chain are the gateway's concern; a failure is final.
    """

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if this transport is available for use.

        Returns:
            True if transport is available, False otherwise
        """
        pass

    @abstractmethod
    def initialize(self, gateway_address: str) -> None:
        """
        Initialize the transport for the gateway at ``gateway_address``.

        Raises:
            GatewayConnectionError: If the gateway cannot be reached
        """
        pass

    @abstractmethod
    def execute(
        self,
        sender: str,
        contract_addr: str,
        msg: GatewayMsg,
        funds: Optional[List[Coin]] = None
    ) -> SubMsgResult:
        """
        Execute a gateway instruction on behalf of ``sender``.

        Args:
            sender: Address of the calling contract
            contract_addr: Address of the gateway contract
            msg: The instruction
            funds: Funds attached to the call

        Returns:
            ``SubMsgResult`` with the JSON encoded request identifier for
            ``i_send``, or the failure reason

        Raises:
            GatewayError: If the instruction could not be executed at all
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Close any open connections or resources."""
        pass


def get_transport(gateway_address: str) -> GatewayTransport:
    """
    Get an initialized transport for ``gateway_address``.

    Only the in-process stub ships with the SDK.
    """
    from .stub_transport import StubTransport
    transport = StubTransport()
    transport.initialize(gateway_address)
    logger.info("Using stub-based transport for Gateway")
    return transport
