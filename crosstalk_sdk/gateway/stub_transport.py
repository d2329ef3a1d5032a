"""
Stub-based transport implementation for the Gateway.

This module provides an in-process gateway for tests and local runs. It
accepts instructions, assigns sequential request identifiers and records
what it was sent; nothing leaves the process.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ..messages import GatewayISendMsg, GatewayMsg, GatewaySetDappMetadataMsg
from ..models import Coin
from ..response import SubMsgResult
from .exceptions import GatewayConnectionError, GatewayResponseError, UnsupportedChainError
from .transport import GatewayTransport

# Configure logger
logger = logging.getLogger(__name__)


@dataclass
class SentRequest:
    """An i_send instruction accepted by the stub."""
    request_identifier: int
    sender: str
    msg: GatewayISendMsg
    funds: List[Coin] = field(default_factory=list)


class StubTransport(GatewayTransport):
    """
    A simple stub implementation for the Gateway transport.

    ``i_send`` succeeds with the next request identifier unless the
    destination chain is not in ``supported_chains`` (when given).
    """

    def __init__(self, supported_chains: Optional[Iterable[str]] = None, start_nonce: int = 1):
        """
        Initialize the stub transport.

        Args:
            supported_chains: Destination chain ids to accept, all when None
            start_nonce: First request identifier to assign
        """
        self.gateway_address: Optional[str] = None
        self.initialized = False
        self.supported_chains = set(supported_chains) if supported_chains is not None else None
        self.next_nonce = start_nonce
        self.sent: List[SentRequest] = []
        self.dapp_metadata: Dict[str, str] = {}

    def is_available(self) -> bool:
        """
        Check if stub transport is available.

        Returns:
            Always True since stub transport has no dependencies
        """
        return True

    def initialize(self, gateway_address: str) -> None:
        self.gateway_address = gateway_address
        self.initialized = True
        logger.debug(f"Initialized stub transport for {gateway_address}")

    def execute(
        self,
        sender: str,
        contract_addr: str,
        msg: GatewayMsg,
        funds: Optional[List[Coin]] = None
    ) -> SubMsgResult:
        """
        Execute a gateway instruction (stubbed).

        Raises:
            GatewayConnectionError: If stub transport not initialized
            GatewayResponseError: If the instruction is not a gateway message
        """
        if not self.initialized:
            raise GatewayConnectionError("Stub transport not initialized")

        if contract_addr != self.gateway_address:
            return SubMsgResult.failure(f"unknown gateway contract: {contract_addr}")

        if isinstance(msg, GatewayISendMsg):
            if self.supported_chains is not None and msg.dest_chain_id not in self.supported_chains:
                error = UnsupportedChainError(msg.dest_chain_id)
                logger.warning(f"Simulating gateway rejection: {error}")
                return SubMsgResult.failure(str(error))

            request_identifier = self.next_nonce
            self.next_nonce += 1
            self.sent.append(SentRequest(request_identifier, sender, msg, list(funds or [])))
            logger.info(f"Simulated i_send {request_identifier} from {sender} to {msg.dest_chain_id}")
            return SubMsgResult.success(json.dumps(request_identifier).encode("utf-8"))

        if isinstance(msg, GatewaySetDappMetadataMsg):
            self.dapp_metadata[sender] = msg.fee_payer_address
            logger.info(f"Simulated fee payer {msg.fee_payer_address} for {sender}")
            return SubMsgResult.success()

        raise GatewayResponseError(f"Unsupported gateway instruction: {type(msg).__name__}")

    def close(self) -> None:
        """Close the stub transport (no-op)."""
        pass
