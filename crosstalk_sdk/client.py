"""
CrosstalkClient - convenience facade over a contract host.
"""
import logging
from typing import List, Optional

from .config import NetworkConfig
from .messages import (
    ConfigQuery, IAckMsg, IReceiveMsg, ISendMsg, LoadStatesQuery, RegisterMsg,
    ResolveRecordQuery, SetDappMetadataMsg, TransferMsg
)
from .models import (
    Coin, ConfigResponse, LoadStatesResponse, MessageInfo, ResolveRecordResponse
)
from .packet import RequestMetadata
from .host import Host
from .response import Response


class CrosstalkClient:
    """
    Client for driving a contract through its host.

    This client handles:
    1. Sending requests to other chains through the gateway
    2. Name registration and transfer
    3. Reading back the contract's state

    Gateway address, chain defaults and request metadata defaults come from
    ``NetworkConfig``.
    """

    def __init__(
        self,
        host: Host,
        sender: str,
        network: Optional[str] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the CrosstalkClient

        Args:
            host: Host running the contract
            sender: Address the client acts as
            network: Network name (defaults to $CROSSTALK_NETWORK or localnet)
            logger: Optional logger instance to use for debug/info logging

        Raises:
            ValueError: If sender is empty or the network is unknown
        """
        if not sender:
            raise ValueError("sender must be provided")

        self.host = host
        self.sender = sender
        self.network = network
        self.gateway_address = NetworkConfig.get_gateway_address(network)
        self.logger = logger or logging.getLogger(__name__)

    def _info(self, funds: Optional[List[Coin]] = None) -> MessageInfo:
        return MessageInfo(sender=self.sender, funds=funds or [])

    def send(
        self,
        dest_chain_id: str,
        handler_address: str,
        payload: bytes,
        metadata: Optional[RequestMetadata] = None,
        route_amount: int = 0,
        route_recipient: str = "",
        version: int = 1
    ) -> Response:
        """
        Send a request to a handler on another chain.

        Args:
            dest_chain_id: Destination chain id
            handler_address: Handler contract on the destination chain
            payload: Application payload for the handler
            metadata: Request metadata (defaults to the network's settings)
            route_amount: Amount of tokens routed with the request
            route_recipient: Recipient of the routed tokens
            version: Request version

        Returns:
            Response of the invocation, whose data names the request identifier

        Raises:
            ReplyError: If the gateway rejected the request
        """
        metadata = metadata or NetworkConfig.default_metadata(self.network)
        msg = ISendMsg(
            version=version,
            route_amount=route_amount,
            route_recipient=route_recipient,
            dest_chain_id=dest_chain_id,
            request_metadata=metadata.to_bytes(),
            gateway_address=self.gateway_address,
            handler_address=handler_address,
            payload=payload,
        )
        self.logger.debug(f"Sending {len(payload)} byte payload to {handler_address} on {dest_chain_id}")
        return self.host.execute(self._info(), msg)

    def set_dapp_metadata(self, fee_payer_address: str) -> Response:
        msg = SetDappMetadataMsg(fee_payer_address=fee_payer_address, gateway_address=self.gateway_address)
        return self.host.execute(self._info(), msg)

    def receive(self, src_chain_id: str, request_sender: str, packet: bytes) -> Response:
        """Deliver an inbound request, acting as the gateway."""
        msg = IReceiveMsg(src_chain_id=src_chain_id, request_sender=request_sender, packet=packet)
        return self.host.execute(self._info(), msg)

    def acknowledge(self, request_identifier: int, exec_status: bool, exec_data: bytes) -> Response:
        """Deliver an acknowledgement, acting as the gateway."""
        msg = IAckMsg(request_identifier=request_identifier, exec_status=exec_status, exec_data=exec_data)
        return self.host.execute(self._info(), msg)

    def register(self, name: str, funds: Optional[List[Coin]] = None) -> Response:
        return self.host.execute(self._info(funds), RegisterMsg(name=name))

    def transfer(self, name: str, to: str, funds: Optional[List[Coin]] = None) -> Response:
        return self.host.execute(self._info(funds), TransferMsg(name=name, to=to))

    def resolve_record(self, name: str) -> ResolveRecordResponse:
        return ResolveRecordResponse.model_validate_json(self.host.query(ResolveRecordQuery(name=name)))

    def config(self) -> ConfigResponse:
        return ConfigResponse.model_validate_json(self.host.query(ConfigQuery()))

    def load_states(self) -> LoadStatesResponse:
        return LoadStatesResponse.model_validate_json(self.host.query(LoadStatesQuery()))

    def pending_requests(self) -> List[int]:
        """
        Request identifiers accepted by the gateway and not yet settled.

        Returns:
            Identifiers in the order the gateway accepted them
        """
        return self.load_states().pending
