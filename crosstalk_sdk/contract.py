"""
Contract entry points.

There are 6 execute messages:
  * i_send: send a request packet to another chain through the gateway
  * i_receive: handle a request packet from another chain
  * i_ack: handle the acknowledgement of a request this contract sent
  * set_dapp_metadata: set the fee payer of this contract on the gateway
  * register / transfer: direct access to the name service

and 4 query messages:
  * i_query: handle a read-only request packet from another chain
  * resolve_record / config / load_states: inspection helpers
"""
import logging

from . import name_service
from .abi import abi_decode_single_bytes, abi_encode_string
from .exceptions import StorageError, UnrecognizedMessageError
from .messages import (
    CUSTOM_EXECUTE_VARIANTS, CUSTOM_QUERY_VARIANTS, ConfigQuery, ExecuteMsg,
    GatewayISendMsg, GatewaySetDappMetadataMsg, IAckMsg, InstantiateMsg,
    IQueryMsg, IReceiveMsg, ISendMsg, LoadStatesQuery, QueryMsg, RegisterMsg,
    ResolveRecordQuery, SetDappMetadataMsg, TransferMsg, decode_message
)
from .models import (
    Config, ConfigResponse, Env, LoadStatesResponse, MessageInfo
)
from .packet import build_request_packet
from .reply import ISEND_ID, reply
from .response import ReplyOn, Response, SubMsg, WasmExecute
from .state import DEFAULT_NONCE, EMPTY_SNAPSHOT, ContractState

__all__ = ['instantiate', 'execute', 'query', 'reply']

logger = logging.getLogger(__name__)


def instantiate(state: ContractState, env: Env, info: MessageInfo, msg: InstantiateMsg) -> Response:
    config = Config(purchase_price=msg.purchase_price, transfer_price=msg.transfer_price)
    state.config.save(config)
    logger.debug(f"Instantiated {env.contract_address} with {config!r}")
    return Response()


def execute(state: ContractState, env: Env, info: MessageInfo, msg: ExecuteMsg) -> Response:
    """
    Dispatch an execute message.

    Raises:
        UnrecognizedMessageError: If ``msg`` is not an execute variant
    """
    if isinstance(msg, IReceiveMsg):
        return execute_i_receive(state, env, info, msg.src_chain_id, msg.request_sender, msg.packet)
    if isinstance(msg, IAckMsg):
        return execute_i_ack(state, env, msg.request_identifier, msg.exec_status, msg.exec_data)
    if isinstance(msg, ISendMsg):
        return execute_i_send(
            state,
            env,
            msg.version,
            msg.route_amount,
            msg.route_recipient,
            msg.dest_chain_id,
            msg.request_metadata,
            msg.gateway_address,
            msg.handler_address,
            msg.payload,
        )
    if isinstance(msg, SetDappMetadataMsg):
        return set_dapp_metadata(state, msg.fee_payer_address, msg.gateway_address)
    if isinstance(msg, RegisterMsg):
        return name_service.register(state, info, msg.name)
    if isinstance(msg, TransferMsg):
        return name_service.transfer(state, info, msg.name, msg.to)
    raise UnrecognizedMessageError(type(msg).__name__)


def execute_i_receive(
    state: ContractState,
    env: Env,
    info: MessageInfo,
    src_chain_id: str,
    request_sender: str,
    packet: bytes
) -> Response:
    """
    Handle a request from another chain.

    The packet is an ABI encoded ``(bytes,)`` whose payload is a name service
    message. Decode and handler errors propagate unchanged.
    """
    payload = abi_decode_single_bytes(packet)
    state.request.save(payload)
    logger.info(f"Received request from {request_sender} on {src_chain_id}")

    msg = decode_message(payload, CUSTOM_EXECUTE_VARIANTS)
    if isinstance(msg, RegisterMsg):
        return name_service.register(state, info, msg.name)
    if isinstance(msg, TransferMsg):
        return name_service.transfer(state, info, msg.name, msg.to)
    raise UnrecognizedMessageError(msg.tag)


def execute_i_ack(
    state: ContractState,
    env: Env,
    request_identifier: int,
    exec_status: bool,
    exec_data: bytes
) -> Response:
    """
    Handle the acknowledgement for a request this contract sent.

    The ABI encoded summary is stored as the last result and returned.
    """
    data = abi_decode_single_bytes(exec_data)
    state.request.save(data)

    result_txt = (
        "Ack from handler contract:\n"
        f"address:{env.contract_address}\n"
        f"request_identifier: {request_identifier}\n"
        f"exec_status:{str(exec_status).lower()}\n"
        f"exec_data:{data!r}"
    )
    result = abi_encode_string(result_txt)
    state.result.save(result)
    logger.info(f"Ack for request {request_identifier} (exec_status={exec_status})")
    return (
        Response()
        .set_data(result)
        .add_attribute("action", "i_ack")
        .add_attribute("request_identifier", request_identifier)
    )


def execute_i_send(
    state: ContractState,
    env: Env,
    version: int,
    route_amount: int,
    route_recipient: str,
    dest_chain_id: str,
    request_metadata: bytes,
    gateway_address: str,
    handler_address: str,
    payload: bytes
) -> Response:
    """
    Send a request to ``handler_address`` on ``dest_chain_id``.

    The gateway call is issued as a sub message tagged ISEND_ID; the
    identifier the gateway assigns reaches the pending ledger in ``reply``.
    """
    request_packet = build_request_packet(handler_address, payload)
    state.request.save(request_packet)

    i_send_msg = GatewayISendMsg(
        version=version,
        route_amount=route_amount,
        route_recipient=route_recipient,
        dest_chain_id=dest_chain_id,
        request_metadata=request_metadata,
        request_packet=request_packet,
    )
    submsg = SubMsg(
        id=ISEND_ID,
        msg=WasmExecute(contract_addr=gateway_address, msg=i_send_msg),
        reply_on=ReplyOn.ALWAYS,
    )
    logger.debug(f"Dispatching i_send to gateway {gateway_address} for {dest_chain_id}")
    return (
        Response()
        .add_submessage(submsg)
        .add_attribute("action", "i_send")
        .add_attribute("dest_chain_id", dest_chain_id)
    )


def set_dapp_metadata(state: ContractState, fee_payer_address: str, gateway_address: str) -> Response:
    """
    Register the fee payer of this contract with the gateway.

    Only a failure is routed back, since a successful call returns no
    request identifier for the ledger.
    """
    msg = GatewaySetDappMetadataMsg(fee_payer_address=fee_payer_address)
    submsg = SubMsg(
        id=ISEND_ID,
        msg=WasmExecute(contract_addr=gateway_address, msg=msg),
        reply_on=ReplyOn.ERROR,
    )
    return Response().add_submessage(submsg).add_attribute("action", "set_dapp_metadata")


def query(state: ContractState, env: Env, msg: QueryMsg) -> bytes:
    """
    Dispatch a query message.

    ``i_query`` returns ABI bytes for the other chain; the inspection queries
    return their response model as JSON.
    """
    if isinstance(msg, IQueryMsg):
        return i_query(state, env, msg.packet)
    if isinstance(msg, ResolveRecordQuery):
        return name_service.resolve_record(state, msg.name).model_dump_json().encode("utf-8")
    if isinstance(msg, ConfigQuery):
        return ConfigResponse.from_config(state.config.load()).model_dump_json().encode("utf-8")
    if isinstance(msg, LoadStatesQuery):
        return load_states(state).model_dump_json().encode("utf-8")
    raise UnrecognizedMessageError(type(msg).__name__)


def i_query(state: ContractState, env: Env, packet: bytes) -> bytes:
    """Answer a read-only request from another chain with an ABI encoded string."""
    decoded = abi_decode_single_bytes(packet)
    msg = decode_message(decoded, CUSTOM_QUERY_VARIANTS)

    if isinstance(msg, ConfigQuery):
        response = state.config.load()
    elif isinstance(msg, ResolveRecordQuery):
        response = name_service.resolve_record(state, msg.name)
    else:
        raise UnrecognizedMessageError(msg.tag)

    return abi_encode_string(repr(response))


def load_states(state: ContractState) -> LoadStatesResponse:
    """
    Dump every state slot.

    Name records that cannot be decoded are skipped; this is the only place
    where a storage error is tolerated.
    """
    name_resolver = []
    for key, raw in state.name_resolver.range_raw():
        try:
            name = key.decode("utf-8")
            record = state.name_resolver.decode(key, raw)
        except (UnicodeDecodeError, StorageError) as e:
            logger.warning(f"Skipping corrupt name record {key!r}: {e}")
            continue
        name_resolver.append((name, record.owner))

    request = state.request.may_load()
    result = state.result.may_load()
    nonce = state.nonce.may_load()
    return LoadStatesResponse(
        name_resolver=name_resolver,
        request=EMPTY_SNAPSHOT if request is None else request,
        result=EMPTY_SNAPSHOT if result is None else result,
        nonce=DEFAULT_NONCE if nonce is None else nonce,
        pending=state.load_pending().requests,
    )
