"""
Message schemas for the contract entry points and the gateway.

Messages travel as externally tagged JSON: a single-key object whose key is
the snake_case variant name, e.g. ``{"register": {"name": "alice"}}``.
Byte fields are base64 strings. Every union is closed: decoding a tag that
is not in the union raises ``UnrecognizedMessageError``.
"""
import json
import logging
from typing import ClassVar, Dict, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import MessageDecodeError, UnrecognizedMessageError
from .models import Coin

logger = logging.getLogger(__name__)

M = TypeVar("M", bound="Message")

U64_MAX = (1 << 64) - 1


class Message(BaseModel):
    """Base class for a single variant of a tagged message union."""
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )

    tag: ClassVar[str] = ""

    def to_json(self) -> bytes:
        """Serialize as externally tagged JSON."""
        body = json.loads(self.model_dump_json())
        return json.dumps({self.tag: body}, separators=(",", ":")).encode("utf-8")


# Execute variants

class InstantiateMsg(Message):
    purchase_price: Optional[Coin] = None
    transfer_price: Optional[Coin] = None


class ISendMsg(Message):
    tag: ClassVar[str] = "i_send"

    version: int = Field(ge=0, le=U64_MAX)
    route_amount: int = Field(ge=0, le=U64_MAX)
    route_recipient: str
    dest_chain_id: str
    request_metadata: bytes
    gateway_address: str
    handler_address: str
    payload: bytes


class IReceiveMsg(Message):
    tag: ClassVar[str] = "i_receive"

    src_chain_id: str
    request_sender: str
    packet: bytes


class IAckMsg(Message):
    tag: ClassVar[str] = "i_ack"

    request_identifier: int = Field(ge=0, le=U64_MAX)
    exec_status: bool
    exec_data: bytes


class SetDappMetadataMsg(Message):
    tag: ClassVar[str] = "set_dapp_metadata"

    fee_payer_address: str
    gateway_address: str


class RegisterMsg(Message):
    tag: ClassVar[str] = "register"

    name: str


class TransferMsg(Message):
    tag: ClassVar[str] = "transfer"

    name: str
    to: str


ExecuteMsg = Union[ISendMsg, IReceiveMsg, IAckMsg, SetDappMetadataMsg, RegisterMsg, TransferMsg]

# Gateway variants

class GatewayISendMsg(Message):
    tag: ClassVar[str] = "i_send"

    version: int = Field(ge=0, le=U64_MAX)
    route_amount: int = Field(ge=0, le=U64_MAX)
    route_recipient: str
    dest_chain_id: str
    request_metadata: bytes
    request_packet: bytes


class GatewaySetDappMetadataMsg(Message):
    tag: ClassVar[str] = "set_dapp_metadata"

    fee_payer_address: str


GatewayMsg = Union[GatewayISendMsg, GatewaySetDappMetadataMsg]


# Query variants

class IQueryMsg(Message):
    tag: ClassVar[str] = "i_query"

    packet: bytes


class ResolveRecordQuery(Message):
    tag: ClassVar[str] = "resolve_record"

    name: str


class ConfigQuery(Message):
    tag: ClassVar[str] = "config"


class LoadStatesQuery(Message):
    tag: ClassVar[str] = "load_states"


QueryMsg = Union[IQueryMsg, ResolveRecordQuery, ConfigQuery, LoadStatesQuery]

def _variants(*classes: Type[Message]) -> Dict[str, Type[Message]]:
    return {cls.tag: cls for cls in classes}


EXECUTE_VARIANTS = _variants(ISendMsg, IReceiveMsg, IAckMsg, SetDappMetadataMsg, RegisterMsg, TransferMsg)
CUSTOM_EXECUTE_VARIANTS = _variants(RegisterMsg, TransferMsg)
GATEWAY_VARIANTS = _variants(GatewayISendMsg, GatewaySetDappMetadataMsg)
QUERY_VARIANTS = _variants(IQueryMsg, ResolveRecordQuery, ConfigQuery, LoadStatesQuery)
CUSTOM_QUERY_VARIANTS = _variants(ResolveRecordQuery, ConfigQuery)


def decode_message(data: Union[bytes, str], variants: Mapping[str, Type[M]]) -> M:
    """
    Decode externally tagged JSON into one variant of a closed union.

    Args:
        data: JSON document
        variants: Closed mapping of tag to variant class

    Returns:
        The decoded variant

    Raises:
        MessageDecodeError: If the document is not a tagged message or its
            body does not match the variant schema
        UnrecognizedMessageError: If the tag is not in ``variants``
    """
    try:
        document = json.loads(data)
    except (ValueError, TypeError) as e:
        raise MessageDecodeError(f"Invalid message JSON: {e}") from e

    if not isinstance(document, dict) or len(document) != 1:
        raise MessageDecodeError("Expected an object with exactly one variant key")

    tag, body = next(iter(document.items()))
    variant = variants.get(tag)
    if variant is None:
        logger.debug(f"Rejecting message variant {tag!r}, expected one of {sorted(variants)}")
        raise UnrecognizedMessageError(tag)

    try:
        return variant.model_validate_json(json.dumps(body))
    except ValidationError as e:
        raise MessageDecodeError(f"Invalid {tag} message: {e}") from e
