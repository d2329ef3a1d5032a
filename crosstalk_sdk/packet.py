"""
Builders for the two application-level wire shapes sent to the gateway.
"""
import logging
from enum import IntEnum

from pydantic import BaseModel, Field

from .abi import SolidityValue, abi_encode_tuple, encode_packed

logger = logging.getLogger(__name__)

GAS_BITS = 64
RELAYER_FEE_BITS = 128
ACK_TYPE_BITS = 8

# gas limit, gas price, ack gas limit, ack gas price, relayer fee, ack type, is read call
METADATA_FIXED_LENGTH = (4 * GAS_BITS + RELAYER_FEE_BITS + ACK_TYPE_BITS) // 8 + 1


class AckType(IntEnum):
    """When the destination should acknowledge a request."""
    NO_ACK = 0
    ACK_ON_SUCCESS = 1
    ACK_ON_ERROR = 2
    ACK_ON_BOTH = 3


def build_request_packet(handler_identifier: str, payload: bytes) -> bytes:
    """
    Build the request packet: ABI tuple of (handler, payload).

    Args:
        handler_identifier: Address of the handler contract on the destination
        payload: Opaque application payload

    Returns:
        ABI encoded ``(string, bytes)`` tuple
    """
    return abi_encode_tuple([
        SolidityValue.string(handler_identifier),
        SolidityValue.bytes_(payload),
    ])


def build_request_metadata(
    gas_limit: int,
    gas_price: int,
    ack_gas_limit: int,
    ack_gas_price: int,
    relayer_fee: int,
    ack_type: int,
    is_read_call: bool,
    asm_address: str
) -> bytes:
    """
    Build packed request metadata.

    Numeric fields are truncated to their wire width; values that do not fit
    lose their high-order bytes, so callers must keep them in range.

    Args:
        gas_limit: Gas limit on the destination (64 bits)
        gas_price: Gas price on the destination (64 bits)
        ack_gas_limit: Gas limit for the acknowledgement (64 bits)
        ack_gas_price: Gas price for the acknowledgement (64 bits)
        relayer_fee: Fee paid to the relayer (128 bits)
        ack_type: Acknowledgement mode (8 bits)
        is_read_call: Whether the request is a read-only call
        asm_address: Additional security module address, appended verbatim

    Returns:
        Packed metadata bytes of ``METADATA_FIXED_LENGTH + len(asm_address)``
    """
    metadata = encode_packed([
        SolidityValue.uint(gas_limit, GAS_BITS),
        SolidityValue.uint(gas_price, GAS_BITS),
        SolidityValue.uint(ack_gas_limit, GAS_BITS),
        SolidityValue.uint(ack_gas_price, GAS_BITS),
        SolidityValue.uint(relayer_fee, RELAYER_FEE_BITS),
        SolidityValue.uint(int(ack_type), ACK_TYPE_BITS),
        SolidityValue.bool_(is_read_call),
        SolidityValue.string(asm_address),
    ])
    logger.debug(f"Built {len(metadata)} byte request metadata")
    return metadata


class RequestMetadata(BaseModel):
    """Request metadata parameters, encoded with ``to_bytes``."""
    gas_limit: int = Field(ge=0)
    gas_price: int = Field(ge=0)
    ack_gas_limit: int = Field(ge=0)
    ack_gas_price: int = Field(ge=0)
    relayer_fee: int = Field(0, ge=0)
    ack_type: int = Field(AckType.NO_ACK, ge=0, le=255)
    is_read_call: bool = False
    asm_address: str = ""

    def to_bytes(self) -> bytes:
        return build_request_metadata(
            self.gas_limit,
            self.gas_price,
            self.ack_gas_limit,
            self.ack_gas_price,
            self.relayer_fee,
            self.ack_type,
            self.is_read_call,
            self.asm_address,
        )
