"""
Crosstalk SDK - cross-chain requests through a gateway, with a wire format
the foreign chain's ABI decodes natively.
"""
from .abi import (
    SolidityType, SolidityValue, abi_decode_single_bytes, abi_encode_string,
    abi_encode_tuple, encode_packed
)
from .client import CrosstalkClient
from .config import NetworkConfig
from .exceptions import (
    AbiDecodeError, AbiEncodeError, ContractError, CrosstalkError,
    InsufficientFundsSendError, NameNotExistsError, NameTakenError,
    ProtocolError, ReplyError, ReplyErrorKind, UnauthorizedError,
    UnknownReplyIdError, UnrecognizedMessageError
)
from .host import Host
from .models import Coin, Config, MessageInfo, PendingRequests
from .packet import AckType, RequestMetadata, build_request_metadata, build_request_packet
from .reply import ISEND_ID
from .storage import JsonFileStorage, MemoryStorage
from .version import __version__

__all__ = [
    "CrosstalkClient",
    "Host",
    "NetworkConfig",
    "MemoryStorage",
    "JsonFileStorage",
    "SolidityType",
    "SolidityValue",
    "encode_packed",
    "abi_encode_tuple",
    "abi_decode_single_bytes",
    "abi_encode_string",
    "build_request_packet",
    "build_request_metadata",
    "RequestMetadata",
    "AckType",
    "ISEND_ID",
    "Coin",
    "Config",
    "MessageInfo",
    "PendingRequests",
    "CrosstalkError",
    "ContractError",
    "NameTakenError",
    "NameNotExistsError",
    "UnauthorizedError",
    "InsufficientFundsSendError",
    "AbiEncodeError",
    "AbiDecodeError",
    "ReplyError",
    "ReplyErrorKind",
    "ProtocolError",
    "UnknownReplyIdError",
    "UnrecognizedMessageError",
    "__version__",
]
