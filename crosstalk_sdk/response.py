"""
Invocation results exchanged between the contract and the host.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from .messages import GatewayMsg
from .models import Coin


class ReplyOn(str, Enum):
    """Which outcomes of a nested call are routed back to ``reply``."""
    ALWAYS = "always"
    SUCCESS = "success"
    ERROR = "error"
    NEVER = "never"

    def wants(self, success: bool) -> bool:
        if self == ReplyOn.ALWAYS:
            return True
        if self == ReplyOn.SUCCESS:
            return success
        if self == ReplyOn.ERROR:
            return not success
        return False


@dataclass
class WasmExecute:
    """Execute instruction for another contract, here always the gateway."""
    contract_addr: str
    msg: GatewayMsg
    funds: List[Coin] = field(default_factory=list)


@dataclass
class SubMsg:
    """
    A nested call whose outcome is observed.

    ``id`` is the operation tag used to route the continuation.
    """
    id: int
    msg: WasmExecute
    reply_on: ReplyOn = ReplyOn.ALWAYS
    gas_limit: Optional[int] = None


@dataclass
class Response:
    """Result of an entry point invocation."""
    data: Optional[bytes] = None
    messages: List[SubMsg] = field(default_factory=list)
    attributes: List[Tuple[str, str]] = field(default_factory=list)

    def add_submessage(self, msg: SubMsg) -> "Response":
        self.messages.append(msg)
        return self

    def add_attribute(self, key: str, value: object) -> "Response":
        self.attributes.append((key, str(value)))
        return self

    def set_data(self, data: bytes) -> "Response":
        self.data = data
        return self


@dataclass
class SubMsgResponse:
    data: Optional[bytes] = None
    attributes: List[Tuple[str, str]] = field(default_factory=list)


@dataclass
class SubMsgResult:
    """
    Outcome of a nested call: exactly one of ``ok`` and ``err`` is set.

    ``err`` is kept as raw bytes when the callee reported a reason that is
    not valid UTF-8.
    """
    ok: Optional[SubMsgResponse] = None
    err: Optional[Union[str, bytes]] = None

    def __post_init__(self):
        if (self.ok is None) == (self.err is None):
            raise ValueError("SubMsgResult needs exactly one of ok or err")

    @property
    def is_ok(self) -> bool:
        return self.ok is not None

    @classmethod
    def success(cls, data: Optional[bytes] = None) -> "SubMsgResult":
        return cls(ok=SubMsgResponse(data=data))

    @classmethod
    def failure(cls, reason: Union[str, bytes]) -> "SubMsgResult":
        return cls(err=reason)


@dataclass
class Reply:
    """Continuation delivered to ``reply`` once a nested call finishes."""
    id: int
    result: SubMsgResult
