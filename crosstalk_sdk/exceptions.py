"""
Exceptions for the Crosstalk SDK.
"""
from enum import Enum
from typing import Optional


class CrosstalkError(Exception):
    """Base exception for all SDK errors."""
    pass


class ContractError(CrosstalkError):
    """Raised by the name service when a request is rejected."""
    pass


class NameTakenError(ContractError):
    """Raised when registering a name that already has an owner."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Name has been taken (name {name})")


class NameNotExistsError(ContractError):
    """Raised when transferring a name nobody owns."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Name does not exist (name {name})")


class UnauthorizedError(ContractError):
    """Raised when the sender does not own the record it tries to change."""

    def __init__(self):
        super().__init__("Unauthorized")


class InsufficientFundsSendError(ContractError):
    """Raised when the funds sent do not cover the configured price."""

    def __init__(self):
        super().__init__("Insufficient funds sent")


class InvalidAddressError(ContractError):
    """Raised when an address fails validation."""

    def __init__(self, address: str, reason: str):
        self.address = address
        self.reason = reason
        super().__init__(f"Invalid address '{address}': {reason}")


class NameValidationError(ContractError):
    """Base class for name length and character errors."""
    pass


class NameTooShortError(NameValidationError):

    def __init__(self, length: int, min_length: int):
        self.length = length
        self.min_length = min_length
        super().__init__(f"Name too short (length {length} min_length {min_length})")


class NameTooLongError(NameValidationError):

    def __init__(self, length: int, max_length: int):
        self.length = length
        self.max_length = max_length
        super().__init__(f"Name too long (length {length} max_length {max_length})")


class InvalidCharacterError(NameValidationError):

    def __init__(self, char: str):
        self.char = char
        super().__init__(f"Invalid character(char {char!r})")


class CodecError(CrosstalkError):
    """Base exception for wire encoding errors."""
    pass


class AbiEncodeError(CodecError):
    """Raised when a value cannot be ABI encoded."""
    pass


class AbiDecodeError(CodecError):
    """Raised when a buffer does not match the expected ABI layout."""
    pass


class MessageDecodeError(CodecError):
    """Raised when a JSON message does not match its schema."""
    pass


class ReplyErrorKind(str, Enum):
    """
    Failure kinds of a nested gateway call, as seen by the reply handler.
    """
    SUB_MSG_FAILURE = "SubMsgFailure"
    PARSE_FAILURE = "ParseFailure"
    BROKEN_UTF8 = "BrokenUtf8"


class ReplyError(CrosstalkError):
    """Raised when a gateway reply reports or implies a failure."""

    def __init__(self, kind: ReplyErrorKind, detail: Optional[str] = None):
        self.kind = kind
        self.detail = detail
        message = kind.value if detail is None else f"{kind.value}: {detail}"
        super().__init__(message)


class ProtocolError(CrosstalkError):
    """Raised when a peer breaks the message protocol."""
    pass


class UnknownReplyIdError(ProtocolError):
    """Raised when a continuation carries an operation tag nobody issued."""

    def __init__(self, reply_id: int):
        self.reply_id = reply_id
        super().__init__(f"invalid reply id: {reply_id}")


class UnrecognizedMessageError(ProtocolError):
    """Raised when an inbound message variant is outside the closed set."""

    def __init__(self, variant: Optional[str] = None):
        self.variant = variant
        super().__init__(f"unrecognized message: {variant}" if variant else "unrecognized message")


class SubMessageFailedError(ProtocolError):
    """Raised by the host when a nested call fails and no reply handles it."""

    def __init__(self, reply_id: int, reason: str):
        self.reply_id = reply_id
        self.reason = reason
        super().__init__(f"Sub message {reply_id} failed: {reason}")


class StorageError(CrosstalkError):
    """Base exception for storage errors."""
    pass


class NotFoundError(StorageError):
    """Raised when loading a record that was never saved."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"{key} not found")


class ReadOnlyStorageError(StorageError):
    """Raised when a read-only storage view is written to."""
    pass
