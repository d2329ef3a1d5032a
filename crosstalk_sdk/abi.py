"""
ABI codec for the foreign contract boundary.

Two layouts are produced here and they are never interchangeable:

* packed encoding (``encode_packed``): raw big-endian field bytes with no
  padding, no length prefixes and no type tags. The relay reads request
  metadata at fixed byte offsets, so this is what metadata uses.
* standard tuple encoding (``abi_encode_tuple``): head/tail layout with
  32-byte offset words and length-prefixed, word-aligned dynamic fields.
  Request packets and results cross the boundary this way because the
  remote runtime decodes them with its native ABI decoder.

Tuple encoding and decoding are delegated to ``eth_abi``. Packed encoding is
done by hand because numeric fields must be truncated silently to their
declared width, which ``eth_abi.packed`` refuses to do.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Union

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils import is_address, to_canonical_address

from .exceptions import AbiDecodeError, AbiEncodeError

logger = logging.getLogger(__name__)

# Width of an ABI word and of the internal integer representation
WORD_SIZE = 32
UINT_BITS = 256
ADDRESS_SIZE = 20


class SolidityType(str, Enum):
    """Primitive shapes understood by the codec."""
    STRING = "string"
    ADDRESS = "address"
    BYTES = "bytes"
    BOOL = "bool"
    UINT = "uint"


@dataclass(frozen=True)
class SolidityValue:
    """
    A value tagged with the ABI type it should be encoded as.

    For ``UINT`` values ``bits`` is the declared width. In packed encoding
    the value keeps only its low ``bits / 8`` bytes; in tuple encoding it is
    encoded as ``uint<bits>``.
    """
    type: SolidityType
    value: Union[str, bytes, bool, int]
    bits: Optional[int] = None

    @classmethod
    def string(cls, value: str) -> "SolidityValue":
        return cls(SolidityType.STRING, value)

    @classmethod
    def address(cls, value: Union[str, bytes]) -> "SolidityValue":
        return cls(SolidityType.ADDRESS, value)

    @classmethod
    def bytes_(cls, value: bytes) -> "SolidityValue":
        return cls(SolidityType.BYTES, _bytes_value(value))

    @classmethod
    def bool_(cls, value: bool) -> "SolidityValue":
        return cls(SolidityType.BOOL, bool(value))

    @classmethod
    def uint(cls, value: int, bits: int = UINT_BITS) -> "SolidityValue":
        return cls(SolidityType.UINT, value, bits)

    @property
    def abi_type(self) -> str:
        """The ``eth_abi`` type string for tuple encoding."""
        if self.type == SolidityType.UINT:
            return f"uint{self.bits or UINT_BITS}"
        return self.type.value


def _check_width(bits: Optional[int]) -> int:
    width = UINT_BITS if bits is None else bits
    if isinstance(width, bool) or not isinstance(width, int):
        raise AbiEncodeError(f"Bit width must be an integer, got {type(width).__name__}")
    if width <= 0 or width > UINT_BITS or width % 8:
        raise AbiEncodeError(
            f"Bit width must be a multiple of 8 between 8 and {UINT_BITS}, got {width}"
        )
    return width


def _uint_to_word(value: int) -> bytes:
    if isinstance(value, bool) or not isinstance(value, int):
        raise AbiEncodeError(f"Expected an unsigned integer, got {type(value).__name__}")
    if value < 0 or value >= 1 << UINT_BITS:
        raise AbiEncodeError(f"Value {value} does not fit in uint{UINT_BITS}")
    return value.to_bytes(WORD_SIZE, "big")


def _bytes_value(value) -> bytes:
    # bytes(3) would silently yield three zero bytes
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise AbiEncodeError(f"Expected bytes, got {type(value).__name__}")
    return bytes(value)


def _address_bytes(value: Union[str, bytes]) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        if len(value) != ADDRESS_SIZE:
            raise AbiEncodeError(f"Address must be {ADDRESS_SIZE} bytes, got {len(value)}")
        return bytes(value)
    if not is_address(value):
        raise AbiEncodeError(f"Invalid address: {value!r}")
    return to_canonical_address(value)


def pack(item: SolidityValue) -> bytes:
    """
    Pack a single value into its raw packed representation.

    Raises:
        AbiEncodeError: If the value does not match its declared type
    """
    if item.type == SolidityType.STRING:
        if not isinstance(item.value, str):
            raise AbiEncodeError(f"Expected a string, got {type(item.value).__name__}")
        return item.value.encode("utf-8")
    if item.type == SolidityType.ADDRESS:
        return _address_bytes(item.value)
    if item.type == SolidityType.BYTES:
        return _bytes_value(item.value)
    if item.type == SolidityType.BOOL:
        return b"\x01" if item.value else b"\x00"
    if item.type == SolidityType.UINT:
        width = _check_width(item.bits)
        word = _uint_to_word(item.value)
        # keep the low-order bytes only, overflow is dropped silently
        return word[WORD_SIZE - width // 8:]
    raise AbiEncodeError(f"Unsupported type: {item.type}")


def encode_packed(items: Iterable[SolidityValue]) -> bytes:
    """
    Concatenate the packed representation of each item.

    Args:
        items: Ordered typed values

    Returns:
        Packed bytes, with no padding or length prefixes
    """
    return b"".join(pack(item) for item in items)


def abi_encode_tuple(values: Sequence[SolidityValue]) -> bytes:
    """
    Standard (non-packed) ABI encoding of a tuple of values.

    Raises:
        AbiEncodeError: If a value cannot be encoded as its declared type
    """
    types: List[str] = []
    args: List[Union[str, bytes, bool, int]] = []
    for item in values:
        if item.type == SolidityType.UINT:
            _check_width(item.bits)
        elif item.type == SolidityType.STRING and not isinstance(item.value, str):
            raise AbiEncodeError(f"Expected a string, got {type(item.value).__name__}")
        types.append(item.abi_type)
        if item.type == SolidityType.ADDRESS:
            args.append(_address_bytes(item.value))
        elif item.type == SolidityType.BYTES:
            args.append(_bytes_value(item.value))
        else:
            args.append(item.value)
    try:
        return encode(types, args)
    except EncodingError as e:
        raise AbiEncodeError(f"Failed to encode {tuple(types)}: {e}") from e


def _padded_length(length: int) -> int:
    return (length + WORD_SIZE - 1) // WORD_SIZE * WORD_SIZE


def abi_decode_single_bytes(buf: bytes) -> bytes:
    """
    Decode a buffer holding exactly one dynamic ``bytes`` parameter.

    Args:
        buf: ABI encoded ``(bytes,)`` tuple

    Returns:
        The raw payload

    Raises:
        AbiDecodeError: If the buffer is not a canonical single-bytes encoding
    """
    data = bytes(buf)
    if len(data) < 2 * WORD_SIZE or len(data) % WORD_SIZE:
        raise AbiDecodeError(
            f"error: abi_decode_to_binary (buffer of {len(data)} bytes is not a single bytes parameter)"
        )

    offset = int.from_bytes(data[:WORD_SIZE], "big")
    if offset != WORD_SIZE:
        raise AbiDecodeError(f"error: abi_decode_to_binary (unexpected offset {offset})")

    try:
        (payload,) = decode(["bytes"], data)
    except DecodingError as e:
        raise AbiDecodeError(f"error: abi_decode_to_binary ({e})") from e

    expected = 2 * WORD_SIZE + _padded_length(len(payload))
    if len(data) != expected:
        raise AbiDecodeError(
            f"error: abi_decode_to_binary (expected {expected} bytes, got {len(data)})"
        )

    logger.debug(f"Decoded {len(payload)} byte payload from {len(data)} byte ABI buffer")
    return payload


def abi_encode_string(text: str) -> bytes:
    """ABI encode a string as a 1-tuple so it can cross the boundary as data."""
    return abi_encode_tuple([SolidityValue.string(text)])
