"""
Name registration: maps a name to the address that owns it.

This is the business logic that inbound cross-chain requests are delegated
to, and it is also reachable directly through the ``register`` and
``transfer`` execute messages.
"""
import logging
import re
from typing import List, Optional

from web3 import Web3

from .exceptions import (
    InsufficientFundsSendError, InvalidAddressError, InvalidCharacterError,
    NameNotExistsError, NameTakenError, NameTooLongError, NameTooShortError,
    UnauthorizedError
)
from .models import Coin, MessageInfo, NameRecord, ResolveRecordResponse
from .response import Response
from .state import ContractState

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 3
MAX_NAME_LENGTH = 64

MIN_ADDRESS_LENGTH = 3
MAX_ADDRESS_LENGTH = 128

_NAME_CHARS = re.compile(r"[0-9a-z._-]")


def validate_name(name: str) -> None:
    """
    Check a name's length and characters.

    Raises:
        NameTooShortError: If the name is shorter than MIN_NAME_LENGTH bytes
        NameTooLongError: If the name is longer than MAX_NAME_LENGTH bytes
        InvalidCharacterError: On the first character outside [0-9a-z._-]
    """
    length = len(name.encode("utf-8"))
    if length < MIN_NAME_LENGTH:
        raise NameTooShortError(length, MIN_NAME_LENGTH)
    if length > MAX_NAME_LENGTH:
        raise NameTooLongError(length, MAX_NAME_LENGTH)
    for char in name:
        if not _NAME_CHARS.fullmatch(char):
            raise InvalidCharacterError(char)


def validate_address(address: str) -> str:
    """
    Validate an owner address and return it.

    Addresses must be normalized: a bech32-style address is all lowercase,
    a hex address is either all lowercase or checksummed.

    Raises:
        InvalidAddressError: If the address is malformed or not normalized
    """
    if not (MIN_ADDRESS_LENGTH <= len(address) <= MAX_ADDRESS_LENGTH):
        raise InvalidAddressError(address, "invalid length")
    if any(c.isspace() for c in address):
        raise InvalidAddressError(address, "contains whitespace")
    if address.startswith("0x"):
        if not Web3.is_address(address):
            raise InvalidAddressError(address, "invalid hex address")
        return address
    if address != address.lower():
        raise InvalidAddressError(address, "address not normalized")
    return address


def assert_sent_sufficient_coin(funds: List[Coin], required: Optional[Coin]) -> None:
    """
    Check that the attached funds cover a price.

    Raises:
        InsufficientFundsSendError: If a non-zero price is configured and no
            coin of that denomination covers it
    """
    if required is None or required.amount == 0:
        return
    if any(coin.denom == required.denom and coin.amount >= required.amount for coin in funds):
        return
    raise InsufficientFundsSendError()


def register(state: ContractState, info: MessageInfo, name: str) -> Response:
    """Register ``name`` to the sender."""
    validate_name(name)
    config = state.config.load()
    assert_sent_sufficient_coin(info.funds, config.purchase_price)

    key = name.encode("utf-8")
    if state.name_resolver.has(key):
        raise NameTakenError(name)

    state.name_resolver.save(key, NameRecord(owner=info.sender))
    logger.info(f"Registered name {name} to {info.sender}")
    return Response().add_attribute("action", "register").add_attribute("name", name)


def transfer(state: ContractState, info: MessageInfo, name: str, to: str) -> Response:
    """Transfer ``name`` from the sender to ``to``."""
    config = state.config.load()
    assert_sent_sufficient_coin(info.funds, config.transfer_price)

    new_owner = validate_address(to)
    key = name.encode("utf-8")
    record = state.name_resolver.may_load(key)
    if record is None:
        raise NameNotExistsError(name)
    if info.sender != record.owner:
        raise UnauthorizedError()

    state.name_resolver.save(key, NameRecord(owner=new_owner))
    logger.info(f"Transferred name {name} to {new_owner}")
    return Response().add_attribute("action", "transfer").add_attribute("name", name)


def resolve_record(state: ContractState, name: str) -> ResolveRecordResponse:
    record = state.name_resolver.may_load(name.encode("utf-8"))
    return ResolveRecordResponse(address=record.owner if record else None)
