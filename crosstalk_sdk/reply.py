"""
Reply handling for nested gateway calls.

The host delivers exactly one ``Reply`` per tagged sub message once the
gateway's own execution has finished. A successful ``i_send`` reply carries
the request identifier the gateway assigned; it is appended to the pending
ledger. Every failure is raised, so the host rolls the whole invocation back.
"""
import json
import logging
from typing import Annotated, Optional

from pydantic import Field, TypeAdapter, ValidationError

from .exceptions import ReplyError, ReplyErrorKind, UnknownReplyIdError
from .gateway._rate_limited_log import rate_limited_log
from .models import Env
from .response import Reply, Response, SubMsgResult
from .state import ContractState

logger = logging.getLogger(__name__)

# Operation tag of the continuation for an outbound i_send
ISEND_ID = 125

_REQUEST_IDENTIFIER = TypeAdapter(Annotated[int, Field(ge=0, lt=1 << 64, strict=True)])


def parse_reply_execute_data(result: SubMsgResult) -> Optional[bytes]:
    """
    Extract the data returned by a nested call.

    Raises:
        ReplyError: SUB_MSG_FAILURE if the call failed, BROKEN_UTF8 if its
            failure reason is not valid UTF-8
    """
    if result.is_ok:
        return result.ok.data

    reason = result.err
    if isinstance(reason, bytes):
        try:
            reason = reason.decode("utf-8")
        except UnicodeDecodeError:
            raise ReplyError(ReplyErrorKind.BROKEN_UTF8)
    raise ReplyError(ReplyErrorKind.SUB_MSG_FAILURE, reason)


def parse_request_identifier(data: Optional[bytes]) -> int:
    """
    Decode the JSON encoded u64 request identifier returned by the gateway.

    Raises:
        ReplyError: PARSE_FAILURE if the data is missing or not a u64
    """
    if data is None:
        raise ReplyError(ReplyErrorKind.PARSE_FAILURE, "no data in gateway response")
    try:
        return _REQUEST_IDENTIFIER.validate_json(data)
    except ValidationError as e:
        raise ReplyError(ReplyErrorKind.PARSE_FAILURE, f"invalid request identifier: {e}") from e


def reply(state: ContractState, env: Env, msg: Reply) -> Response:
    """
    Entry point for continuations.

    Raises:
        UnknownReplyIdError: If the continuation's tag was never issued
        ReplyError: If the nested call failed or returned unusable data
    """
    if msg.id == ISEND_ID:
        return handle_i_send_reply(state, msg)
    logger.error(f"Received reply with unknown id {msg.id}")
    raise UnknownReplyIdError(msg.id)


def handle_i_send_reply(state: ContractState, msg: Reply) -> Response:
    try:
        data = parse_reply_execute_data(msg.result)
        request_identifier = parse_request_identifier(data)
    except ReplyError as e:
        rate_limited_log(f"i_send reply failed: {e}", level="error", logger_instance=logger)
        raise

    ledger = state.append_pending(request_identifier)
    logger.info(f"Gateway accepted request {request_identifier}, {len(ledger.requests)} pending")

    text = f"handle_i_send_reply, request_identifier: {request_identifier}"
    return (
        Response()
        .set_data(json.dumps(text).encode("utf-8"))
        .add_attribute("action", "handle_i_send_reply")
        .add_attribute("request_identifier", request_identifier)
    )
