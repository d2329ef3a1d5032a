"""
Tests for the host: atomic invocations and nested gateway calls.
"""
import json
import logging
from unittest.mock import MagicMock, patch

import pytest

from crosstalk_sdk.exceptions import (
    NameTakenError, ReplyError, ReplyErrorKind,
    SubMessageFailedError, UnrecognizedMessageError
)
from crosstalk_sdk.gateway.stub_transport import StubTransport
from crosstalk_sdk.gateway.transport import GatewayTransport
from crosstalk_sdk.host import Host
from crosstalk_sdk.messages import (
    ConfigQuery, GatewaySetDappMetadataMsg, InstantiateMsg, ISendMsg, LoadStatesQuery,
    RegisterMsg, SetDappMetadataMsg
)
from crosstalk_sdk.models import LoadStatesResponse, MessageInfo
from crosstalk_sdk.packet import build_request_packet
from crosstalk_sdk.reply import ISEND_ID
from crosstalk_sdk.response import ReplyOn, Response, SubMsg, SubMsgResult, WasmExecute
from crosstalk_sdk.state import EMPTY_SNAPSHOT, ContractState
from crosstalk_sdk.storage import JsonFileStorage, MemoryStorage

from conftest import ALICE, BOB, TEST_CONTRACT, TEST_DEST_CHAIN, TEST_GATEWAY, TEST_HANDLER

SENDER = MessageInfo(sender=ALICE)


def i_send(payload=b"ping", dest_chain_id=TEST_DEST_CHAIN, gateway_address=TEST_GATEWAY):
    return ISendMsg(
        version=1,
        route_amount=0,
        route_recipient="",
        dest_chain_id=dest_chain_id,
        request_metadata=b"\x00" * 50,
        gateway_address=gateway_address,
        handler_address=TEST_HANDLER,
        payload=payload,
    )


def states(host) -> LoadStatesResponse:
    return LoadStatesResponse.model_validate_json(host.query(LoadStatesQuery()))


def make_host(transport) -> Host:
    contract_host = Host(MemoryStorage(), transport, TEST_CONTRACT)
    contract_host.instantiate(SENDER, InstantiateMsg())
    return contract_host


class TestSend:
    """Tests for outbound requests through the gateway."""

    def test_request_identifier_reaches_ledger(self, host, transport):
        response = host.execute(SENDER, i_send())

        assert states(host).pending == [1]
        assert json.loads(response.data) == "handle_i_send_reply, request_identifier: 1"
        assert ("action", "i_send") in response.attributes
        assert ("request_identifier", "1") in response.attributes

    def test_gateway_receives_packet(self, host, transport):
        host.execute(SENDER, i_send(b"payload"))

        assert len(transport.sent) == 1
        sent = transport.sent[0]
        assert sent.sender == TEST_CONTRACT
        assert sent.msg.dest_chain_id == TEST_DEST_CHAIN
        assert sent.msg.request_packet == build_request_packet(TEST_HANDLER, b"payload")

    def test_sends_are_recorded_in_order(self, host):
        for payload in [b"a", b"b", b"c"]:
            host.execute(SENDER, i_send(payload))
        assert states(host).pending == [1, 2, 3]

    def test_pending_operation_is_tracked_during_gateway_call(self, host, transport):
        observed = []
        original = transport.execute

        def spy(*args, **kwargs):
            observed.extend(op.reply_id for op in host.pending_operations.values())
            return original(*args, **kwargs)

        transport.execute = spy
        host.execute(SENDER, i_send())

        assert observed == [ISEND_ID]
        assert host.pending_operations == {}


class TestAtomicity:
    """A failed nested call rolls back everything the invocation wrote."""

    def test_rejected_destination(self):
        transport = StubTransport(supported_chains=["1"])
        transport.initialize(TEST_GATEWAY)
        contract_host = make_host(transport)

        with pytest.raises(ReplyError) as exc_info:
            contract_host.execute(SENDER, i_send())

        assert exc_info.value.kind == ReplyErrorKind.SUB_MSG_FAILURE
        assert "Unsupported destination chain" in exc_info.value.detail
        after = states(contract_host)
        assert after.pending == []
        assert after.request == EMPTY_SNAPSHOT
        assert contract_host.pending_operations == {}

    def test_failure_keeps_earlier_invocations(self):
        transport = StubTransport(supported_chains=["1"])
        transport.initialize(TEST_GATEWAY)
        contract_host = make_host(transport)
        contract_host.execute(SENDER, i_send(dest_chain_id="1"))

        with pytest.raises(ReplyError):
            contract_host.execute(SENDER, i_send(b"second"))

        after = states(contract_host)
        assert after.pending == [1]
        assert after.request == build_request_packet(TEST_HANDLER, b"ping")

    def test_unknown_gateway_address(self, host, storage):
        before = list(storage.range())
        with pytest.raises(ReplyError):
            host.execute(SENDER, i_send(gateway_address="router1elsewhere"))
        assert list(storage.range()) == before

    def test_transport_error_becomes_reply_failure(self):
        contract_host = make_host(StubTransport())

        with pytest.raises(ReplyError) as exc_info:
            contract_host.execute(SENDER, i_send())

        assert exc_info.value.kind == ReplyErrorKind.SUB_MSG_FAILURE
        assert states(contract_host).pending == []

    def test_unparseable_gateway_response(self):
        transport = MagicMock(spec=GatewayTransport)
        transport.execute.return_value = SubMsgResult.success(b'"not-a-number"')
        contract_host = make_host(transport)

        with pytest.raises(ReplyError) as exc_info:
            contract_host.execute(SENDER, i_send())

        assert exc_info.value.kind == ReplyErrorKind.PARSE_FAILURE
        assert states(contract_host).request == EMPTY_SNAPSHOT

    def test_handler_error_discards_writes(self, host, storage):
        host.execute(SENDER, RegisterMsg(name="alice"))
        before = list(storage.range())

        with pytest.raises(NameTakenError):
            host.execute(MessageInfo(sender=BOB), RegisterMsg(name="alice"))

        assert list(storage.range()) == before

    def test_unhandled_sub_message_failure(self, host, storage):
        """A failed call that is never routed to reply aborts the invocation."""
        submsg = SubMsg(
            id=ISEND_ID,
            msg=WasmExecute(contract_addr="router1elsewhere", msg=GatewaySetDappMetadataMsg(fee_payer_address=ALICE)),
            reply_on=ReplyOn.NEVER,
        )
        with pytest.raises(SubMessageFailedError) as exc_info:
            host._dispatch(ContractState(storage), Response().add_submessage(submsg))
        assert exc_info.value.reply_id == ISEND_ID

    def test_failed_file_commit_leaves_no_partial_state(self, transport, tmp_path):
        path = str(tmp_path / "state.json")
        contract_host = Host(JsonFileStorage(path), transport, TEST_CONTRACT)
        contract_host.instantiate(SENDER, InstantiateMsg())

        with patch.object(JsonFileStorage, "_dump", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                contract_host.execute(SENDER, i_send())

        reopened = ContractState(JsonFileStorage(path))
        assert reopened.request.may_load() is None
        assert reopened.load_pending() == []


class TestSetDappMetadata:

    def test_success_skips_reply(self, host, transport):
        msg = SetDappMetadataMsg(fee_payer_address=BOB, gateway_address=TEST_GATEWAY)
        response = host.execute(SENDER, msg)

        assert transport.dapp_metadata == {TEST_CONTRACT: BOB}
        assert response.data is None
        assert states(host).pending == []

    def test_failure_is_routed_to_reply(self, host):
        msg = SetDappMetadataMsg(fee_payer_address=BOB, gateway_address="router1elsewhere")
        with pytest.raises(ReplyError) as exc_info:
            host.execute(SENDER, msg)
        assert exc_info.value.kind == ReplyErrorKind.SUB_MSG_FAILURE


class TestHostEntryPoints:

    def test_execute_from_json(self, host):
        host.execute(SENDER, RegisterMsg(name="alice").to_json())
        assert states(host).name_resolver == [("alice", ALICE)]

    def test_block_height_advances(self, host):
        start = host.block_height
        host.execute(SENDER, RegisterMsg(name="alice"))
        assert host.block_height == start + 1
        assert host.env.block_height == start + 1

    def test_query_from_json(self, host):
        data = host.query(b'{"config": {}}')
        assert json.loads(data) == {"purchase_price": None, "transfer_price": None}

    def test_execute_rejects_query_message(self, host, caplog):
        with caplog.at_level(logging.WARNING, logger="crosstalk_sdk.host"):
            with pytest.raises(UnrecognizedMessageError):
                host.execute(SENDER, ConfigQuery())
        assert "Invocation config from" in caplog.text

    def test_execute_rejects_untagged_object(self, host, caplog):
        class Ping:
            pass

        with caplog.at_level(logging.WARNING, logger="crosstalk_sdk.host"):
            with pytest.raises(UnrecognizedMessageError):
                host.execute(SENDER, Ping())
        assert "Invocation Ping from" in caplog.text

