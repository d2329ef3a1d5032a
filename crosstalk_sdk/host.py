"""
Host execution environment for the contract.

The host runs one invocation at a time and makes each one atomic: every
state write, including those made while handling nested gateway calls and
their replies, is committed together or discarded together.

Nested calls are tracked as explicit pending operations. When an entry
point returns sub messages, the host records a ``PendingOperation`` per sub
message under a fresh correlation id, executes the gateway instruction
through the transport and then resolves the operation by calling the
contract's ``reply`` entry point with the outcome, in issuance order.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Union

from . import contract
from .exceptions import SubMessageFailedError
from .gateway.exceptions import GatewayError
from .gateway.transport import GatewayTransport
from .messages import (
    EXECUTE_VARIANTS, QUERY_VARIANTS, ExecuteMsg, InstantiateMsg, QueryMsg, decode_message
)
from .models import Env, MessageInfo
from .response import Reply, Response, SubMsg, SubMsgResult
from .state import ContractState
from .storage import ReadOnlyStorage, Storage, StorageTransaction

logger = logging.getLogger(__name__)


@dataclass
class PendingOperation:
    """A nested call issued by the current invocation and not yet resolved."""
    correlation_id: int
    submsg: SubMsg
    result: Optional[SubMsgResult] = None

    @property
    def reply_id(self) -> int:
        return self.submsg.id


class Host:
    """
    Runs contract invocations against a store and a gateway transport.
    """

    def __init__(
        self,
        storage: Storage,
        transport: GatewayTransport,
        contract_address: str,
        chain_id: str = "",
        block_height: int = 0
    ):
        self.storage = storage
        self.transport = transport
        self.contract_address = contract_address
        self.chain_id = chain_id
        self.block_height = block_height
        self.pending_operations: Dict[int, PendingOperation] = {}
        self._next_correlation_id = 1

    @property
    def env(self) -> Env:
        return Env(
            contract_address=self.contract_address,
            chain_id=self.chain_id,
            block_height=self.block_height,
        )

    def instantiate(self, info: MessageInfo, msg: InstantiateMsg) -> Response:
        with StorageTransaction(self.storage) as tx:
            response = contract.instantiate(ContractState(tx), self.env, info, msg)
        return response

    def execute(self, info: MessageInfo, msg: Union[ExecuteMsg, bytes, str]) -> Response:
        """
        Execute a message and every nested call it issues, atomically.

        Args:
            info: Caller and attached funds
            msg: An execute message, or its tagged JSON form

        Returns:
            The final response; a reply's data replaces the caller's data

        Raises:
            CrosstalkError: Any error aborts the invocation and discards
                all of its state writes
        """
        if isinstance(msg, (bytes, str)):
            msg = decode_message(msg, EXECUTE_VARIANTS)

        tag = getattr(msg, "tag", type(msg).__name__)
        self.block_height += 1
        try:
            with StorageTransaction(self.storage) as tx:
                state = ContractState(tx)
                response = contract.execute(state, self.env, info, msg)
                self._dispatch(state, response)
        except Exception as e:
            logger.warning(f"Invocation {tag} from {info.sender} aborted: {e}")
            raise
        logger.debug(f"Invocation {tag} from {info.sender} committed")
        return response

    def query(self, msg: Union[QueryMsg, bytes, str]) -> bytes:
        """Run a query against a read-only view of the store."""
        if isinstance(msg, (bytes, str)):
            msg = decode_message(msg, QUERY_VARIANTS)
        state = ContractState(ReadOnlyStorage(self.storage))
        return contract.query(state, self.env, msg)

    def _dispatch(self, state: ContractState, response: Response) -> None:
        for submsg in list(response.messages):
            operation = self._register(submsg)
            try:
                operation.result = self._call_gateway(submsg)
                self._resolve(state, operation, response)
            finally:
                self.pending_operations.pop(operation.correlation_id, None)

    def _register(self, submsg: SubMsg) -> PendingOperation:
        operation = PendingOperation(self._next_correlation_id, submsg)
        self._next_correlation_id += 1
        self.pending_operations[operation.correlation_id] = operation
        return operation

    def _call_gateway(self, submsg: SubMsg) -> SubMsgResult:
        wasm = submsg.msg
        try:
            return self.transport.execute(self.contract_address, wasm.contract_addr, wasm.msg, wasm.funds)
        except GatewayError as e:
            logger.error(f"Gateway call to {wasm.contract_addr} failed: {e}")
            return SubMsgResult.failure(str(e))

    def _resolve(self, state: ContractState, operation: PendingOperation, response: Response) -> None:
        result = operation.result
        if not operation.submsg.reply_on.wants(result.is_ok):
            if not result.is_ok:
                reason = result.err if isinstance(result.err, str) else repr(result.err)
                raise SubMessageFailedError(operation.reply_id, reason)
            return

        reply_response = contract.reply(state, self.env, Reply(id=operation.reply_id, result=result))
        if reply_response.data is not None:
            response.data = reply_response.data
        response.attributes.extend(reply_response.attributes)
        self._dispatch(state, reply_response)
