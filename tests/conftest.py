"""
Pytest fixtures for the Crosstalk SDK tests.
"""
import pytest

from crosstalk_sdk.abi import SolidityValue, abi_encode_tuple
from crosstalk_sdk.client import CrosstalkClient
from crosstalk_sdk.config import NetworkConfig
from crosstalk_sdk.gateway._rate_limited_log import reset_rate_limits
from crosstalk_sdk.gateway.stub_transport import StubTransport
from crosstalk_sdk.host import Host
from crosstalk_sdk.messages import InstantiateMsg
from crosstalk_sdk.models import Coin, Config, MessageInfo
from crosstalk_sdk.state import ContractState
from crosstalk_sdk.storage import MemoryStorage

# Constants for testing
TEST_CONTRACT = "router1handlercontract"
TEST_GATEWAY = "router1localgateway"
TEST_DEST_CHAIN = "80001"
TEST_HANDLER = "0x1234567890123456789012345678901234567890"
ALICE = "router1alice"
BOB = "router1bob"


def abi_wrap(payload: bytes) -> bytes:
    """Encode a payload the way the other chain sends it: as a (bytes,) tuple."""
    return abi_encode_tuple([SolidityValue.bytes_(payload)])


@pytest.fixture(autouse=True)
def _reset_module_caches(monkeypatch):
    """Isolate tests from the environment and from each other's caches."""
    monkeypatch.delenv("CROSSTALK_NETWORK", raising=False)
    monkeypatch.delenv("CROSSTALK_GATEWAY_ADDRESS", raising=False)
    NetworkConfig._networks_cache = None
    reset_rate_limits()
    yield
    NetworkConfig._networks_cache = None
    reset_rate_limits()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def state(storage):
    """Contract state over a bare store, with an instantiated config."""
    contract_state = ContractState(storage)
    contract_state.config.save(Config())
    return contract_state


@pytest.fixture
def transport():
    stub = StubTransport()
    stub.initialize(TEST_GATEWAY)
    return stub


@pytest.fixture
def host(storage, transport):
    """A host with a free-of-charge instantiated contract."""
    contract_host = Host(storage, transport, TEST_CONTRACT, chain_id="router_9600-1")
    contract_host.instantiate(MessageInfo(sender=ALICE), InstantiateMsg())
    return contract_host


@pytest.fixture
def priced_host(storage, transport):
    """A host whose contract charges for registration and transfer."""
    contract_host = Host(storage, transport, TEST_CONTRACT)
    contract_host.instantiate(
        MessageInfo(sender=ALICE),
        InstantiateMsg(
            purchase_price=Coin(denom="route", amount=100),
            transfer_price=Coin(denom="route", amount=50),
        ),
    )
    return contract_host


@pytest.fixture
def client(host):
    return CrosstalkClient(host, sender=ALICE)
