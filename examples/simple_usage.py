#!/usr/bin/env python3
"""
Simple example of using the Crosstalk SDK.
"""
import json
import logging
import os

from crosstalk_sdk import CrosstalkClient, Host, JsonFileStorage, MemoryStorage, NetworkConfig
from crosstalk_sdk.abi import SolidityValue, abi_encode_tuple
from crosstalk_sdk.exceptions import CrosstalkError
from crosstalk_sdk.gateway import get_transport
from crosstalk_sdk.messages import InstantiateMsg
from crosstalk_sdk.models import MessageInfo


def main():
    """
    Demonstrate basic usage of the CrosstalkClient.

    This example shows how to:
    1. Run the contract on a host with the stub gateway
    2. Send a request to a handler on another chain
    3. Deliver an inbound request and read back the contract state
    """
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))

    # Read configuration from environment
    network = os.environ.get("CROSSTALK_NETWORK", "localnet")
    state_path = os.environ.get("CROSSTALK_STATE_PATH")
    contract_address = os.environ.get("CONTRACT_ADDRESS", "router1handlercontract")
    dest_chain_id = os.environ.get("DEST_CHAIN_ID", "80001")
    handler_address = os.environ.get("HANDLER_ADDRESS", "0x1234567890123456789012345678901234567890")

    storage = JsonFileStorage(state_path) if state_path else MemoryStorage()
    transport = get_transport(NetworkConfig.get_gateway_address(network))

    host = Host(storage, transport, contract_address, chain_id=NetworkConfig.get_chain_id(network))
    host.instantiate(MessageInfo(sender="router1deployer"), InstantiateMsg())
    client = CrosstalkClient(host, sender="router1alice", network=network)

    try:
        # Send a request; the gateway's request identifier lands in the ledger
        response = client.send(dest_chain_id, handler_address, b'{"greeting": "hello"}')
        print(f"Request sent: {json.loads(response.data)}")
        print(f"Pending requests: {client.pending_requests()}")

        # Deliver a request from the other chain, as the gateway would
        packet = abi_encode_tuple([SolidityValue.bytes_(b'{"register": {"name": "alice"}}')])
        client.receive(dest_chain_id, handler_address, packet)
        print(f"alice resolves to: {client.resolve_record('alice').address}")

    except CrosstalkError as e:
        print(f"Error: {str(e)}")
    finally:
        transport.close()


if __name__ == "__main__":
    main()
