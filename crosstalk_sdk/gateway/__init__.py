"""
Gateway module for the Crosstalk SDK.

The gateway relays instructions between this chain and other chains. This
module defines the transport interface the host dispatches gateway calls
through, plus an in-process stub.
"""
from .exceptions import (
    GatewayConnectionError, GatewayError, GatewayResponseError, UnsupportedChainError
)
from .stub_transport import SentRequest, StubTransport
from .transport import GatewayTransport, get_transport

__all__ = ['GatewayTransport', 'StubTransport', 'SentRequest', 'get_transport',
           'GatewayError', 'GatewayConnectionError', 'GatewayResponseError',
           'UnsupportedChainError']
