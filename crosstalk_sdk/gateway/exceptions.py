"""
Exceptions for the Gateway module.
"""
from typing import Optional

from ..exceptions import CrosstalkError


class GatewayError(CrosstalkError):
    """Base exception for Gateway-related errors."""
    pass


class GatewayConnectionError(GatewayError):
    """Raised when the transport is used before it is initialized."""
    pass


class GatewayResponseError(GatewayError):
    """Raised when the gateway rejects an instruction."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        self.error_code = error_code
        super().__init__(message)


class UnsupportedChainError(GatewayResponseError):
    """Raised when the destination chain is not served by the gateway."""

    def __init__(self, chain_id: str):
        self.chain_id = chain_id
        super().__init__(f"Unsupported destination chain: {chain_id}", "UNSUPPORTED_CHAIN")
