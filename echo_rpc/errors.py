"""
RPC error taxonomy

Every failure surfaced by the transport carries a gRPC status code and a
human-readable message.
"""

from typing import Optional

import grpc


class RpcError(Exception):
    """Base class for all echo_rpc errors."""

    default_code = grpc.StatusCode.UNKNOWN

    def __init__(self, message: str, code: Optional[grpc.StatusCode] = None):
        self.code = code if code is not None else self.default_code
        self.message = message
        super().__init__(f"{self.code.name}: {message}")


class BindError(RpcError, OSError):
    """Raised when the server cannot acquire its listening address."""

    default_code = grpc.StatusCode.UNAVAILABLE


class RpcConnectionError(RpcError, ConnectionError):
    """Raised when the client cannot reach or handshake with the server."""

    default_code = grpc.StatusCode.UNAVAILABLE


class CallError(RpcError):
    """Raised when an in-flight call terminates with a non-OK status."""


class HandlerError(RpcError):
    """Raised by a method handler to answer the call with a specific error status."""

    def __init__(self, message: str, code: Optional[grpc.StatusCode] = None):
        if code == grpc.StatusCode.OK:
            raise ValueError("HandlerError cannot carry status OK")
        super().__init__(message, code)
