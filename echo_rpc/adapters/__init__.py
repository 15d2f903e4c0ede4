"""
Transport Adapters Module

Adapter implementations binding the echo service contract to a wire protocol:
- grpc: gRPC over plaintext HTTP/2

Adapters carry OpenTelemetry trace context in call metadata.
"""

from .adapter_interface import ClientAdapterInterface, ServerAdapterInterface

__all__ = [
    "ClientAdapterInterface",
    "ServerAdapterInterface"
]
