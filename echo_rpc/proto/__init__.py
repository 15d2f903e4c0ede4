"""
Echo service schema

Message classes and the service descriptor for ``echo.proto``.
"""

from .echo_schema import (
    DESCRIPTOR,
    SERVICE_DESCRIPTOR,
    SERVICE_NAME,
    EchoRequest,
    EchoResponse,
    method_path,
    method_types,
)

__all__ = [
    "DESCRIPTOR",
    "SERVICE_DESCRIPTOR",
    "SERVICE_NAME",
    "EchoRequest",
    "EchoResponse",
    "method_path",
    "method_types",
]
