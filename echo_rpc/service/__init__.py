"""
Echo service

- handler: server-side business logic and the server factory
- client: client stub presenting Echo as a local call
"""

from .handler import EchoHandler, create_server
from .client import EchoClient

__all__ = ["EchoHandler", "EchoClient", "create_server"]
