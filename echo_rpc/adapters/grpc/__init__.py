"""
gRPC transport adapter
"""

from .client import GrpcClient
from .server import GrpcServer, ServerState

__all__ = ["GrpcClient", "GrpcServer", "ServerState"]
