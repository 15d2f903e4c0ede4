"""
Echo handler

Stateless business logic for the Echo method and the factory that wires it
into a gRPC server.
"""

import logging

from echo_rpc.adapters.grpc.server import GrpcServer
from echo_rpc.config import ServerConfig
from echo_rpc.proto import EchoRequest, EchoResponse

logger = logging.getLogger(__name__)


class EchoHandler:
    """Answers every request with its own message, unchanged"""

    def echo(self, request: EchoRequest) -> EchoResponse:
        logger.info(f"Got a request: message={request.message!r}")
        return EchoResponse(message=request.message)


def create_server(config: ServerConfig, handler: EchoHandler = None) -> GrpcServer:
    """Create an unbound gRPC server with the Echo method registered

    Args:
        config: Server configuration
        handler: Handler instance (a fresh EchoHandler by default)

    Returns:
        GrpcServer: Server ready to start()
    """
    handler = handler or EchoHandler()
    server = GrpcServer.from_config(config)
    server.register_method("Echo", handler.echo)
    return server
