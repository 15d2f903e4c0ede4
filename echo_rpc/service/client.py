"""
Echo client stub
"""

from echo_rpc.adapters.adapter_interface import ClientAdapterInterface
from echo_rpc.proto import EchoRequest, EchoResponse


class EchoClient:
    """Client stub for EchoService

    Wraps an established connection; every call blocks until the response or
    the error status arrives. Failed calls are not retried.
    """

    def __init__(self, connection: ClientAdapterInterface):
        self.connection = connection

    def echo(self, request: EchoRequest) -> EchoResponse:
        """Call Echo on the server

        Raises:
            RpcConnectionError: The server is unreachable
            CallError: The call ended with an error status
        """
        return self.connection.call("Echo", request)
