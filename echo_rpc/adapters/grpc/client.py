"""
gRPC client adapter

Opens a channel to the echo server and issues unary calls on it. One channel
is reused for every call and may be shared between threads.
"""

import logging
import threading
import time
from typing import Dict, Optional

import grpc
from google.protobuf.message import Message
from opentelemetry import trace

from echo_rpc.adapters.adapter_interface import ClientAdapterInterface
from echo_rpc.config import ClientConfig, DEFAULT_MAX_MESSAGE_BYTES
from echo_rpc.errors import CallError, RpcConnectionError
from echo_rpc.proto import SERVICE_NAME, method_path, method_types
from echo_rpc.telemetry.tracer import create_span, inject_trace_metadata
from echo_rpc.telemetry.metrics import record_latency, increment_counter

logger = logging.getLogger(__name__)

_SETTLED_STATES = (
    grpc.ChannelConnectivity.READY,
    grpc.ChannelConnectivity.TRANSIENT_FAILURE,
    grpc.ChannelConnectivity.SHUTDOWN,
)

class GrpcClient(ClientAdapterInterface):
    """
    gRPC client adapter presenting unary calls as blocking method calls
    """

    def __init__(self,
                 server_address: str = "127.0.0.1:50052",
                 connect_timeout: Optional[float] = 5.0,
                 timeout: Optional[float] = None,
                 max_message_bytes: int = DEFAULT_MAX_MESSAGE_BYTES):
        """Initialize the gRPC client

        Args:
            server_address: Server address (host:port)
            connect_timeout: Seconds to wait for the channel to become ready
            timeout: Default call deadline in seconds (None: no deadline)
            max_message_bytes: Largest message accepted or sent
        """
        self.server_address = server_address
        self.connect_timeout = connect_timeout
        self.timeout = timeout
        self.max_message_bytes = max_message_bytes

        self.channel = None
        self._callables: Dict[str, grpc.UnaryUnaryMultiCallable] = {}
        self._lock = threading.Lock()

        logger.debug(f"gRPC client created, server address: {server_address}")

    @classmethod
    def from_config(cls, config: ClientConfig) -> "GrpcClient":
        return cls(
            server_address=config.address,
            connect_timeout=config.connect_timeout,
            timeout=config.call_timeout,
            max_message_bytes=config.max_message_bytes,
        )

    @property
    def is_connected(self) -> bool:
        return self.channel is not None

    def connect(self) -> None:
        """Open the channel and wait for the HTTP/2 handshake to complete

        Raises:
            RpcConnectionError: The server refused the connection or did not
                become reachable within connect_timeout
        """
        with self._lock:
            if self.channel is not None:
                return

            options = [
                ('grpc.max_receive_message_length', self.max_message_bytes),
                ('grpc.max_send_message_length', self.max_message_bytes)
            ]
            channel = grpc.insecure_channel(self.server_address, options=options)

            state = self._wait_for_connectivity(channel)
            if state is not grpc.ChannelConnectivity.READY:
                channel.close()
                logger.error(f"Failed to connect to gRPC server {self.server_address}")
                increment_counter("rpc.client.errors", 1, {"type": "connect"})
                if state is None:
                    reason = f"within {self.connect_timeout}s"
                else:
                    reason = "(connection refused or unreachable)"
                raise RpcConnectionError(f"Unable to connect to {self.server_address} {reason}")

            self.channel = channel
            self._callables.clear()

        logger.info(f"Connected to gRPC server: {self.server_address}")

    def _wait_for_connectivity(self, channel) -> Optional[grpc.ChannelConnectivity]:
        """Drive the channel to its first settled state

        Returns READY, TRANSIENT_FAILURE or SHUTDOWN, whichever the channel
        reaches first, or None if connect_timeout expires before that.
        """
        settled = threading.Event()
        outcome = []

        def on_change(connectivity):
            if connectivity in _SETTLED_STATES and not outcome:
                outcome.append(connectivity)
                settled.set()

        channel.subscribe(on_change, try_to_connect=True)
        try:
            settled.wait(self.connect_timeout)
        finally:
            channel.unsubscribe(on_change)
        return outcome[0] if outcome else None

    def _multicallable(self, method: str) -> grpc.UnaryUnaryMultiCallable:
        request_type, response_type = method_types(method)
        with self._lock:
            if self.channel is None:
                raise RpcConnectionError(f"Client for {self.server_address} is closed")
            if method not in self._callables:
                self._callables[method] = self.channel.unary_unary(
                    method_path(method),
                    request_serializer=request_type.SerializeToString,
                    response_deserializer=response_type.FromString,
                )
            return self._callables[method]

    def call(self, method: str, request: Message, timeout: Optional[float] = None) -> Message:
        """Send a unary request and wait for its response

        Args:
            method: Method name declared by the service
            request: Request message
            timeout: Call deadline in seconds, overrides the client default

        Returns:
            Message: The decoded response

        Raises:
            RpcConnectionError: Connection failed
            CallError: The call finished with a non-OK status
        """
        try:
            request_type, _ = method_types(method)
        except KeyError:
            raise CallError(f"{SERVICE_NAME} declares no method {method!r}",
                            grpc.StatusCode.UNIMPLEMENTED) from None

        if not isinstance(request, request_type):
            raise CallError(
                f"{method} expects {request_type.DESCRIPTOR.name}, got {type(request).__name__}",
                grpc.StatusCode.INVALID_ARGUMENT
            )

        self.connect()
        multicallable = self._multicallable(method)

        deadline = timeout if timeout is not None else self.timeout
        span_attributes = {"rpc.system": "grpc", "rpc.service": SERVICE_NAME, "rpc.method": method}
        increment_counter("rpc.client.requests", 1, {"method": method})
        start_time = time.time()

        with create_span(f"{SERVICE_NAME}/{method}", span_attributes, kind=trace.SpanKind.CLIENT) as span:
            try:
                response = multicallable(request, timeout=deadline, metadata=inject_trace_metadata())
            except grpc.RpcError as e:
                code = e.code()
                details = e.details() or code.name
                span.set_attribute("rpc.grpc.status_code", code.value[0])
                logger.error(f"gRPC error: {code.name}: {details}")
                increment_counter("rpc.client.errors", 1, {"type": "grpc_error", "method": method,
                                                           "code": code.name})
                raise CallError(details, code) from e

        latency_ms = (time.time() - start_time) * 1000
        record_latency("rpc.client.latency", latency_ms, {"method": method})
        increment_counter("rpc.client.success", 1, {"method": method})
        logger.debug(f"Received gRPC response, latency: {latency_ms:.2f}ms")

        return response

    def close(self) -> None:
        """Close the channel and release resources"""
        with self._lock:
            channel, self.channel = self.channel, None
            self._callables.clear()

        if channel is not None:
            channel.close()
            logger.debug("gRPC client closed")

    def __enter__(self) -> "GrpcClient":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_value, tb) -> None:
        self.close()
