"""
gRPC server adapter

Binds the echo service contract to a gRPC server: owns the method
registration table, the listening socket and the server lifecycle.
Each call runs on a worker thread of the server's thread pool.
"""

import enum
import logging
import threading
import time
from concurrent import futures
from typing import Callable, Dict, Optional

import grpc
from google.protobuf.message import Message
from opentelemetry import trace

from echo_rpc.adapters.adapter_interface import ServerAdapterInterface
from echo_rpc.config import ServerConfig, DEFAULT_MAX_MESSAGE_BYTES
from echo_rpc.errors import BindError, HandlerError
from echo_rpc.proto import SERVICE_DESCRIPTOR, SERVICE_NAME, method_types
from echo_rpc.telemetry.tracer import create_span, extract_trace_context
from echo_rpc.telemetry.metrics import record_latency, increment_counter

logger = logging.getLogger(__name__)

class ServerState(enum.Enum):
    """Server lifecycle states"""
    UNBOUND = "unbound"
    BOUND = "bound"
    SERVING = "serving"
    STOPPED = "stopped"

class GrpcServer(ServerAdapterInterface):
    """
    gRPC server adapter dispatching unary calls to registered handlers
    """

    def __init__(self,
                 bind_address: str = "127.0.0.1:50052",
                 max_workers: int = 10,
                 max_message_bytes: int = DEFAULT_MAX_MESSAGE_BYTES,
                 grace_period: float = 5.0):
        """Initialize the gRPC server

        Args:
            bind_address: Listening address (host:port, port 0 picks a free port)
            max_workers: Size of the worker thread pool
            max_message_bytes: Largest message accepted or sent
            grace_period: Seconds in-flight calls get to finish on stop()
        """
        self.bind_address = bind_address
        self.max_workers = max_workers
        self.max_message_bytes = max_message_bytes
        self.grace_period = grace_period

        # method name -> handler
        self.methods: Dict[str, Callable[[Message], Message]] = {}

        self.server = None
        self.state = ServerState.UNBOUND
        self.bound_port: Optional[int] = None
        # reentrant: start() binds while holding it
        self._lock = threading.RLock()

        logger.info(f"gRPC server created, bind address: {bind_address}")

    @classmethod
    def from_config(cls, config: ServerConfig) -> "GrpcServer":
        return cls(
            bind_address=config.address,
            max_workers=config.max_workers,
            max_message_bytes=config.max_message_bytes,
            grace_period=config.grace_period,
        )

    def register_method(self, name: str, handler: Callable[[Message], Message]):
        """Register a method handler

        Args:
            name: Method name, must be declared by the service
            handler: Receives the request message and returns the response message

        Raises:
            ValueError: The service declares no such method
            RuntimeError: The server is already bound
        """
        if name not in SERVICE_DESCRIPTOR.methods_by_name:
            raise ValueError(f"{SERVICE_NAME} declares no method {name!r}")
        if not callable(handler):
            raise TypeError(f"Handler for {name} is not callable")

        with self._lock:
            if self.state is not ServerState.UNBOUND:
                raise RuntimeError(f"Cannot register {name} while server is {self.state.value}")
            self.methods[name] = handler

        logger.debug(f"Registered gRPC method: {name}")

    def bind(self) -> int:
        """Create the gRPC server and bind the listening socket

        Returns:
            int: The bound port

        Raises:
            BindError: The address cannot be acquired
        """
        with self._lock:
            if self.state is not ServerState.UNBOUND:
                raise RuntimeError(f"Cannot bind while server is {self.state.value}")

            server = grpc.server(
                futures.ThreadPoolExecutor(max_workers=self.max_workers),
                options=[
                    ('grpc.max_receive_message_length', self.max_message_bytes),
                    ('grpc.max_send_message_length', self.max_message_bytes),
                    # a second server on the same address must fail to bind
                    ('grpc.so_reuseport', 0),
                ]
            )
            server.add_generic_rpc_handlers((self._build_generic_handler(),))

            try:
                port = server.add_insecure_port(self.bind_address)
            except RuntimeError as e:
                # recent grpcio raises, older releases return 0
                logger.debug(f"add_insecure_port failed: {e}")
                port = 0

            if not port:
                self.state = ServerState.STOPPED
                logger.error(f"Failed to bind gRPC server to {self.bind_address}")
                increment_counter("rpc.server.bind_errors", 1)
                raise BindError(f"Failed to bind to address {self.bind_address}")

            self.server = server
            self.bound_port = port
            self.state = ServerState.BOUND

        logger.info(f"gRPC server bound to {self.bind_address} (port {port})")
        return port

    def start(self, threaded: bool = True):
        """Start serving

        Args:
            threaded: Return once serving; otherwise block until the server stops

        Raises:
            BindError: The address cannot be acquired
        """
        with self._lock:
            if self.state is ServerState.SERVING:
                logger.warning("gRPC server is already running")
                return
            if self.state is ServerState.STOPPED:
                raise RuntimeError("gRPC server has been stopped and cannot be restarted")
            if self.state is ServerState.UNBOUND:
                self.bind()

            self.server.start()
            self.state = ServerState.SERVING

        increment_counter("rpc.server.started", 1)
        logger.info(f"gRPC server serving on {self.bind_address}")

        if not threaded:
            self.wait_for_termination()

    def wait_for_termination(self, timeout: Optional[float] = None) -> bool:
        """Block until the server stops

        Args:
            timeout: Seconds to wait (optional)

        Returns:
            bool: True if the wait timed out
        """
        if self.server is None:
            return False
        return self.server.wait_for_termination(timeout)

    def stop(self, grace: Optional[float] = None):
        """Stop the server, giving in-flight calls `grace` seconds to finish"""
        with self._lock:
            if self.state is ServerState.STOPPED:
                logger.warning("gRPC server is not running")
                return
            server, self.server = self.server, None
            self.state = ServerState.STOPPED

        if server is not None:
            grace_period = self.grace_period if grace is None else grace
            server.stop(grace_period).wait()
            logger.info(f"gRPC server stopped, grace period: {grace_period}s")

    def _build_generic_handler(self):
        handlers = {}
        for name, handler in self.methods.items():
            request_type, response_type = method_types(name)
            handlers[name] = grpc.unary_unary_rpc_method_handler(
                self._dispatcher(name, handler, response_type),
                request_deserializer=request_type.FromString,
                response_serializer=response_type.SerializeToString,
            )
        return grpc.method_handlers_generic_handler(SERVICE_NAME, handlers)

    def _dispatcher(self, name: str, handler: Callable[[Message], Message], response_type):
        """Wrap a handler into a gRPC behavior producing exactly one response or status"""

        def dispatch(request, context):
            start_time = time.time()
            increment_counter("rpc.server.requests.received", 1, {"method": name})
            logger.debug(f"Received gRPC request: method={name}, peer={context.peer()}")

            status = None
            response = None
            span_attributes = {"rpc.system": "grpc", "rpc.service": SERVICE_NAME, "rpc.method": name}
            parent = extract_trace_context(context.invocation_metadata())

            completed = threading.Event()

            def on_done():
                if not completed.is_set():
                    logger.info(f"Call {name} from {context.peer()} was cancelled before completion")

            context.add_callback(on_done)

            with create_span(f"{SERVICE_NAME}/{name}", span_attributes,
                             kind=trace.SpanKind.SERVER, context=parent) as span:
                try:
                    response = handler(request)
                except HandlerError as e:
                    logger.warning(f"Method {name} returned error status {e.code.name}: {e.message}")
                    status = (e.code, e.message)
                except Exception as e:
                    logger.exception(f"Error executing method {name}: {e}")
                    status = (grpc.StatusCode.INTERNAL, f"Internal error: {e}")
                else:
                    if not isinstance(response, response_type):
                        logger.error(f"Method {name} returned {type(response).__name__}, "
                                     f"expected {response_type.DESCRIPTOR.name}")
                        status = (grpc.StatusCode.INTERNAL,
                                  f"Internal error: handler returned {type(response).__name__}")

                code = status[0] if status else grpc.StatusCode.OK
                span.set_attribute("rpc.grpc.status_code", code.value[0])

            latency_ms = (time.time() - start_time) * 1000
            record_latency("rpc.server.request.latency", latency_ms, {"method": name})

            completed.set()

            if status is not None:
                increment_counter("rpc.server.method.errors", 1, {"method": name, "code": code.name})
                context.abort(*status)

            logger.debug(f"Sent gRPC response, latency: {latency_ms:.2f}ms")
            return response

        return dispatch
