"""
echo_rpc - Minimal Echo RPC Service

A unary gRPC service exposing a single ``Echo`` method:

1. Message Schema: ``EchoRequest`` / ``EchoResponse`` protobuf messages (package ``api``)
2. Transport: gRPC over plaintext HTTP/2 (``adapters.grpc``)
3. Service: the echo handler and the client stub (``service``)

Both sides propagate OpenTelemetry trace context and record metrics.
"""

__version__ = "0.1.0"
