"""
Command line entry points

- echo-server: a simple echo microservice
- echo-client: a simple CLI to send messages to a server
"""
import argparse
import logging
import sys
from typing import List, Optional

from echo_rpc import __version__
from echo_rpc.adapters.grpc.client import GrpcClient
from echo_rpc.config import ClientConfig, ServerConfig, DEFAULT_HOST, DEFAULT_PORT, format_address, parse_port
from echo_rpc.errors import BindError, RpcError
from echo_rpc.proto import EchoRequest
from echo_rpc.service import EchoClient, create_server
from echo_rpc.telemetry import setup_metrics, setup_tracer

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s - %(message)s'


def _port(value: str) -> int:
    try:
        return parse_port(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _add_common_arguments(parser: argparse.ArgumentParser, default_log_level: str):
    parser.add_argument("-s", "--server", default=DEFAULT_HOST,
                        help="host to bind or connect to (default: %(default)s)")
    parser.add_argument("-p", "--port", type=_port, default=DEFAULT_PORT,
                        help="TCP port (default: %(default)s)")
    parser.add_argument("--log-level", default=default_log_level,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="logging level (default: %(default)s)")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


_ESCAPES = {"\t": "\\t", "\r": "\\r", "\n": "\\n", "\\": "\\\\", '"': '\\"', "\0": "\\0"}


def format_message(message: str) -> str:
    """Render a message as a double-quoted string literal

    Quotes, backslashes and common control characters get backslash escapes;
    other unprintable characters become \\u{hex}. Printable non-ASCII text
    is kept as is.
    """
    parts = []
    for ch in message:
        if ch in _ESCAPES:
            parts.append(_ESCAPES[ch])
        elif not ch.isprintable():
            parts.append(f"\\u{{{ord(ch):x}}}")
        else:
            parts.append(ch)
    return '"' + "".join(parts) + '"'


def build_server_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="echo-server", description="echo-server - a simple echo microservice")
    _add_common_arguments(parser, "INFO")
    parser.add_argument("--max-workers", type=int, default=10,
                        help="worker threads handling calls (default: %(default)s)")
    parser.add_argument("--otlp-endpoint", help="export traces and metrics to this OTLP receiver")
    return parser


def build_client_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="echo-client",
                                     description="echo - a simple CLI to send messages to a server")
    _add_common_arguments(parser, "WARNING")
    parser.add_argument("--connect-timeout", type=float, default=5.0,
                        help="seconds to wait for the server (default: %(default)s)")
    parser.add_argument("--timeout", type=float, default=None,
                        help="call deadline in seconds (default: none)")
    parser.add_argument("message", help="The message to send")
    return parser


def server_main(argv: Optional[List[str]] = None) -> int:
    parser = build_server_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT)

    try:
        config = ServerConfig(host=args.server, port=args.port, max_workers=args.max_workers)
    except ValueError as e:
        parser.error(str(e))

    if args.otlp_endpoint:
        setup_tracer("echo-server", args.otlp_endpoint)
        setup_metrics("echo-server", args.otlp_endpoint)

    server = create_server(config)
    try:
        port = server.bind()
    except BindError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(f"Server listening on {format_address(config.host, port)}", flush=True)

    try:
        server.start(threaded=False)
    except KeyboardInterrupt:
        logger.info("Received interrupt, stopping server...")
    finally:
        server.stop()
    return 0


def client_main(argv: Optional[List[str]] = None) -> int:
    parser = build_client_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT)

    try:
        config = ClientConfig(
            host=args.server,
            port=args.port,
            message=args.message,
            connect_timeout=args.connect_timeout,
            call_timeout=args.timeout,
        )
    except ValueError as e:
        parser.error(str(e))

    try:
        with GrpcClient.from_config(config) as connection:
            response = EchoClient(connection).echo(EchoRequest(message=config.message))
    except RpcError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(f"RESPONSE={format_message(response.message)}")
    return 0


def run_server():
    sys.exit(server_main())


def run_client():
    sys.exit(client_main())
