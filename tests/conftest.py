"""
Shared fixtures: a threaded echo server on an ephemeral port and a client connected to it
"""

import socket

import pytest

from echo_rpc.adapters.grpc.client import GrpcClient
from echo_rpc.config import ServerConfig
from echo_rpc.service import create_server

TEST_HOST = "127.0.0.1"


@pytest.fixture
def server():
    """Create and start an echo server on a free port"""
    server = create_server(ServerConfig(host=TEST_HOST, port=0, grace_period=0.5))
    server.start(threaded=True)
    yield server
    server.stop(grace=0)


@pytest.fixture
def client(server):
    """Create a client connected to the test server"""
    client = GrpcClient(server_address=f"{TEST_HOST}:{server.bound_port}", connect_timeout=5.0)
    client.connect()
    yield client
    client.close()


@pytest.fixture
def closed_port():
    """A port nothing listens on"""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((TEST_HOST, 0))
        return sock.getsockname()[1]
