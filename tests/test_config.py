"""
Tests for server and client configuration
"""
import os
import pytest
from unittest.mock import patch

from echo_rpc.config import (
    ClientConfig,
    ServerConfig,
    format_address,
    parse_port,
)


class TestParsePort:
    """Test port validation"""

    @pytest.mark.parametrize("value, expected", [
        (0, 0),
        (50052, 50052),
        (65535, 65535),
        ("8080", 8080),
        (" 443 ", 443),
    ])
    def test_valid_ports(self, value, expected):
        assert parse_port(value) == expected

    @pytest.mark.parametrize("value", [-1, 65536, "70000", "abc", "", "-5", "80.0", 80.0, None, True, "٥٠٠٥٢", "５０"])
    def test_invalid_ports(self, value):
        with pytest.raises(ValueError):
            parse_port(value)


class TestFormatAddress:
    def test_ipv4(self):
        assert format_address("127.0.0.1", 50052) == "127.0.0.1:50052"

    def test_hostname(self):
        assert format_address("localhost", 1) == "localhost:1"

    def test_ipv6_is_bracketed(self):
        assert format_address("::1", 50052) == "[::1]:50052"
        assert format_address("[::1]", 50052) == "[::1]:50052"


class TestServerConfig:
    """Test server configuration"""

    def test_defaults(self):
        config = ServerConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 50052
        assert config.address == "127.0.0.1:50052"
        assert config.max_workers == 10

    def test_port_string_is_parsed(self):
        assert ServerConfig(port="6000").port == 6000

    def test_ephemeral_port_allowed(self):
        assert ServerConfig(port=0).port == 0

    def test_invalid_values(self):
        with pytest.raises(ValueError):
            ServerConfig(port=70000)
        with pytest.raises(ValueError):
            ServerConfig(host="")
        with pytest.raises(ValueError):
            ServerConfig(max_workers=0)

    def test_is_read_only(self):
        config = ServerConfig()
        with pytest.raises(AttributeError):
            config.port = 1

    def test_from_env(self):
        with patch.dict(os.environ, {
            "ECHO_RPC_HOST": "0.0.0.0",
            "ECHO_RPC_PORT": "6001",
            "ECHO_RPC_MAX_WORKERS": "4"
        }):
            config = ServerConfig.from_env()
            assert config.host == "0.0.0.0"
            assert config.port == 6001
            assert config.max_workers == 4

    def test_from_env_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = ServerConfig.from_env()
            assert config == ServerConfig()

    def test_to_dict(self):
        config_dict = ServerConfig(port=7000).to_dict()
        assert config_dict["port"] == 7000
        assert config_dict["host"] == "127.0.0.1"
        assert config_dict["max_workers"] == 10


class TestClientConfig:
    """Test client configuration"""

    def test_defaults(self):
        config = ClientConfig(message="hi")
        assert config.address == "127.0.0.1:50052"
        assert config.message == "hi"
        assert config.connect_timeout == 5.0
        assert config.call_timeout is None

    def test_zero_port_rejected(self):
        with pytest.raises(ValueError):
            ClientConfig(port=0)

    def test_message_must_be_text(self):
        with pytest.raises(ValueError):
            ClientConfig(message=b"bytes")

    def test_from_env(self):
        with patch.dict(os.environ, {
            "ECHO_RPC_HOST": "echo.internal",
            "ECHO_RPC_PORT": "7000",
            "ECHO_RPC_CONNECT_TIMEOUT": "1.5",
            "ECHO_RPC_CALL_TIMEOUT": "2"
        }):
            config = ClientConfig.from_env("payload")
            assert config.address == "echo.internal:7000"
            assert config.message == "payload"
            assert config.connect_timeout == 1.5
            assert config.call_timeout == 2.0

    def test_from_env_invalid_port(self):
        with patch.dict(os.environ, {"ECHO_RPC_PORT": "not-a-port"}):
            with pytest.raises(ValueError, match="Invalid port"):
                ClientConfig.from_env()
