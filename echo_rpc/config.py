"""
Configuration settings for the echo server and client
"""
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 50052
DEFAULT_MAX_MESSAGE_BYTES = 4 * 1024 * 1024


def parse_port(value: Any) -> int:
    """Parse a TCP port, accepting ints and decimal strings in 0..65535

    Raises:
        ValueError: The value is not an unsigned 16-bit integer
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid port: {value!r}")
    if isinstance(value, str):
        text = value.strip()
        if not (text.isascii() and text.isdigit()):
            raise ValueError(f"Invalid port: {value!r}")
        value = int(text)
    if not isinstance(value, int) or not 0 <= value <= 65535:
        raise ValueError(f"Invalid port: {value!r} (expected 0-65535)")
    return value


def format_address(host: str, port: int) -> str:
    """Format host and port as a gRPC target, bracketing IPv6 literals"""
    if ":" in host and not host.startswith("["):
        host = f"[{host}]"
    return f"{host}:{port}"


def _validate_host(host: Any) -> None:
    if not isinstance(host, str) or not host.strip():
        raise ValueError(f"Invalid host: {host!r}")


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    return float(raw) if raw else None


@dataclass(frozen=True)
class ServerConfig:
    """Configuration for the echo server"""
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    max_workers: int = 10
    max_message_bytes: int = DEFAULT_MAX_MESSAGE_BYTES
    grace_period: float = 5.0

    def __post_init__(self):
        _validate_host(self.host)
        object.__setattr__(self, "port", parse_port(self.port))
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {self.max_workers}")

    @property
    def address(self) -> str:
        return format_address(self.host, self.port)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Create config from environment variables"""
        return cls(
            host=os.getenv("ECHO_RPC_HOST", DEFAULT_HOST),
            port=os.getenv("ECHO_RPC_PORT", str(DEFAULT_PORT)),
            max_workers=int(os.getenv("ECHO_RPC_MAX_WORKERS", "10")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "max_workers": self.max_workers,
            "max_message_bytes": self.max_message_bytes,
            "grace_period": self.grace_period,
        }


@dataclass(frozen=True)
class ClientConfig:
    """Configuration for the echo client"""
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    message: str = ""
    connect_timeout: float = 5.0
    call_timeout: Optional[float] = None  # no deadline unless set
    max_message_bytes: int = DEFAULT_MAX_MESSAGE_BYTES

    def __post_init__(self):
        _validate_host(self.host)
        port = parse_port(self.port)
        if port == 0:
            raise ValueError("Client port must be non-zero")
        object.__setattr__(self, "port", port)
        if not isinstance(self.message, str):
            raise ValueError(f"message must be a string, got {type(self.message).__name__}")

    @property
    def address(self) -> str:
        return format_address(self.host, self.port)

    @classmethod
    def from_env(cls, message: str = "") -> "ClientConfig":
        """Create config from environment variables"""
        return cls(
            host=os.getenv("ECHO_RPC_HOST", DEFAULT_HOST),
            port=os.getenv("ECHO_RPC_PORT", str(DEFAULT_PORT)),
            message=message,
            connect_timeout=float(os.getenv("ECHO_RPC_CONNECT_TIMEOUT", "5.0")),
            call_timeout=_optional_float("ECHO_RPC_CALL_TIMEOUT"),
        )
