"""
Transport adapter interface

Defines the call-level contract every transport adapter implements, so the
service layer never deals with framing or connection management.
"""

import abc
from typing import Callable, Optional

from google.protobuf.message import Message

class ClientAdapterInterface(abc.ABC):
    """Client adapter interface: connect, invoke, close"""
    
    @abc.abstractmethod
    def connect(self) -> None:
        """Open the connection to the server
        
        Raises:
            RpcConnectionError: The server is unreachable or the handshake failed
        """
        pass
    
    @abc.abstractmethod
    def call(self, method: str, request: Message, timeout: Optional[float] = None) -> Message:
        """Send a unary request and wait for its response
        
        Args:
            method: Method name declared by the service
            request: Request message
            timeout: Call deadline in seconds (optional)
            
        Returns:
            Message: The decoded response
            
        Raises:
            RpcConnectionError: Connection failed
            CallError: The call finished with a non-OK status
        """
        pass
    
    @abc.abstractmethod
    def close(self) -> None:
        """Close the connection and release resources"""
        pass

class ServerAdapterInterface(abc.ABC):
    """Server adapter interface: register, start, stop"""
    
    @abc.abstractmethod
    def register_method(self, name: str, handler: Callable[[Message], Message]):
        """Register a method handler
        
        Args:
            name: Method name
            handler: Receives the request message and returns the response message
        """
        pass
    
    @abc.abstractmethod
    def start(self, threaded: bool = True):
        """Bind and start serving
        
        Args:
            threaded: Return once serving instead of blocking
        """
        pass
    
    @abc.abstractmethod
    def stop(self, grace: Optional[float] = None):
        """Stop the server"""
        pass
