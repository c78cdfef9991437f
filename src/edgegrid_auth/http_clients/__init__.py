"""
HTTP transport module for EdgeGrid SDK

This module provides the transports that send signed requests. The signer
only depends on their ``send(request)`` method, so either can be swapped for
any custom collaborator.
"""

from .transports import (
    Transport,
    RequestsTransport,
    HttpxTransport,
    build_wire_headers,
    read_content,
)

__all__ = [
    'Transport',
    'RequestsTransport',
    'HttpxTransport',
    'build_wire_headers',
    'read_content',
]
