"""
Remote end communication: capability encoding, the new-session handshake,
the W3C response codec, transports, sessions and session suppliers.
"""

from .codec import W3CHttpResponseCodec, parse_json
from .encoder import W3C_CAPABILITY_NAMES, encode_new_session, is_w3c_key, to_legacy, to_w3c
from .handshake import SESSION_SHAPES, ProtocolHandshake, SessionShape, match_session_shape
from .session import RemoteSession
from .suppliers import (
    ExternalServerSupplier,
    LocalServiceSupplier,
    RemoteSessionSupplier,
    SessionSupplier,
    create_supplier,
)
from .transport import HttpxTransport, Transport

__all__ = [
    # Encoding
    "W3C_CAPABILITY_NAMES",
    "encode_new_session",
    "is_w3c_key",
    "to_legacy",
    "to_w3c",
    # Handshake
    "SESSION_SHAPES",
    "ProtocolHandshake",
    "SessionShape",
    "match_session_shape",
    # Codec
    "W3CHttpResponseCodec",
    "parse_json",
    # Transport and sessions
    "HttpxTransport",
    "Transport",
    "RemoteSession",
    # Suppliers
    "SessionSupplier",
    "RemoteSessionSupplier",
    "ExternalServerSupplier",
    "LocalServiceSupplier",
    "create_supplier",
]
