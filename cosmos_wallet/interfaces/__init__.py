"""Interfaces for key providers and chain transports."""

from cosmos_wallet.interfaces.transport import (
    KeyProvider,
    QueryConnector,
    QueryTransport,
    SigningConnector,
    SigningTransport,
)

__all__ = [
    "KeyProvider",
    "QueryConnector",
    "QueryTransport",
    "SigningConnector",
    "SigningTransport",
]
