"""Thin async clients for the CLOB, the relayer and on-chain reads."""

from .chain import ChainReader
from .clob import AccessLevel, ClobClient
from .http import BaseHTTPClient
from .relayer import RelayClient

__all__ = [
    "AccessLevel",
    "BaseHTTPClient",
    "ChainReader",
    "ClobClient",
    "RelayClient",
]
