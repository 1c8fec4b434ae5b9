"""Configuration module for the CryptoMarket client."""

from .settings import (
    CryptoMktConfig,
    LoggingConfig,
    ClientConfig,
)

__all__ = [
    "CryptoMktConfig",
    "LoggingConfig",
    "ClientConfig",
]
