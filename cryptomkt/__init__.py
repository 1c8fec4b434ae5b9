"""CryptoMarket exchange REST client."""

from .api import CryptoMktClient, OrderSide

__version__ = "0.1.0"

__all__ = ["CryptoMktClient", "OrderSide", "__version__"]
