"""Utilities for the CryptoMarket client."""
