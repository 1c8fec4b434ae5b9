"""
Configuration dataclasses for the CryptoMarket client.

All configuration parameters are defined here with sensible defaults.
Values can be overridden via config.yaml or environment variables.
API credentials are never part of these objects.
"""

from dataclasses import dataclass, field
from typing import List, Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ===========================================
# CRYPTOMARKET API CONFIGURATION
# ===========================================

@dataclass
class CryptoMktConfig:
    """CryptoMarket API configuration."""

    # API origin (production by default; point at staging per environment)
    base_url: str = "https://api.cryptomkt.com"

    # HTTP
    request_timeout: int = 30  # seconds
    pool_connections: int = 10
    pool_maxsize: int = 10
    user_agent: str = "cryptomkt-python"

    # Log every request and response body at DEBUG
    log_responses: bool = False


# ===========================================
# OPERATIONAL CONFIGURATION
# ===========================================

@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    file_path: Optional[str] = None


# ===========================================
# MAIN CLIENT CONFIGURATION
# ===========================================

@dataclass
class ClientConfig:
    """Complete client configuration combining all sub-configs."""

    api: CryptoMktConfig = field(default_factory=CryptoMktConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> List[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if not self.api.base_url.startswith("https://"):
            errors.append(
                f"Base URL {self.api.base_url} is not HTTPS, "
                f"credentials would travel in clear text"
            )

        if self.api.request_timeout <= 0:
            errors.append(
                f"Request timeout must be positive, got {self.api.request_timeout}"
            )

        if self.api.pool_connections <= 0 or self.api.pool_maxsize <= 0:
            errors.append("Connection pool sizes must be positive")

        if self.logging.level.upper() not in LOG_LEVELS:
            errors.append(f"Unknown log level {self.logging.level}")

        return errors
