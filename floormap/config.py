"""Environment-driven settings for floormap clients."""

import logging
import os

from pydantic import BaseModel, Field

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class FloorMapConfig(BaseModel):
    """Connection settings for the floor-map API."""

    base_url: str = Field(description="Root URL of the floor-map server (e.g., 'https://map.example.com')")
    timeout: float = Field(default=DEFAULT_TIMEOUT, description="Request timeout in seconds")

    model_config = {"frozen": True}

    @classmethod
    def from_env(cls, base_url: str | None = None, timeout: float | None = None) -> "FloorMapConfig":
        """Build settings from arguments, falling back to environment variables.

        Args:
            base_url: Server URL (default: read from FLOORMAP_BASE_URL env var)
            timeout: Timeout in seconds (default: FLOORMAP_TIMEOUT env var or 30)

        Returns:
            FloorMapConfig instance

        Raises:
            ConfigurationError: If no base URL is available or the timeout is invalid
        """
        base_url = base_url or os.environ.get("FLOORMAP_BASE_URL")
        if not base_url:
            raise ConfigurationError(
                "Base URL must be provided either as an argument or "
                "via the FLOORMAP_BASE_URL environment variable"
            )

        if timeout is None:
            raw_timeout = os.environ.get("FLOORMAP_TIMEOUT")
            try:
                timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
            except ValueError as e:
                raise ConfigurationError(f"Invalid FLOORMAP_TIMEOUT: {raw_timeout}") from e

        if timeout <= 0:
            raise ConfigurationError(f"Timeout must be positive, got {timeout}")

        logger.debug(f"Loaded floor-map config for {base_url} (timeout: {timeout}s)")
        return cls(base_url=base_url.rstrip("/"), timeout=timeout)
