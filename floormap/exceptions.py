"""Custom exceptions for floormap package."""


class FloorMapError(Exception):
    """Base exception for all floormap errors."""

    pass


class NetworkError(FloorMapError):
    """Raised when a network request fails."""

    pass


class ParseError(FloorMapError):
    """Raised when an API response cannot be parsed."""

    pass


class ValidationError(FloorMapError):
    """Raised when data validation fails."""

    pass


class ConfigurationError(FloorMapError):
    """Raised when required settings are missing or invalid."""

    pass


class ClusteringError(FloorMapError):
    """Raised when the spatial index cannot be built or queried."""

    pass
