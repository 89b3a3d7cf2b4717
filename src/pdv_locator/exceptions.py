"""Custom exceptions for pdv-locator."""


class PdvLocatorError(Exception):
    """Base exception for pdv-locator."""

    pass


class InvalidInputError(PdvLocatorError):
    """Raised when a product id, coordinate or postal code is malformed."""

    pass


class PostalCodeNotFoundError(PdvLocatorError):
    """Raised when a postal code cannot be turned into coordinates."""

    pass


class DatasetError(PdvLocatorError):
    """Raised when a CSV dataset cannot be read."""

    pass


class GeocoderError(PdvLocatorError):
    """Base exception for failures of an external lookup provider."""

    pass


class AuthenticationError(GeocoderError):
    """Raised when the provider API key is invalid or missing."""

    pass


class RateLimitError(GeocoderError):
    """Raised when the provider rate limit or quota is exceeded."""

    pass


class ProviderUnavailableError(GeocoderError):
    """Raised when the provider cannot be reached or answers garbage."""

    pass
