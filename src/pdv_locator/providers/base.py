"""Base provider interfaces."""

from abc import ABC, abstractmethod

from pdv_locator.schema import Coordinates


class BaseGeocodeProvider(ABC):
    """Abstract base class for address geocoders."""

    @abstractmethod
    async def geocode(self, address: str) -> Coordinates | None:
        """Convert a free-form address into coordinates.

        Args:
            address: Address text, e.g. "Rua XV de Novembro, Centro, Joinville, SC, Brasil"

        Returns:
            Coordinates, or None when the provider has no result

        Raises:
            GeocoderError: If the provider is misconfigured, rate limited or unreachable
        """
        pass

    async def aclose(self) -> None:
        """Release network resources held by the provider."""
        return None


class BasePostalCodeProvider(ABC):
    """Abstract base class for postal code (CEP) lookups."""

    @abstractmethod
    async def lookup(self, postal_code: str) -> Coordinates | None:
        """Convert an 8-digit postal code into coordinates."""
        pass

    async def aclose(self) -> None:
        return None
