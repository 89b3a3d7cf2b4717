"""Providers for pdv-locator."""

from pdv_locator.providers.awesomeapi import AwesomeApiCepProvider
from pdv_locator.providers.base import BaseGeocodeProvider, BasePostalCodeProvider
from pdv_locator.providers.opencage import OpenCageProvider

__all__ = [
    "AwesomeApiCepProvider",
    "BaseGeocodeProvider",
    "BasePostalCodeProvider",
    "OpenCageProvider",
]
