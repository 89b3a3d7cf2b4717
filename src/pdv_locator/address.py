"""Geocoder-friendly address strings for stores."""

from __future__ import annotations

import re

from pdv_locator.schema import Store

COUNTRY = "Brasil"
POSTAL_CODE_DIGITS = 8

_NON_DIGITS = re.compile(r"\D")


def only_digits(value: object, max_len: int | None = None) -> str:
    digits = _NON_DIGITS.sub("", str(value if value is not None else ""))
    return digits[:max_len] if max_len else digits


def build_address(store: Store) -> str:
    """Build the canonical address string used for geocoding and as cache key.

    Street (or the free-form address when there is no street), neighborhood
    and city come first, then "<state>, Brasil" or just "Brasil", then the
    postal code digits. Blank parts are left out.
    """
    street = store.street.strip() or store.address.strip()
    parts = [part for part in (street, store.neighborhood.strip(), store.city.strip()) if part]

    state = store.state.strip()
    parts.append(f"{state}, {COUNTRY}" if state else COUNTRY)

    postal_code = only_digits(store.postal_code, POSTAL_CODE_DIGITS)
    if postal_code:
        parts.append(postal_code)

    return ", ".join(parts)
