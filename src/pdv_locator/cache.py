"""Persistent geocode memo with in-flight request coalescing."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path

from pdv_locator.exceptions import GeocoderError
from pdv_locator.providers.base import BaseGeocodeProvider
from pdv_locator.schema import Coordinates

logger = logging.getLogger(__name__)


class GeocodeCache:
    """Maps address strings to coordinates, backed by a JSON file.

    Successful lookups are kept forever and written back to disk right away.
    Misses and provider failures are never memoized, so the next caller asking
    for the same key tries the provider again. Concurrent callers asking for
    the same unresolved key share a single provider call.

    The file is rewritten by this process only; running several writer
    processes against the same path is not supported.
    """

    def __init__(self, path: str | Path | None, provider: BaseGeocodeProvider):
        self.path = Path(path) if path else None
        self.provider = provider
        self._entries: dict[str, Coordinates] = self._load()
        self._in_flight: dict[str, asyncio.Task] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: str) -> Coordinates | None:
        return self._entries.get(key)

    def in_flight(self) -> int:
        return len(self._in_flight)

    async def resolve(self, key: str) -> Coordinates | None:
        """Return coordinates for key, calling the provider at most once per key at a time."""
        if not key or not key.strip():
            return None

        cached = self._entries.get(key)
        if cached is not None:
            return cached

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch(key))
            self._in_flight[key] = task
        # The lookup keeps running and fills the cache even if this caller goes away.
        return await asyncio.shield(task)

    def clear(self) -> None:
        """Drop every entry and delete the backing file."""
        count = len(self._entries)
        self._entries.clear()
        if self.path is not None:
            try:
                self.path.unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("could not delete geocode cache %s: %s", self.path, exc)
        logger.info("geocode cache cleared (%d entries)", count)

    async def _fetch(self, key: str) -> Coordinates | None:
        try:
            coordinates = await self.provider.geocode(key)
            if coordinates is None:
                logger.info("geocode miss for %r", key)
            else:
                self._entries[key] = coordinates
                self._flush()
            return coordinates
        except GeocoderError as exc:
            logger.warning("geocode failed for %r: %s", key, exc)
            return None
        except Exception:
            logger.exception("unexpected geocoder failure for %r", key)
            return None
        finally:
            self._in_flight.pop(key, None)

    def _load(self) -> dict[str, Coordinates]:
        if self.path is None or not self.path.exists():
            return {}

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("ignoring unreadable geocode cache %s: %s", self.path, exc)
            return {}

        if not isinstance(data, dict):
            logger.warning("ignoring geocode cache %s: expected a JSON object", self.path)
            return {}

        entries: dict[str, Coordinates] = {}
        for key, value in data.items():
            if not isinstance(value, dict):
                continue
            coordinates = Coordinates.from_values(value.get("lat"), value.get("lon"), value.get("formatted"))
            if coordinates is not None:
                entries[key] = coordinates

        skipped = len(data) - len(entries)
        if skipped:
            logger.warning("skipped %d malformed entries in %s", skipped, self.path)
        logger.info("geocode cache loaded: %d entries from %s", len(entries), self.path)
        return entries

    def _flush(self) -> None:
        if self.path is None:
            return

        payload = {key: value.to_dict() for key, value in self._entries.items()}
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as exc:
            logger.warning("could not write geocode cache %s: %s", self.path, exc)
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
