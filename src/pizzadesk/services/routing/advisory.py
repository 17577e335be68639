"""Best-effort distance lookups and multi-stop route planning."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Callable, Sequence

from ...config import settings
from .maps_client import GoogleMapsClient, MappingProviderError
from .models import DistanceLookup, MappingConfig, RouteLeg, RoutePlan

logger = logging.getLogger(__name__)


def _default_client_factory(config: MappingConfig) -> GoogleMapsClient:
    return GoogleMapsClient(
        api_key=config.api_key,
        base_url=config.base_url,
        language=config.language,
        region=config.region,
        timeout=config.timeout_seconds,
        max_retries=config.max_retries,
        backoff_seconds=config.backoff_seconds,
    )


class DistanceAdvisory:
    """Thin layer over the mapping provider.

    The provider handle is created on first use and reused afterwards. No
    method raises on provider failure: the result carries an ``error`` instead,
    so a delivery can always be saved without distance data.
    """

    def __init__(
        self,
        config: MappingConfig,
        client_factory: Callable[[MappingConfig], object] | None = None,
    ) -> None:
        self.config = config
        self._client_factory = client_factory or _default_client_factory
        self._client = None

    @property
    def client(self):
        if self._client is None:
            self._client = self._client_factory(self.config)
        return self._client

    def close(self) -> None:
        close = getattr(self._client, "close", None)
        if close is not None:
            close()
        self._client = None

    def lookup(self, destination: str) -> DistanceLookup:
        try:
            result = self.client.distance(self.config.origin_address, destination)
        except (MappingProviderError, ValueError) as exc:
            logger.warning(f"Distance lookup failed for '{destination}': {exc}")
            return DistanceLookup(destination=destination, error=str(exc))
        distance_km = result["distance_meters"] / 1000
        return DistanceLookup(
            destination=destination,
            distance_km=distance_km,
            round_trip_km=distance_km * 2,
            duration=result.get("duration_text"),
        )

    def plan_route(self, stops: Sequence[str]) -> RoutePlan:
        plan = RoutePlan(origin=self.config.origin_address)
        try:
            result = self.client.optimize_route(self.config.origin_address, list(stops))
        except (MappingProviderError, ValueError) as exc:
            logger.warning(f"Route optimization failed for {len(stops)} stops: {exc}")
            plan.error = str(exc)
            return plan

        order = result["order"]
        legs = result["legs"]
        return_km = legs[-1]["distance_meters"] / 1000
        for sequence, stop_index in enumerate(order):
            leg = legs[sequence]
            leg_km = leg["distance_meters"] / 1000
            credited = leg_km + return_km if sequence == len(order) - 1 else leg_km
            plan.legs.append(
                RouteLeg(
                    stop_index=stop_index,
                    sequence=sequence + 1,
                    address=stops[stop_index],
                    distance_km=leg_km,
                    credited_km=credited,
                    duration=leg.get("duration_text", ""),
                )
            )
        plan.total_km = sum(leg["distance_meters"] for leg in legs) / 1000
        return plan


def mapping_config_from_settings(api_key: str | None = None, origin_address: str | None = None) -> MappingConfig:
    return MappingConfig(
        api_key=api_key or settings.google_maps_api_key,
        origin_address=origin_address or settings.pizzeria_address,
        base_url=settings.google_maps_base_url,
        language=settings.maps_language,
        region=settings.maps_region,
        timeout_seconds=settings.maps_timeout_seconds,
        max_retries=settings.maps_max_retries,
        backoff_seconds=settings.maps_backoff_seconds,
    )


@lru_cache(maxsize=1)
def get_advisory() -> DistanceAdvisory:
    """Process-wide advisory built from the stored pizzeria config."""
    from ...persistence.catalog import load_pizzeria_config
    from ...persistence.store import StoreUnavailableError

    stored = None
    try:
        stored = load_pizzeria_config()
    except StoreUnavailableError as exc:
        logger.info(f"Using environment mapping config; stored config unavailable: {exc}")
    if stored:
        config = mapping_config_from_settings(stored.google_maps_api_key, stored.address)
    else:
        config = mapping_config_from_settings()
    return DistanceAdvisory(config)


def reset_advisory() -> None:
    if get_advisory.cache_info().currsize:
        get_advisory().close()
    get_advisory.cache_clear()
