"""HTTP client for the Google Maps Distance Matrix and Directions services."""

from __future__ import annotations

import logging
import time
from typing import Sequence

import httpx

logger = logging.getLogger(__name__)

# Statuses worth another attempt; everything else is a definitive answer.
_RETRYABLE_STATUSES = {"UNKNOWN_ERROR"}
MAX_WAYPOINTS = 25


class MappingProviderError(RuntimeError):
    """The provider could not answer (address not found, quota, network)."""


class GoogleMapsClient:
    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://maps.googleapis.com/maps/api",
        language: str = "pt-BR",
        region: str = "br",
        timeout: float = 10.0,
        max_retries: int = 2,
        backoff_seconds: float = 0.5,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("Google Maps API key is not configured.")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.language = language
        self.region = region
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self._client = httpx.Client(timeout=httpx.Timeout(timeout, connect=5.0), transport=transport)

    def close(self) -> None:
        self._client.close()

    def _get(self, endpoint: str, params: dict) -> dict:
        url = f"{self.base_url}/{endpoint}/json"
        query = {**params, "key": self.api_key, "language": self.language, "region": self.region}
        attempt = 0
        while True:
            try:
                response = self._client.get(url, params=query)
                response.raise_for_status()
                data = response.json()
                status = data.get("status")
                if status == "OK":
                    return data
                if status in _RETRYABLE_STATUSES and attempt < self.max_retries:
                    attempt += 1
                    time.sleep(self.backoff_seconds * attempt)
                    continue
                message = data.get("error_message") or status or "unknown status"
                raise MappingProviderError(f"{endpoint} request failed: {message}")
            except httpx.HTTPStatusError as e:
                if e.response.status_code < 500:
                    raise MappingProviderError(f"{endpoint} request rejected ({e.response.status_code})") from e
                attempt += 1
                if attempt > self.max_retries:
                    raise MappingProviderError(f"{endpoint} service error: {e}") from e
                time.sleep(self.backoff_seconds * attempt)
            except (httpx.TimeoutException, httpx.NetworkError) as e:
                attempt += 1
                if attempt > self.max_retries:
                    raise MappingProviderError(f"Mapping provider is not reachable: {e}") from e
                wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                logger.debug(f"Maps request failed, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}")
                time.sleep(wait_time)
            except httpx.HTTPError as e:
                # protocol, decoding and redirect failures are not retried
                raise MappingProviderError(f"{endpoint} request failed: {e}") from e
            except ValueError as e:
                raise MappingProviderError(f"Malformed {endpoint} response: {e}") from e

    def distance(self, origin: str, destination: str) -> dict:
        """One-way driving distance and duration between two addresses."""
        data = self._get(
            "distancematrix",
            {
                "origins": origin,
                "destinations": destination,
                "mode": "driving",
                "units": "metric",
            },
        )
        try:
            element = data["rows"][0]["elements"][0]
        except (KeyError, IndexError, TypeError) as e:
            raise MappingProviderError("Distance matrix response has no elements.") from e
        if not isinstance(element, dict):
            raise MappingProviderError(f"Distance matrix element is malformed: {element!r}")
        if element.get("status") != "OK":
            raise MappingProviderError(f"Address could not be resolved: {element.get('status')}")
        try:
            return {
                "distance_meters": int(element["distance"]["value"]),
                "duration_text": (element.get("duration") or {}).get("text", ""),
            }
        except (KeyError, TypeError, ValueError) as e:
            raise MappingProviderError(f"Distance matrix element is malformed: {e!r}") from e

    def optimize_route(self, origin: str, stops: Sequence[str]) -> dict:
        """Round trip from ``origin`` through ``stops`` in provider-optimized order.

        Returns ``{"order": [...], "legs": [...]}`` where ``order[k]`` is the
        index into ``stops`` visited k-th and ``legs`` holds one entry per stop
        plus the closing leg back to the origin.
        """
        if not stops:
            raise ValueError("At least one stop is required.")
        if len(stops) > MAX_WAYPOINTS:
            raise ValueError(f"At most {MAX_WAYPOINTS} stops can be optimized in one request.")
        data = self._get(
            "directions",
            {
                "origin": origin,
                "destination": origin,
                "waypoints": "optimize:true|" + "|".join(stops),
                "mode": "driving",
                "units": "metric",
            },
        )
        try:
            route = data["routes"][0]
        except (KeyError, IndexError, TypeError) as e:
            raise MappingProviderError("Directions response has no routes.") from e
        try:
            order = [int(index) for index in route.get("waypoint_order", range(len(stops)))]
            legs = [
                {
                    "distance_meters": int(leg["distance"]["value"]),
                    "duration_text": (leg.get("duration") or {}).get("text", ""),
                    "start_address": leg.get("start_address", ""),
                    "end_address": leg.get("end_address", ""),
                }
                for leg in route.get("legs", [])
            ]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise MappingProviderError(f"Directions route is malformed: {e!r}") from e
        if len(order) != len(stops) or len(legs) != len(stops) + 1:
            raise MappingProviderError("Directions response does not match the requested stops.")
        return {"order": order, "legs": legs}


def check_health(api_key: str | None, base_url: str = "https://maps.googleapis.com/maps/api") -> bool:
    """Check that the key is accepted by geocoding a fixed address."""
    if not api_key:
        return False
    try:
        response = httpx.get(
            f"{base_url.rstrip('/')}/geocode/json",
            params={"address": "Praça da Sé, São Paulo", "key": api_key},
            timeout=5.0,
        )
        response.raise_for_status()
        return response.json().get("status") == "OK"
    except httpx.HTTPError:
        return False
    except ValueError:
        return False
