"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True, slots=True)
class MappingConfig:
    """Everything the advisory needs to reach the provider."""

    api_key: Optional[str]
    origin_address: str
    base_url: str = "https://maps.googleapis.com/maps/api"
    language: str = "pt-BR"
    region: str = "br"
    timeout_seconds: float = 10.0
    max_retries: int = 2
    backoff_seconds: float = 0.5


@dataclass(slots=True)
class DistanceLookup:
    destination: str
    distance_km: Optional[float] = None
    round_trip_km: Optional[float] = None
    duration: Optional[str] = None
    error: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.distance_km is not None


@dataclass(slots=True)
class RouteLeg:
    stop_index: int
    sequence: int
    address: str
    distance_km: float
    credited_km: float
    duration: str


@dataclass(slots=True)
class RoutePlan:
    origin: str
    legs: List[RouteLeg] = field(default_factory=list)
    total_km: float = 0.0
    error: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.error is None

    @property
    def order(self) -> list[int]:
        return [leg.stop_index for leg in self.legs]
