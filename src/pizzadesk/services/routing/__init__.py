"""Distance and route advisory services."""

from .advisory import DistanceAdvisory, get_advisory, mapping_config_from_settings, reset_advisory
from .maps_client import GoogleMapsClient, MappingProviderError
from .models import DistanceLookup, MappingConfig, RouteLeg, RoutePlan

__all__ = [
    "DistanceAdvisory",
    "DistanceLookup",
    "GoogleMapsClient",
    "MappingConfig",
    "MappingProviderError",
    "RouteLeg",
    "RoutePlan",
    "get_advisory",
    "mapping_config_from_settings",
    "reset_advisory",
]
