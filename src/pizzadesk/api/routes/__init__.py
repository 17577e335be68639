"""Route group exports."""

from . import auth, config, couriers, deliveries, health, neighborhoods, realtime, reports, routes

__all__ = ["auth", "config", "couriers", "deliveries", "health", "neighborhoods", "realtime", "reports", "routes"]
