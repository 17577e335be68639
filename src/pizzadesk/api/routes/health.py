"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_maps_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.routing.maps_client import check_health as maps_health_check
    return maps_health_check


@router.get("/health/maps", status_code=status.HTTP_200_OK)
def health_maps() -> dict:
    """Check that the mapping provider accepts the configured key."""
    from ...services.routing import get_advisory

    try:
        config = get_advisory().config
        maps_health_check = _get_maps_health_check()
        return {"service": "google_maps", "healthy": maps_health_check(config.api_key, config.base_url)}
    except Exception as e:
        return {"service": "google_maps", "healthy": False, "error": str(e)}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check database connection and the delivery tables."""
    from ...db.supabase import get_supabase_client

    supabase = get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "message": "Supabase not configured. Set PIZZADESK_SUPABASE_URL and PIZZADESK_SUPABASE_KEY environment variables.",
        }

    tables = {}
    for table in ("deliveries", "neighborhoods", "deliverers", "config"):
        try:
            supabase.table(table).select("id").limit(1).execute()
            tables[table] = True
        except Exception:
            tables[table] = False
    return {
        "configured": True,
        "connected": any(tables.values()),
        "tables": tables,
        "message": "Database connected." if all(tables.values()) else "Database reachable but some tables are missing.",
    }
