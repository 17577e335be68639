"""Supabase connection for the record store."""

import logging
from functools import lru_cache

from supabase import Client, create_client

from ..config import settings

# Tables used by the application:
#
# deliveries     id, courier_id, courier_name, address, neighborhood_name,
#                payment_type, order_value, delivery_fee, distance_km,
#                round_trip_km, created_at (timestamptz)
# neighborhoods  id, name, delivery_fee
# deliverers     id, name, phone, password_hash
# config         id, pizzaria_address, google_maps_api_key


@lru_cache()
def get_supabase_client() -> Client | None:
    """Shared client, or None while PIZZADESK_SUPABASE_URL / _KEY are unset.

    Creating the client does not open a connection; failures surface on the
    first query and are translated by ``persistence.store.run_query``.
    """
    url, key = settings.supabase_url, settings.supabase_key
    if not (url and key):
        logging.warning("Supabase credentials not configured (missing URL or key)")
        return None
    try:
        return create_client(url, key)
    except Exception as e:
        logging.error(f"Failed to create Supabase client for {url}: {e}")
        return None
