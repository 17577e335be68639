"""Identity verification services."""

from .passwords import CourierAuthenticator, hash_password, verify_password, verify_restaurant

__all__ = ["CourierAuthenticator", "hash_password", "verify_password", "verify_restaurant"]
