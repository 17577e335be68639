"""Password hashing and login checks for couriers and the restaurant."""

from __future__ import annotations

import hmac
import logging
from typing import Callable, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ...models.domain import Courier

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("Password must not be empty.")
    return generate_password_hash(password)


def verify_password(password_hash: Optional[str], password: Optional[str]) -> bool:
    if not password_hash or not password:
        return False
    return check_password_hash(password_hash, password)


class CourierAuthenticator:
    """Checks a courier's name and password against the stored salted hash."""

    def __init__(self, lookup: Optional[Callable[[str], Optional[Courier]]] = None) -> None:
        if lookup is None:
            from ...persistence.catalog import find_courier_by_name

            lookup = find_courier_by_name
        self._lookup = lookup

    def verify(self, name: str, password: str) -> Optional[Courier]:
        name = " ".join((name or "").split())
        if not name or not password:
            return None
        courier = self._lookup(name)
        if courier is None or not verify_password(courier.password_hash, password):
            logger.info(f"Rejected courier login for '{name}'")
            return None
        return courier


def verify_restaurant(username: str, password: str, config=None) -> bool:
    """Restaurant login. Always False while no password hash is configured."""
    if config is None:
        from ...config import settings as config

    if not config.restaurant_password_hash:
        logging.warning("Restaurant login attempted but PIZZADESK_RESTAURANT_PASSWORD_HASH is not set")
        return False
    if not hmac.compare_digest((username or "").strip(), config.restaurant_username):
        return False
    return verify_password(config.restaurant_password_hash, password)
