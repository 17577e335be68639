from decimal import Decimal
from types import SimpleNamespace

import pytest
from werkzeug.security import generate_password_hash

from pizzadesk.models.domain import Courier, Neighborhood
from pizzadesk.services.auth import CourierAuthenticator, hash_password, verify_password, verify_restaurant
from pizzadesk.services.catalog import (
    create_courier,
    create_neighborhood,
    delete_neighborhood,
    find_neighborhood,
    get_pizzeria_config,
    mask_key,
    normalize_name,
    update_neighborhood,
    update_pizzeria_config,
)
from pizzadesk.services.routing import get_advisory


def test_normalize_name_ignores_accents_case_and_spacing() -> None:
    assert normalize_name("  São   Paulo ") == normalize_name("sao paulo")
    assert normalize_name("Jardim Europa") != normalize_name("Jardim América")


def test_create_neighborhood_rejects_normalized_duplicates(fake_db) -> None:
    created = create_neighborhood("São Paulo", "7,50")

    assert created.delivery_fee == Decimal("7.5")
    with pytest.raises(ValueError, match="already exists"):
        create_neighborhood("sao  paulo", "5")
    assert len(fake_db.tables["neighborhoods"]) == 1


def test_create_neighborhood_rejects_negative_fee(fake_db) -> None:
    with pytest.raises(ValueError, match="must not be negative"):
        create_neighborhood("Centro", "-2")
    assert fake_db.calls == []


def test_rename_may_keep_its_own_name(fake_db) -> None:
    centro = create_neighborhood("Centro", "5")
    create_neighborhood("Vila Nova", "6")

    renamed = update_neighborhood(centro.id, name="CENTRO")

    assert renamed.name == "CENTRO"
    with pytest.raises(ValueError, match="already exists"):
        update_neighborhood(centro.id, name="vila nova")


def test_find_neighborhood_uses_normalized_lookup() -> None:
    hoods = [Neighborhood(id="1", name="Bela Vista", delivery_fee=Decimal("6"))]

    assert find_neighborhood("bela   vista", hoods).id == "1"
    assert find_neighborhood("Bela", hoods) is None


def test_delete_neighborhood_requires_confirmation(fake_db) -> None:
    with pytest.raises(ValueError, match="confirm=true"):
        delete_neighborhood("1")
    assert delete_neighborhood("1", confirm=True) is False


def test_new_courier_gets_default_password(fake_db) -> None:
    courier = create_courier("  Bruno   Lima ", phone=" 11999990000 ")

    stored = fake_db.tables["deliverers"][0]
    assert courier.name == "Bruno Lima"
    assert courier.phone == "11999990000"
    assert stored["password_hash"] != "123"

    authenticator = CourierAuthenticator()
    assert authenticator.verify("Bruno  Lima", "123").id == courier.id
    assert authenticator.verify("Bruno Lima", "wrong") is None


def test_courier_authenticator_with_custom_lookup() -> None:
    courier = Courier(id="5", name="Ana", password_hash=hash_password("s3cret"))
    authenticator = CourierAuthenticator(lookup=lambda name: courier if name == "Ana" else None)

    assert authenticator.verify("Ana", "s3cret") is courier
    assert authenticator.verify("Ana", "") is None
    assert authenticator.verify("Carla", "s3cret") is None


def test_hash_password_rejects_empty() -> None:
    with pytest.raises(ValueError):
        hash_password("")
    assert verify_password(None, "x") is False


def test_restaurant_login() -> None:
    config = SimpleNamespace(restaurant_username="admin", restaurant_password_hash=generate_password_hash("pizza"))

    assert verify_restaurant("admin", "pizza", config) is True
    assert verify_restaurant(" admin ", "pizza", config) is True
    assert verify_restaurant("root", "pizza", config) is False
    assert verify_restaurant("admin", "nope", config) is False


def test_restaurant_login_disabled_without_hash() -> None:
    config = SimpleNamespace(restaurant_username="admin", restaurant_password_hash=None)

    assert verify_restaurant("admin", "", config) is False


def test_mask_key_keeps_last_four() -> None:
    assert mask_key("AIzaSyExample1234") == "*" * 13 + "1234"
    assert mask_key("abc") == "****abc"
    assert mask_key(None) is None


def test_pizzeria_config_falls_back_to_settings(fake_db) -> None:
    from pizzadesk.config import settings

    config = get_pizzeria_config()

    assert config.id is None
    assert config.address == settings.pizzeria_address


def test_updating_pizzeria_config_rebuilds_advisory(fake_db) -> None:
    before = get_advisory()

    saved = update_pizzeria_config(address="Av. Paulista, 1000", google_maps_api_key=" key-1 ")
    after = get_advisory()

    assert saved.google_maps_api_key == "key-1"
    assert after is not before
    assert after.config.origin_address == "Av. Paulista, 1000"
    assert after.config.api_key == "key-1"
