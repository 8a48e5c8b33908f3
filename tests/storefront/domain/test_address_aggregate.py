"""Tests for the Address aggregate."""

import pytest
from storefront.addresses.address import Address
from storefront.addresses.events import AddressAdded, DefaultAddressChanged


def _make_address(**overrides):
    defaults = {
        "user_id": "user-001",
        "name": "Jane Doe",
        "street": "1 Main St",
        "city": "Springfield",
        "zip_code": "62701",
    }
    defaults.update(overrides)
    return Address.create(**defaults)


class TestCreate:
    def test_country_defaults_to_usa(self):
        assert _make_address().country == "USA"

    def test_explicit_country(self):
        assert _make_address(country="Canada").country == "Canada"

    def test_raises_address_added(self):
        address = _make_address(is_default=True)
        event = [e for e in address._events if isinstance(e, AddressAdded)][0]
        assert event.is_default is True


class TestOwnership:
    def test_owned_by(self):
        address = _make_address()
        assert address.owned_by("user-001")
        assert not address.owned_by("user-002")


class TestUpdate:
    def test_updates_fields(self):
        address = _make_address()
        address.update(city="Shelbyville", zip_code="62565")
        assert (address.city, address.zip_code) == ("Shelbyville", "62565")

    def test_unknown_field_fails(self):
        address = _make_address()
        with pytest.raises(AttributeError):
            address.update(user_id="user-002")


class TestDefault:
    def test_make_default(self):
        address = _make_address()
        address.make_default()
        assert address.is_default
        assert [e for e in address._events if isinstance(e, DefaultAddressChanged)]

    def test_make_default_twice_raises_once(self):
        address = _make_address()
        address.make_default()
        address.make_default()
        assert len([e for e in address._events if isinstance(e, DefaultAddressChanged)]) == 1

    def test_clear_default(self):
        address = _make_address(is_default=True)
        address.clear_default()
        assert not address.is_default
