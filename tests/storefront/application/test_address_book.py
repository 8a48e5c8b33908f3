"""Application tests for address book commands."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError
from storefront.addresses.address import Address
from storefront.addresses.management import RemoveAddress, SetDefaultAddress, UpdateAddress
from storefront.errors import Forbidden

USER = "user-001"


def _addresses(user_id=USER):
    return current_domain.repository_for(Address).for_user(user_id)


def _defaults(user_id=USER):
    return [a for a in _addresses(user_id) if a.is_default]


class TestAddAddress:
    def test_first_address_becomes_default(self, add_address):
        address_id = add_address(USER)
        assert [str(a.id) for a in _defaults()] == [address_id]

    def test_second_plain_address_keeps_default(self, add_address):
        first = add_address(USER)
        add_address(USER, city="Shelbyville")
        assert [str(a.id) for a in _defaults()] == [first]

    def test_second_default_replaces_first(self, add_address):
        add_address(USER, is_default=True)
        second = add_address(USER, is_default=True, city="Shelbyville")
        assert [str(a.id) for a in _defaults()] == [second]
        assert len(_addresses()) == 2

    def test_defaults_are_per_user(self, add_address):
        add_address(USER, is_default=True)
        add_address("user-002", is_default=True)
        assert len(_defaults(USER)) == 1
        assert len(_defaults("user-002")) == 1

    def test_list_puts_default_first(self, add_address):
        first = add_address(USER)
        add_address(USER, city="Shelbyville")
        assert str(_addresses()[0].id) == first


class TestUpdateAddress:
    def test_update_fields(self, add_address):
        address_id = add_address(USER)
        current_domain.process(
            UpdateAddress(user_id=USER, address_id=address_id, city="Capital City"),
            asynchronous=False,
        )
        assert current_domain.repository_for(Address).get(address_id).city == "Capital City"

    def test_make_default_through_update(self, add_address):
        add_address(USER)
        second = add_address(USER, city="Shelbyville")
        current_domain.process(
            UpdateAddress(user_id=USER, address_id=second, is_default=True),
            asynchronous=False,
        )
        assert [str(a.id) for a in _defaults()] == [second]

    def test_missing_address(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(
                UpdateAddress(user_id=USER, address_id="missing", city="X"),
                asynchronous=False,
            )

    def test_someone_elses_address(self, add_address):
        address_id = add_address("user-002")
        with pytest.raises(Forbidden):
            current_domain.process(
                UpdateAddress(user_id=USER, address_id=address_id, city="X"),
                asynchronous=False,
            )
        assert current_domain.repository_for(Address).get(address_id).city == "Springfield"


class TestSetDefault:
    def test_set_default(self, add_address):
        add_address(USER)
        second = add_address(USER, city="Shelbyville")
        current_domain.process(SetDefaultAddress(user_id=USER, address_id=second), asynchronous=False)
        assert [str(a.id) for a in _defaults()] == [second]

    def test_someone_elses_address(self, add_address):
        add_address(USER)
        other = add_address("user-002")
        with pytest.raises(Forbidden):
            current_domain.process(SetDefaultAddress(user_id=USER, address_id=other), asynchronous=False)
        assert len(_defaults()) == 1


class TestRemoveAddress:
    def test_remove(self, add_address):
        add_address(USER)
        second = add_address(USER, city="Shelbyville")
        current_domain.process(RemoveAddress(user_id=USER, address_id=second), asynchronous=False)
        assert [a.city for a in _addresses()] == ["Springfield"]

    def test_removing_default_promotes_another(self, add_address):
        first = add_address(USER)
        second = add_address(USER, city="Shelbyville")
        current_domain.process(RemoveAddress(user_id=USER, address_id=first), asynchronous=False)
        assert [str(a.id) for a in _defaults()] == [second]

    def test_missing_address(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(RemoveAddress(user_id=USER, address_id="missing"), asynchronous=False)

    def test_someone_elses_address(self, add_address):
        address_id = add_address("user-002")
        with pytest.raises(Forbidden):
            current_domain.process(RemoveAddress(user_id=USER, address_id=address_id), asynchronous=False)
        assert len(_addresses("user-002")) == 1
