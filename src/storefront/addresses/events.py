"""Domain events for the Address aggregate."""

from protean.fields import Boolean, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="Address")
class AddressAdded:
    """A shipping address was added to a user's address book."""

    __version__ = 1

    address_id: Identifier(required=True)
    user_id: Identifier(required=True)
    city: String(max_length=100)
    country: String(max_length=100)
    is_default: Boolean()


@storefront.event(part_of="Address")
class AddressUpdated:
    __version__ = 1

    address_id: Identifier(required=True)
    user_id: Identifier(required=True)


@storefront.event(part_of="Address")
class DefaultAddressChanged:
    """The user's default shipping address moved to this address."""

    __version__ = 1

    address_id: Identifier(required=True)
    user_id: Identifier(required=True)
