"""Address aggregate — a shipping address owned by exactly one user.

Orders refer to an address by id. Editing an address later also changes what
historic orders show as their shipping address.
"""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Identifier, String

from storefront.addresses.events import AddressAdded, AddressUpdated, DefaultAddressChanged
from storefront.domain import storefront

EDITABLE_FIELDS = ("name", "phone", "street", "city", "state", "zip_code", "country")


@storefront.aggregate
class Address:
    """Shipping address aggregate."""

    user_id: Identifier(required=True)
    name: String(required=True, max_length=255)
    phone: String(max_length=30)
    street: String(required=True, max_length=255)
    city: String(required=True, max_length=100)
    state: String(max_length=100)
    zip_code: String(required=True, max_length=20)
    country: String(max_length=100, default="USA")
    is_default: Boolean(default=False)
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(cls, user_id, name, street, city, zip_code, phone=None, state=None, country=None, is_default=False):
        now = datetime.now(UTC)
        address = cls(
            user_id=user_id,
            name=name,
            phone=phone,
            street=street,
            city=city,
            state=state,
            zip_code=zip_code,
            country=country or "USA",
            is_default=is_default,
            created_at=now,
            updated_at=now,
        )
        address.raise_(
            AddressAdded(
                address_id=str(address.id),
                user_id=str(user_id),
                city=city,
                country=address.country,
                is_default=is_default,
            )
        )
        return address

    def owned_by(self, user_id):
        return str(self.user_id) == str(user_id)

    def update(self, **fields):
        for name, value in fields.items():
            if name not in EDITABLE_FIELDS:
                raise AttributeError(f"Address has no editable field '{name}'")
            setattr(self, name, value)
        self.updated_at = datetime.now(UTC)
        self.raise_(AddressUpdated(address_id=str(self.id), user_id=str(self.user_id)))

    def make_default(self):
        if self.is_default:
            return
        self.is_default = True
        self.updated_at = datetime.now(UTC)
        self.raise_(DefaultAddressChanged(address_id=str(self.id), user_id=str(self.user_id)))

    def clear_default(self):
        self.is_default = False
        self.updated_at = datetime.now(UTC)
