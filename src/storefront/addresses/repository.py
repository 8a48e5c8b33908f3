"""Repository for the Address aggregate."""

from storefront.addresses.address import Address
from storefront.domain import storefront


@storefront.repository(part_of=Address)
class AddressRepository:
    def for_user(self, user_id: str) -> list[Address]:
        """The user's addresses, default first, then newest first."""
        addresses = self._dao.query.filter(user_id=str(user_id)).order_by("-created_at").all().items
        return sorted(addresses, key=lambda a: not a.is_default)

    def default_for(self, user_id: str) -> Address | None:
        return self._dao.query.filter(user_id=str(user_id), is_default=True).all().first

    def many(self, address_ids) -> dict[str, Address]:
        """Load several addresses at once, keyed by id. Missing ids are absent."""
        ids = list({str(aid) for aid in address_ids if aid})
        if not ids:
            return {}
        addresses = self._dao.query.filter(id__in=ids).limit(len(ids)).all().items
        return {str(a.id): a for a in addresses}
