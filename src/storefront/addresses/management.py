"""Address book management — commands and handler.

A user has at most one default address. Whenever an address becomes the
default, the previous default is cleared in the same unit of work.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from storefront.addresses.address import EDITABLE_FIELDS, Address
from storefront.domain import storefront
from storefront.errors import Forbidden
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def load_owned_address(user_id, address_id) -> Address:
    """Load an address, failing unless ``user_id`` owns it."""
    try:
        address = current_domain.repository_for(Address).get(address_id)
    except ObjectNotFoundError as exc:
        raise ObjectNotFoundError({"address": [f"Address {address_id} not found"]}) from exc
    if not address.owned_by(user_id):
        raise Forbidden({"address": [f"Address {address_id} does not belong to the requester"]})
    return address


def _clear_other_defaults(repo, user_id, keep_id):
    for other in repo.for_user(user_id):
        if other.is_default and str(other.id) != str(keep_id):
            other.clear_default()
            repo.add(other)


@storefront.command(part_of="Address")
class AddAddress:
    user_id: Identifier(required=True)
    name: String(required=True, max_length=255)
    phone: String(max_length=30)
    street: String(required=True, max_length=255)
    city: String(required=True, max_length=100)
    state: String(max_length=100)
    zip_code: String(required=True, max_length=20)
    country: String(max_length=100)
    is_default: Boolean(default=False)


@storefront.command(part_of="Address")
class UpdateAddress:
    user_id: Identifier(required=True)
    address_id: Identifier(required=True)
    name: String(max_length=255)
    phone: String(max_length=30)
    street: String(max_length=255)
    city: String(max_length=100)
    state: String(max_length=100)
    zip_code: String(max_length=20)
    country: String(max_length=100)
    is_default: Boolean()


@storefront.command(part_of="Address")
class RemoveAddress:
    user_id: Identifier(required=True)
    address_id: Identifier(required=True)


@storefront.command(part_of="Address")
class SetDefaultAddress:
    user_id: Identifier(required=True)
    address_id: Identifier(required=True)


@storefront.command_handler(part_of=Address)
class ManageAddressesHandler:
    @handle(AddAddress)
    def add_address(self, command):
        repo = current_domain.repository_for(Address)

        # First address is always default
        make_default = bool(command.is_default) or not repo.for_user(command.user_id)

        address = Address.create(
            user_id=command.user_id,
            name=command.name,
            phone=command.phone,
            street=command.street,
            city=command.city,
            state=command.state,
            zip_code=command.zip_code,
            country=command.country,
            is_default=make_default,
        )
        if make_default:
            _clear_other_defaults(repo, command.user_id, keep_id=address.id)
        repo.add(address)
        return str(address.id)

    @handle(UpdateAddress)
    def update_address(self, command):
        repo = current_domain.repository_for(Address)
        address = load_owned_address(command.user_id, command.address_id)

        updates = {}
        for field in EDITABLE_FIELDS:
            value = getattr(command, field, None)
            if value is not None:
                updates[field] = value
        if updates:
            address.update(**updates)

        if command.is_default is True:
            _clear_other_defaults(repo, command.user_id, keep_id=address.id)
            address.make_default()
        elif command.is_default is False:
            address.clear_default()
        repo.add(address)

    @handle(RemoveAddress)
    def remove_address(self, command):
        repo = current_domain.repository_for(Address)
        address = load_owned_address(command.user_id, command.address_id)
        was_default = address.is_default
        repo._dao.delete(address)

        # Removed address was default: the newest remaining one takes over
        if was_default:
            remaining = [a for a in repo.for_user(command.user_id) if str(a.id) != str(address.id)]
            if remaining:
                remaining[0].make_default()
                repo.add(remaining[0])
        logger.info("address_removed", address_id=str(address.id), user_id=str(command.user_id))

    @handle(SetDefaultAddress)
    def set_default_address(self, command):
        repo = current_domain.repository_for(Address)
        address = load_owned_address(command.user_id, command.address_id)
        _clear_other_defaults(repo, command.user_id, keep_id=address.id)
        address.make_default()
        repo.add(address)
