"""Storefront bounded context — catalogue, carts, address books and orders.

Every aggregate lives in one domain so that checkout can read the address
book, drain the cart, decrement product stock and record the order inside a
single unit of work.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")
