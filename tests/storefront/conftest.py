import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


@pytest.fixture()
def workflow():
    from storefront.catalogue.stock_locks import StockLocks
    from storefront.domain import storefront
    from storefront.order.workflow import OrderWorkflow

    return OrderWorkflow(storefront, locks=StockLocks(), timeout=5.0)


@pytest.fixture()
def add_product():
    """Factory: list a product and return its id."""
    from storefront.catalogue.management import AddProduct

    counter = {"n": 0}

    def _add(price=10.0, stock=10, sku=None, title=None):
        counter["n"] += 1
        return current_domain.process(
            AddProduct(
                sku=sku or f"SKU-{counter['n']:04d}",
                title=title or f"Product {counter['n']}",
                price=price,
                stock=stock,
            ),
            asynchronous=False,
        )

    return _add


@pytest.fixture()
def add_address():
    """Factory: add an address for a user and return its id."""
    from storefront.addresses.management import AddAddress

    def _add(user_id="user-001", is_default=False, **overrides):
        fields = {
            "name": "Jane Doe",
            "street": "1 Main St",
            "city": "Springfield",
            "state": "IL",
            "zip_code": "62701",
        }
        fields.update(overrides)
        return current_domain.process(
            AddAddress(user_id=user_id, is_default=is_default, **fields),
            asynchronous=False,
        )

    return _add


@pytest.fixture()
def fill_cart():
    """Factory: add ``(product_id, quantity)`` lines to a user's cart."""
    from storefront.cart.items import AddToCart

    def _fill(user_id, *lines, size=None, color=None):
        for product_id, quantity in lines:
            current_domain.process(
                AddToCart(user_id=user_id, product_id=product_id, quantity=quantity, size=size, color=color),
                asynchronous=False,
            )

    return _fill
