"""Application tests for catalogue management and listings."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from storefront.catalogue.category import Category
from storefront.catalogue.management import (
    AddCategory,
    AddProduct,
    RemoveCategory,
    RemoveProduct,
    UpdateProduct,
)
from storefront.catalogue.product import Product
from storefront.errors import TransactionFailure
from storefront.order.workflow import OrderWorkflow


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _products():
    return current_domain.repository_for(Product)


@pytest.fixture()
def category_id():
    return _process(AddCategory(name="Kitchen"))


class TestProductManagement:
    def test_duplicate_sku_is_rejected(self, add_product):
        add_product(sku="MUG-1")
        with pytest.raises(ValidationError) as exc_info:
            add_product(sku="MUG-1")
        assert "sku" in exc_info.value.messages

    def test_update_to_unknown_category_fails(self, add_product):
        product_id = add_product()
        with pytest.raises(ObjectNotFoundError):
            _process(UpdateProduct(product_id=product_id, category_id="missing"))
        assert _products().get(product_id).category_id is None

    def test_update_to_known_category(self, add_product, category_id):
        product_id = add_product()
        _process(UpdateProduct(product_id=product_id, category_id=category_id))
        assert str(_products().get(product_id).category_id) == category_id

    def test_remove_product(self, add_product):
        product_id = add_product()
        _process(RemoveProduct(product_id=product_id))
        with pytest.raises(ObjectNotFoundError):
            _products().get(product_id)

    def test_remove_unknown_product_fails(self):
        with pytest.raises(ObjectNotFoundError):
            _process(RemoveProduct(product_id="missing"))

    def test_removal_waits_for_the_stock_lock(self, workflow, add_product):
        product_id = add_product()
        impatient = OrderWorkflow(workflow.domain, locks=workflow.locks, timeout=0.1)

        with workflow.locks.hold([product_id], timeout=1):
            with pytest.raises(TransactionFailure):
                impatient.remove_product(product_id)

        assert _products().get(product_id) is not None


class TestCategoryManagement:
    def test_remove_empty_category(self, category_id):
        _process(RemoveCategory(category_id=category_id))
        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(Category).get(category_id)

    def test_category_with_products_cannot_be_removed(self, category_id):
        _process(AddProduct(sku="PAN-1", title="Pan", price=20.0, category_id=category_id))
        with pytest.raises(ValidationError) as exc_info:
            _process(RemoveCategory(category_id=category_id))
        assert "category" in exc_info.value.messages
        assert current_domain.repository_for(Category).get(category_id) is not None

    def test_inactive_products_still_block_removal(self, category_id):
        product_id = _process(AddProduct(sku="PAN-1", title="Pan", price=20.0, category_id=category_id))
        _process(UpdateProduct(product_id=product_id, is_active=False))
        with pytest.raises(ValidationError):
            _process(RemoveCategory(category_id=category_id))


class TestListings:
    def test_price_range(self, add_product):
        add_product(price=5.0, title="Cheap")
        add_product(price=15.0, title="Middle")
        add_product(price=50.0, title="Dear")

        results = _products().active(min_price=10.0, max_price=50.0)

        assert [p.title for p in results.items] == ["Dear", "Middle"]
        assert results.total == 2

    def test_public_listing_hides_inactive(self, add_product):
        hidden = add_product(title="Hidden")
        add_product(title="Shown")
        _process(UpdateProduct(product_id=hidden, is_active=False))

        assert [p.title for p in _products().active().items] == ["Shown"]

    def test_admin_listing_includes_inactive_and_matches_sku(self, add_product):
        hidden = add_product(sku="LAMP-RED", title="Lamp")
        add_product(sku="MUG-BLUE", title="Mug")
        _process(UpdateProduct(product_id=hidden, is_active=False))

        assert _products().for_admin().total == 2
        assert [p.sku for p in _products().for_admin(search="lamp-r").items] == ["LAMP-RED"]
        assert [p.title for p in _products().for_admin(search="MUG").items] == ["Mug"]
