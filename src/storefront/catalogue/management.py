"""Catalogue management — commands and handlers for products and categories."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.category import Category
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Product")
class AddProduct:
    sku: String(required=True, max_length=50)
    title: String(required=True, max_length=255)
    description: Text()
    price: Float(required=True, min_value=0.0)
    stock: Integer(default=0)
    category_id: Identifier()


@storefront.command(part_of="Product")
class UpdateProduct:
    product_id: Identifier(required=True)
    title: String(max_length=255)
    description: Text()
    price: Float()
    stock: Integer()
    is_active: Boolean()
    category_id: Identifier()


@storefront.command(part_of="Product")
class RemoveProduct:
    product_id: Identifier(required=True)


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(AddProduct)
    def add_product(self, command):
        repo = current_domain.repository_for(Product)
        if repo.by_sku(command.sku) is not None:
            raise ValidationError({"sku": [f"Product with SKU {command.sku} already exists"]})
        if command.category_id:
            current_domain.repository_for(Category).get(command.category_id)

        product = Product.create(
            sku=command.sku,
            title=command.title,
            price=command.price,
            stock=command.stock or 0,
            description=command.description,
            category_id=command.category_id,
        )
        repo.add(product)
        logger.info("product_added", product_id=str(product.id), sku=product.sku)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        if command.category_id:
            current_domain.repository_for(Category).get(command.category_id)

        changes = {
            name: getattr(command, name)
            for name in ("title", "description", "price", "stock", "is_active", "category_id")
            if getattr(command, name) is not None
        }
        product.update_details(**changes)
        repo.add(product)
        logger.info("product_updated", product_id=str(product.id), fields=sorted(changes))

    @handle(RemoveProduct)
    def remove_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        repo._dao.delete(product)
        logger.info("product_removed", product_id=str(product.id), sku=product.sku)


@storefront.command(part_of="Category")
class AddCategory:
    name: String(required=True, max_length=100)
    slug: String(max_length=120)
    description: Text()


@storefront.command(part_of="Category")
class UpdateCategory:
    category_id: Identifier(required=True)
    name: String(max_length=100)
    description: Text()
    is_active: Boolean()


@storefront.command(part_of="Category")
class RemoveCategory:
    category_id: Identifier(required=True)


@storefront.command_handler(part_of=Category)
class ManageCategoryHandler:
    @handle(AddCategory)
    def add_category(self, command):
        repo = current_domain.repository_for(Category)
        category = Category.create(name=command.name, slug=command.slug, description=command.description)
        if repo.by_slug(category.slug) is not None:
            raise ValidationError({"slug": [f"Category with slug {category.slug} already exists"]})
        repo.add(category)
        return str(category.id)

    @handle(UpdateCategory)
    def update_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        if command.name is not None:
            category.rename(command.name)
        if command.description is not None:
            category.description = command.description
        if command.is_active is not None:
            category.is_active = command.is_active
        repo.add(category)

    @handle(RemoveCategory)
    def remove_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        in_use = current_domain.repository_for(Product).count_in_category(category.id)
        if in_use:
            raise ValidationError(
                {"category": [f"Category {category.name} still has {in_use} products and cannot be removed"]}
            )
        repo._dao.delete(category)
        logger.info("category_removed", category_id=str(category.id), slug=category.slug)
