"""Repositories for the Product and Category aggregates."""

from protean.utils.query import Q

from storefront.catalogue.category import Category
from storefront.catalogue.product import Product
from storefront.domain import storefront


@storefront.repository(part_of=Product)
class ProductRepository:
    def by_sku(self, sku: str) -> Product | None:
        return self._dao.query.filter(sku=sku).all().first

    def many(self, product_ids) -> dict[str, Product]:
        """Load several products at once, keyed by id. Missing ids are absent."""
        ids = list({str(pid) for pid in product_ids})
        if not ids:
            return {}
        products = self._dao.query.filter(id__in=ids).limit(len(ids)).all().items
        return {str(p.id): p for p in products}

    def active(
        self,
        category_id: str | None = None,
        search: str | None = None,
        min_price: float | None = None,
        max_price: float | None = None,
        offset: int = 0,
        limit: int = 20,
    ):
        """Public listing: active products by title, optionally narrowed by category, title and price."""
        query = self._dao.query.filter(is_active=True)
        if category_id:
            query = query.filter(category_id=category_id)
        if search:
            query = query.filter(title__icontains=search)
        if min_price is not None:
            query = query.filter(price__gte=min_price)
        if max_price is not None:
            query = query.filter(price__lte=max_price)
        return query.order_by("title").offset(offset).limit(limit).all()

    def for_admin(self, category_id: str | None = None, search: str | None = None, offset: int = 0, limit: int = 20):
        """Every product, inactive included, newest first. ``search`` matches title or SKU."""
        query = self._dao.query
        if category_id:
            query = query.filter(category_id=category_id)
        if search:
            query = query.filter(Q(title__icontains=search) | Q(sku__icontains=search))
        return query.order_by("-created_at").offset(offset).limit(limit).all()

    def count_in_category(self, category_id: str) -> int:
        return self._dao.query.filter(category_id=str(category_id)).all().total


@storefront.repository(part_of=Category)
class CategoryRepository:
    def by_slug(self, slug: str) -> Category | None:
        return self._dao.query.filter(slug=slug).all().first

    def listed(self) -> list[Category]:
        return self._dao.query.filter(is_active=True).order_by("name").all().items
