"""Category aggregate — flat grouping of products."""

import re
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, String, Text

from storefront.catalogue.events import CategoryAdded
from storefront.domain import storefront

_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def slugify(name):
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


@storefront.aggregate
class Category:
    name: String(required=True, max_length=100)
    slug: String(required=True, max_length=120, unique=True)
    description: Text()
    is_active: Boolean(default=True)
    created_at: DateTime()

    @invariant.post
    def slug_must_be_url_safe(self):
        if self.slug and not _SLUG_PATTERN.match(self.slug):
            raise ValidationError({"slug": ["Slug must be lowercase words separated by single hyphens"]})

    @classmethod
    def create(cls, name, slug=None, description=None):
        category = cls(
            name=name,
            slug=slug or slugify(name),
            description=description,
            created_at=datetime.now(UTC),
        )
        category.raise_(
            CategoryAdded(
                category_id=str(category.id),
                name=category.name,
                slug=category.slug,
            )
        )
        return category

    def rename(self, name):
        self.name = name
