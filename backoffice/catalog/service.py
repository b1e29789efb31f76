"""
Catalog Service

Product, category and tag management plus the product <-> tag association.

Deletes never cascade: removing a category leaves products pointing at it,
and removing a tag or product leaves its association rows behind. Readers
that resolve those references skip whatever no longer exists.
"""

from typing import Any, List, Mapping, Optional

import structlog

from backoffice.errors import validate_payload
from backoffice.storage.models import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    Product,
    ProductCreate,
    ProductTag,
    ProductUpdate,
    Tag,
    TagCreate,
)
from backoffice.storage.store import EntityStore

logger = structlog.get_logger(__name__)


class CatalogService:
    """
    Catalog operations for a single store.
    
    Every create/update validates the whole payload first and raises
    ValidationError without touching the store if anything is wrong.
    """
    
    def __init__(self, store: EntityStore):
        self.store = store
    
    # -------------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------------
    
    def list_products(self, owner_id: int) -> List[Product]:
        return self.store.products.list(lambda p: p.owner_id == owner_id)
    
    def get_product(self, product_id: int) -> Optional[Product]:
        return self.store.products.get(product_id)
    
    def create_product(self, owner_id: int, data: Mapping[str, Any]) -> Product:
        payload = validate_payload(ProductCreate, data, "product")
        product = self.store.products.create(dict(payload.model_dump(), owner_id=owner_id))
        logger.info("Product created", id=product.id, owner_id=owner_id, name=product.name)
        return product
    
    def update_product(self, product_id: int, data: Mapping[str, Any]) -> Optional[Product]:
        changes = validate_payload(ProductUpdate, data, "product").model_dump(exclude_unset=True)
        product = self.store.products.update(product_id, changes)
        if product is not None:
            logger.info("Product updated", id=product_id, fields=sorted(changes))
        return product
    
    def delete_product(self, product_id: int) -> bool:
        deleted = self.store.products.delete(product_id)
        if deleted:
            logger.info("Product deleted", id=product_id)
        return deleted
    
    def get_products_by_category(self, category_id: int) -> List[Product]:
        return self.store.products.list(lambda p: p.category_id == category_id)
    
    def get_products_by_tag(self, tag_id: int) -> List[Product]:
        product_ids = {
            link.product_id
            for link in self.store.product_tags.list(lambda pt: pt.tag_id == tag_id)
        }
        return self.store.products.list(lambda p: p.id in product_ids)
    
    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------
    
    def list_categories(self, owner_id: int) -> List[Category]:
        return self.store.categories.list(lambda c: c.owner_id == owner_id)
    
    def get_category(self, category_id: int) -> Optional[Category]:
        return self.store.categories.get(category_id)
    
    def create_category(self, owner_id: int, data: Mapping[str, Any]) -> Category:
        payload = validate_payload(CategoryCreate, data, "category")
        category = self.store.categories.create(dict(payload.model_dump(), owner_id=owner_id))
        logger.info("Category created", id=category.id, owner_id=owner_id, name=category.name)
        return category
    
    def update_category(self, category_id: int, data: Mapping[str, Any]) -> Optional[Category]:
        changes = validate_payload(CategoryUpdate, data, "category").model_dump(exclude_unset=True)
        return self.store.categories.update(category_id, changes)
    
    def delete_category(self, category_id: int) -> bool:
        deleted = self.store.categories.delete(category_id)
        if deleted:
            orphaned = len(self.get_products_by_category(category_id))
            logger.info("Category deleted", id=category_id, orphaned_products=orphaned)
        return deleted
    
    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------
    
    def list_tags(self, owner_id: int) -> List[Tag]:
        return self.store.tags.list(lambda t: t.owner_id == owner_id)
    
    def get_tag(self, tag_id: int) -> Optional[Tag]:
        return self.store.tags.get(tag_id)
    
    def create_tag(self, owner_id: int, data: Mapping[str, Any]) -> Tag:
        payload = validate_payload(TagCreate, data, "tag")
        tag = self.store.tags.create(dict(payload.model_dump(), owner_id=owner_id))
        logger.info("Tag created", id=tag.id, owner_id=owner_id, name=tag.name)
        return tag
    
    def delete_tag(self, tag_id: int) -> bool:
        deleted = self.store.tags.delete(tag_id)
        if deleted:
            logger.info("Tag deleted", id=tag_id)
        return deleted
    
    # -------------------------------------------------------------------------
    # Product <-> tag association
    # -------------------------------------------------------------------------
    
    def add_tag_to_product(self, product_id: int, tag_id: int) -> ProductTag:
        """Link a tag to a product. Repeating the call adds another link."""
        link = self.store.product_tags.create({"product_id": product_id, "tag_id": tag_id})
        logger.info("Tag linked", product_id=product_id, tag_id=tag_id, link_id=link.id)
        return link
    
    def remove_tag_from_product(self, product_id: int, tag_id: int) -> bool:
        """Remove the first (lowest id) matching link only"""
        with self.store.lock:
            link = self.store.product_tags.find(
                lambda pt: pt.product_id == product_id and pt.tag_id == tag_id
            )
            if link is None:
                return False
            return self.store.product_tags.delete(link.id)
    
    def get_product_tags(self, product_id: int) -> List[Tag]:
        """Tags linked to a product, each once, skipping links to deleted tags"""
        tag_ids = {
            link.tag_id
            for link in self.store.product_tags.list(lambda pt: pt.product_id == product_id)
        }
        return self.store.tags.list(lambda t: t.id in tag_ids)
