"""
Entity Store

In-memory keyed storage, one namespace per entity type.

Each namespace allocates identifiers from its own counter starting at 1.
Identifiers are never reused, even after a delete. Queries are linear scans
in identifier order, so "first match" always means "lowest id".
"""

import threading
from datetime import datetime
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, Type, TypeVar

import structlog

from backoffice.storage.models import (
    Category,
    Discount,
    Order,
    OrderItem,
    Product,
    ProductTag,
    Return,
    StoredRecord,
    Tag,
    User,
    ensure_utc,
    utc_now,
)

logger = structlog.get_logger(__name__)

RecordT = TypeVar("RecordT", bound=StoredRecord)
Clock = Callable[[], datetime]
Predicate = Callable[[Any], bool]


class Collection(Generic[RecordT]):
    """
    A single entity namespace.
    
    Example:
        products = Collection(Product, "products")
        product = products.create({"name": "Mug", "price": 9.5, "cost": 3, "owner_id": 1})
        products.update(product.id, {"stock": 5})
    """
    
    def __init__(
        self,
        model: Type[RecordT],
        name: str,
        clock: Clock = utc_now,
        lock: Optional[threading.RLock] = None,
    ):
        self.model = model
        self.name = name
        self._clock = clock
        self._lock = lock or threading.RLock()
        self._records: Dict[int, RecordT] = {}
        self._next_id = 1
        self._stamps_creation = "created_at" in model.model_fields
    
    def __len__(self) -> int:
        return len(self._records)
    
    def create(self, data: Mapping[str, Any]) -> RecordT:
        """Store a new record under the next identifier and return it"""
        with self._lock:
            values = dict(data)
            values["id"] = self._next_id
            if self._stamps_creation:
                values["created_at"] = ensure_utc(self._clock())
            record = self.model.model_validate(values)
            self._records[record.id] = record
            self._next_id += 1
        
        logger.debug("Record created", entity=self.name, id=record.id)
        return record
    
    def get(self, record_id: int) -> Optional[RecordT]:
        return self._records.get(record_id)
    
    def update(self, record_id: int, changes: Mapping[str, Any]) -> Optional[RecordT]:
        """
        Shallow-merge changes into an existing record.
        
        Keys absent from changes are left alone; a key present with None
        overwrites. Returns None when the record does not exist.
        """
        with self._lock:
            current = self._records.get(record_id)
            if current is None:
                return None
            updated = current.model_copy(update=dict(changes))
            self._records[record_id] = updated
        
        logger.debug("Record updated", entity=self.name, id=record_id, fields=sorted(changes))
        return updated
    
    def delete(self, record_id: int) -> bool:
        with self._lock:
            removed = self._records.pop(record_id, None) is not None
        
        if removed:
            logger.debug("Record deleted", entity=self.name, id=record_id)
        return removed
    
    def list(self, predicate: Optional[Predicate] = None) -> List[RecordT]:
        """All records matching predicate, in identifier order"""
        with self._lock:
            records = list(self._records.values())
        if predicate is None:
            return records
        return [r for r in records if predicate(r)]
    
    def find(self, predicate: Predicate) -> Optional[RecordT]:
        """First record (lowest id) matching predicate"""
        for record in self.list():
            if predicate(record):
                return record
        return None


class EntityStore:
    """
    All back-office collections behind one re-entrant lock.
    
    The shared lock makes identifier allocation and read-merge-write updates
    atomic when requests are served from a thread pool. Services take the
    lock directly when a check and a write must happen together.
    """
    
    def __init__(self, clock: Clock = utc_now):
        self.clock = clock
        self.lock = threading.RLock()
        
        self.users: Collection[User] = self._collection(User, "users")
        self.products: Collection[Product] = self._collection(Product, "products")
        self.categories: Collection[Category] = self._collection(Category, "categories")
        self.tags: Collection[Tag] = self._collection(Tag, "tags")
        self.product_tags: Collection[ProductTag] = self._collection(ProductTag, "product_tags")
        self.discounts: Collection[Discount] = self._collection(Discount, "discounts")
        self.orders: Collection[Order] = self._collection(Order, "orders")
        self.order_items: Collection[OrderItem] = self._collection(OrderItem, "order_items")
        self.returns: Collection[Return] = self._collection(Return, "returns")
    
    def _collection(self, model: Type[RecordT], name: str) -> Collection[RecordT]:
        return Collection(model, name, clock=self._now, lock=self.lock)
    
    def _now(self) -> datetime:
        return self.clock()
    
    def counts(self) -> Dict[str, int]:
        """Number of records per collection"""
        return {
            c.name: len(c)
            for c in (
                self.users,
                self.products,
                self.categories,
                self.tags,
                self.product_tags,
                self.discounts,
                self.orders,
                self.order_items,
                self.returns,
            )
        }
