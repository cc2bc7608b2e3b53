"""
In-memory record store for invoices, products and customers.

Records are addressed by a stable integer key assigned when they are loaded,
never by list position, so edits keep pointing at the same record even if
the collection is reloaded around them. Keys are never reused within a
process. Nothing is persisted; a restart starts empty.
"""

from enum import Enum
from itertools import count
from typing import Iterable, Iterator
from loguru import logger
from ..core.exceptions import RecordNotFoundError
from ..models.extraction import ExtractionResult
from ..models.records import (
    Collection,
    Customer,
    CustomerField,
    FieldError,
    Invoice,
    InvoiceField,
    Product,
    ProductField,
    Record,
)


class RecordCollection:
    """
    Ordered records of one type with name indexes for cross-collection joins.

    Only load, get, update, set_errors and clear mutate the collection.
    """

    def __init__(self, name: Collection, record_type: type[Record], indexed_fields: Iterable[Enum], keys: Iterator[int]):
        self.name = name
        self.record_type = record_type
        self._keys = keys
        self._records: dict[int, Record] = {}
        self._indexes: dict[Enum, dict[str | None, set[int]]] = {f: {} for f in indexed_fields}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: int) -> bool:
        return key in self._records

    def _index(self, key: int, record: Record):
        for field, index in self._indexes.items():
            index.setdefault(record.value_of(field), set()).add(key)

    def _unindex(self, key: int, record: Record):
        for field, index in self._indexes.items():
            value = record.value_of(field)
            keys = index.get(value)
            if keys is not None:
                keys.discard(key)
                if not keys:
                    del index[value]

    def load(self, records: Iterable[Record]) -> list[int]:
        """Replace the whole collection, assigning fresh keys in order"""
        self._records.clear()
        for index in self._indexes.values():
            index.clear()
        keys = []
        for record in records:
            key = next(self._keys)
            self._records[key] = record
            self._index(key, record)
            keys.append(key)
        return keys

    def get(self, key: int) -> Record:
        try:
            return self._records[key]
        except KeyError:
            raise RecordNotFoundError(self.name.value, key) from None

    def update(self, key: int, record: Record) -> Record:
        previous = self.get(key)
        if not isinstance(record, self.record_type):
            raise TypeError(f"{self.name.value} holds {self.record_type.__name__}, got {type(record).__name__}")
        self._unindex(key, previous)
        self._records[key] = record
        self._index(key, record)
        return record

    def set_errors(self, key: int, errors: list[FieldError]) -> Record:
        return self.update(key, self.get(key).with_errors(errors))

    def clear(self):
        self.load([])

    def items(self) -> list[tuple[int, Record]]:
        return list(self._records.items())

    def records(self) -> list[Record]:
        return list(self._records.values())

    def keys_where(self, field: Enum, value: str | None) -> list[int]:
        """Keys of records whose field equals value, in collection order"""
        if field in self._indexes:
            return sorted(self._indexes[field].get(value, ()))
        return [k for k, r in self._records.items() if r.value_of(field) == value]


class EntityStore:
    def __init__(self):
        keys = count(1)
        self.invoices = RecordCollection(
            Collection.INVOICES, Invoice, (InvoiceField.PRODUCT_NAME, InvoiceField.CUSTOMER_NAME), keys
        )
        self.products = RecordCollection(Collection.PRODUCTS, Product, (ProductField.NAME,), keys)
        self.customers = RecordCollection(Collection.CUSTOMERS, Customer, (CustomerField.CUSTOMER_NAME,), keys)

    def collection(self, name: Collection) -> RecordCollection:
        return {
            Collection.INVOICES: self.invoices,
            Collection.PRODUCTS: self.products,
            Collection.CUSTOMERS: self.customers,
        }[Collection(name)]

    def load_result(self, result: ExtractionResult):
        """Bulk-replace all three collections from a successful extraction"""
        self.invoices.load(result.invoices)
        self.products.load(result.products)
        self.customers.load(result.customers)
        logger.info(
            "Store loaded",
            invoices=len(self.invoices),
            products=len(self.products),
            customers=len(self.customers),
        )

    def clear(self):
        self.invoices.clear()
        self.products.clear()
        self.customers.clear()
        logger.info("Store cleared")

    def snapshot(self) -> dict:
        return {
            c.name.value: [{"key": k, **r.to_wire()} for k, r in c.items()]
            for c in (self.invoices, self.products, self.customers)
        }


# Global instance (in production, use dependency injection)
entity_store = EntityStore()
