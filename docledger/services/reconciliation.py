"""
Cross-collection propagation of record edits.

Invoices join products and customers by name only, so renaming one side
has to be pushed to the other. An edit is described by a FieldEdited event
and routed here after the edited record has been written. Matching always
uses the name as it was before the edit.

Propagation rules:
    invoice.productName -> product named like the new value gets the
                           invoice's quantity and taxPercent
    product.name        -> invoices with the old name get the new name plus
                           the product's quantity, taxPercent, priceWithTax
    customer.customerName -> invoices with the old name get the new name
                           plus the customer's phoneNumber and companyName
                           (a missing company becomes "")

Dependent updates are independent of each other: one failing is logged
and reported, the rest still apply, and nothing is rolled back.
"""

from dataclasses import dataclass, field
from datetime import datetime, UTC
from enum import Enum
from typing import Optional
from loguru import logger
from ..models.records import Collection, CustomerField, InvoiceField, ProductField
from .store import EntityStore
from .validation import validate_record


@dataclass
class FieldEdited:
    """Published after a single-field edit has been written to the store."""

    collection: Collection
    key: int
    field: Enum
    previous_value: Optional[str]
    new_value: Optional[str]
    timestamp: Optional[str] = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now(UTC).isoformat()


@dataclass
class PropagationReport:
    updated: dict[str, list[int]] = field(default_factory=dict)
    failed: dict[str, dict[int, str]] = field(default_factory=dict)

    def record_update(self, collection: Collection, key: int):
        self.updated.setdefault(collection.value, []).append(key)

    def record_failure(self, collection: Collection, key: int, error: Exception):
        self.failed.setdefault(collection.value, {})[key] = str(error)


class ReconciliationRouter:
    def __init__(self, store: EntityStore):
        self.store = store

    def route(self, event: FieldEdited) -> PropagationReport:
        report = PropagationReport()
        collection = Collection(event.collection)

        if collection == Collection.INVOICES and event.field == InvoiceField.PRODUCT_NAME:
            self._invoice_product_renamed(event, report)
        elif collection == Collection.PRODUCTS and event.field == ProductField.NAME:
            self._product_renamed(event, report)
        elif collection == Collection.CUSTOMERS and event.field == CustomerField.CUSTOMER_NAME:
            self._customer_renamed(event, report)

        if report.updated or report.failed:
            logger.info(
                "Edit propagated",
                source=collection.value,
                field=event.field.value,
                updated=report.updated,
                failed=report.failed,
            )
        return report

    def _apply(self, collection: Collection, key: int, changes: dict[Enum, Optional[str]], report: PropagationReport):
        target = self.store.collection(collection)
        try:
            record = target.get(key)
            for f, value in changes.items():
                record = record.with_value(f, value)
            target.update(key, record.with_errors(validate_record(record)))
        except Exception as e:
            logger.warning(f"Propagation to {collection.value} #{key} failed: {e}")
            report.record_failure(collection, key, e)
        else:
            report.record_update(collection, key)

    def _invoice_product_renamed(self, event: FieldEdited, report: PropagationReport):
        invoice = self.store.invoices.get(event.key)
        matches = self.store.products.keys_where(ProductField.NAME, event.new_value)
        if not matches:
            return
        # Only the first catalog entry with that name is synced
        self._apply(
            Collection.PRODUCTS,
            matches[0],
            {
                ProductField.QUANTITY: invoice.value_of(InvoiceField.QUANTITY),
                ProductField.TAX_PERCENT: invoice.value_of(InvoiceField.TAX_PERCENT),
            },
            report,
        )

    def _product_renamed(self, event: FieldEdited, report: PropagationReport):
        product = self.store.products.get(event.key)
        changes = {
            InvoiceField.PRODUCT_NAME: event.new_value,
            InvoiceField.QUANTITY: product.value_of(ProductField.QUANTITY),
            InvoiceField.TAX_PERCENT: product.value_of(ProductField.TAX_PERCENT),
            InvoiceField.PRICE_WITH_TAX: product.value_of(ProductField.PRICE_WITH_TAX),
        }
        for key in self.store.invoices.keys_where(InvoiceField.PRODUCT_NAME, event.previous_value):
            self._apply(Collection.INVOICES, key, changes, report)

    def _customer_renamed(self, event: FieldEdited, report: PropagationReport):
        customer = self.store.customers.get(event.key)
        changes = {
            InvoiceField.CUSTOMER_NAME: event.new_value,
            InvoiceField.PHONE_NUMBER: customer.value_of(CustomerField.PHONE_NUMBER),
            InvoiceField.COMPANY_NAME: customer.value_of(CustomerField.COMPANY_NAME) or "",
        }
        for key in self.store.invoices.keys_where(InvoiceField.CUSTOMER_NAME, event.previous_value):
            self._apply(Collection.INVOICES, key, changes, report)
