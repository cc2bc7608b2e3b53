"""
Tests for the in-memory record store.
"""

import pytest
from docledger.core.exceptions import RecordNotFoundError
from docledger.models.extraction import ExtractionResult
from docledger.models.records import Collection, FieldError, Invoice, InvoiceField, Product, ProductField
from docledger.services.store import EntityStore


def test_load_assigns_stable_keys_in_order(store):
    items = store.invoices.items()

    assert [r.serial_number for _, r in items] == ["INV-1", "INV-1", "INV-2"]
    keys = [k for k, _ in items]
    assert keys == sorted(keys)


def test_keys_unique_across_collections(store):
    keys = [k for c in (store.invoices, store.products, store.customers) for k, _ in c.items()]

    assert len(keys) == len(set(keys))


def test_update_keeps_position(store):
    first, second, third = [k for k, _ in store.invoices.items()]
    record = store.invoices.get(second).with_value(InvoiceField.QUANTITY, "9")

    store.invoices.update(second, record)

    assert [k for k, _ in store.invoices.items()] == [first, second, third]
    assert store.invoices.get(second).quantity == "9"


def test_index_follows_updates(store):
    widget_keys = store.invoices.keys_where(InvoiceField.PRODUCT_NAME, "Widget")
    assert len(widget_keys) == 2

    renamed = store.invoices.get(widget_keys[0]).with_value(InvoiceField.PRODUCT_NAME, "Sprocket")
    store.invoices.update(widget_keys[0], renamed)

    assert store.invoices.keys_where(InvoiceField.PRODUCT_NAME, "Widget") == [widget_keys[1]]
    assert store.invoices.keys_where(InvoiceField.PRODUCT_NAME, "Sprocket") == [widget_keys[0]]


def test_keys_where_on_unindexed_field(store):
    keys = store.invoices.keys_where(InvoiceField.SERIAL_NUMBER, "INV-1")

    assert len(keys) == 2


def test_set_errors_attaches_to_record(store):
    key = store.products.items()[0][0]

    store.products.set_errors(key, [FieldError(field="quantity", message="bad")])

    assert store.products.get(key).validation_errors[0].field == "quantity"
    assert store.products.get(key).name == "Widget"


def test_unknown_key_raises(store):
    with pytest.raises(RecordNotFoundError):
        store.invoices.get(10_000)
    with pytest.raises(RecordNotFoundError):
        store.invoices.update(10_000, Invoice())


def test_update_rejects_wrong_record_type(store):
    key = store.invoices.items()[0][0]

    with pytest.raises(TypeError):
        store.invoices.update(key, Product(name="Widget"))


def test_reload_never_reuses_keys(store):
    old_keys = {k for k, _ in store.products.items()}

    store.products.load([Product(name="New")])

    new_key = store.products.items()[0][0]
    assert new_key not in old_keys
    assert store.products.keys_where(ProductField.NAME, "Widget") == []


def test_load_result_replaces_everything():
    s = EntityStore()
    s.products.load([Product(name="Stale")])

    s.load_result(ExtractionResult(invoices=[Invoice(serialNumber="A")], products=[], customers=[]))

    assert len(s.invoices) == 1
    assert len(s.products) == 0
    assert len(s.customers) == 0


def test_clear_empties_all_collections(store):
    store.clear()

    assert len(store.invoices) == len(store.products) == len(store.customers) == 0
    assert store.invoices.keys_where(InvoiceField.PRODUCT_NAME, "Widget") == []


def test_snapshot_shape(store):
    snap = store.snapshot()

    assert set(snap) == {"invoices", "products", "customers"}
    assert snap["products"][0]["name"] == "Widget"
    assert "key" in snap["customers"][0]


def test_collection_lookup_by_name(store):
    assert store.collection(Collection.PRODUCTS) is store.products
    assert store.collection("customers") is store.customers
