"""
Pytest configuration.

Seeds the required Gemini credential before the application settings are
imported, registers the integration marker and provides store fixtures.
"""

import io
import os

os.environ.setdefault("GEMINI_API_KEY", "test-key")

import pytest
from openpyxl import Workbook

from docledger.models.records import Customer, Invoice, Product
from docledger.services.store import EntityStore


def pytest_addoption(parser):
    """Add custom command-line options"""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests against the real Gemini API"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is specified"""
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="need --run-integration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


def make_workbook(sheets: dict[str, list[list]]) -> bytes:
    """Build an .xlsx file in memory; sheet order follows dict order"""
    wb = Workbook()
    wb.remove(wb.active)
    for title, rows in sheets.items():
        ws = wb.create_sheet(title)
        for row in rows:
            ws.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


@pytest.fixture
def workbook_factory():
    return make_workbook


@pytest.fixture
def workbook_bytes():
    return make_workbook({
        "January": [["Invoice No", "Item", "Qty"], ["INV-1", "Widget", 2]],
        "February": [["Invoice No", "Item", "Qty"], ["INV-2", "Gadget", 3.5]],
    })


@pytest.fixture
def store():
    """A store holding two Widget lines for Alice and one Gizmo line for Bob"""
    s = EntityStore()
    s.invoices.load([
        Invoice(serialNumber="INV-1", invoiceDate="2024-01-05", customerName="Alice", productName="Widget",
                quantity="2", taxPercent="18", priceWithTax="236", totalAmount="590",
                companyName="Acme", phoneNumber="555-0100"),
        Invoice(serialNumber="INV-1", invoiceDate="2024-01-05", customerName="Alice", productName="Gizmo",
                quantity="1", taxPercent="5", priceWithTax="105", totalAmount="590",
                companyName="Acme", phoneNumber="555-0100"),
        Invoice(serialNumber="INV-2", invoiceDate="2024-01-09", customerName="Bob", productName="Widget",
                quantity="3", taxPercent="18", priceWithTax="354", totalAmount="354",
                companyName=None, phoneNumber="555-0199"),
    ])
    s.products.load([
        Product(name="Widget", quantity="5", unitPrice="100", taxPercent="18", priceWithTax="118", discount=None),
        Product(name="Gizmo", quantity="1", unitPrice="100", taxPercent="5", priceWithTax="105", discount=None),
    ])
    s.customers.load([
        Customer(customerName="Alice", phoneNumber="555-0100", companyName="Acme", totalPurchaseAmount="590"),
        Customer(customerName="Bob", phoneNumber="555-0199", companyName=None, totalPurchaseAmount="354"),
    ])
    return s
