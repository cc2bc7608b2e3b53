"""
Per-field validation rules for invoices, products and customers.

Every field identifier of every record type maps to exactly one rule, so
there is no field that silently escapes validation by being forgotten.
Rules are pure; errors are advisory and never block a write.
"""

import math
import re
from typing import Callable
from ..models.records import (
    Customer,
    CustomerField,
    FieldError,
    Invoice,
    InvoiceField,
    Product,
    ProductField,
    Record,
)

Rule = Callable[[str, str | None], FieldError | None]

_LEADING_NUMBER = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_number(value) -> float | None:
    """
    Read the leading number of a display string ("18%" -> 18.0).

    Returns None when the value does not start with a number.
    """
    if value is None:
        return None
    match = _LEADING_NUMBER.match(str(value))
    if not match:
        return None
    number = float(match.group(1))
    return None if math.isinf(number) else number


def unchecked(field: str, value: str | None) -> FieldError | None:
    return None


def required(message: str) -> Rule:
    def rule(field: str, value: str | None) -> FieldError | None:
        if value is None or not str(value).strip():
            return FieldError(field=field, message=message)
        return None
    return rule


def positive_number(message: str) -> Rule:
    def rule(field: str, value: str | None) -> FieldError | None:
        number = parse_number(value)
        if number is None or number <= 0:
            return FieldError(field=field, message=message)
        return None
    return rule


def non_negative_number(message: str) -> Rule:
    def rule(field: str, value: str | None) -> FieldError | None:
        number = parse_number(value)
        if number is None or number < 0:
            return FieldError(field=field, message=message)
        return None
    return rule


INVOICE_RULES: dict[InvoiceField, Rule] = {
    InvoiceField.SERIAL_NUMBER: required("Serial number is required"),
    InvoiceField.INVOICE_DATE: required("Invoice date is required"),
    InvoiceField.CUSTOMER_NAME: required("Customer name is required"),
    InvoiceField.PRODUCT_NAME: required("Product name is required"),
    InvoiceField.QUANTITY: positive_number("Quantity must be a positive number"),
    InvoiceField.TAX_PERCENT: non_negative_number("Tax percent must be non-negative"),
    InvoiceField.PRICE_WITH_TAX: unchecked,
    InvoiceField.TOTAL_AMOUNT: unchecked,
    InvoiceField.COMPANY_NAME: unchecked,
    InvoiceField.PHONE_NUMBER: unchecked,
    InvoiceField.STATUS: unchecked,
}

PRODUCT_RULES: dict[ProductField, Rule] = {
    ProductField.NAME: required("Product name is required"),
    ProductField.QUANTITY: positive_number("Quantity must be a positive number"),
    ProductField.UNIT_PRICE: non_negative_number("Unit price must be non-negative"),
    ProductField.TAX_PERCENT: unchecked,
    ProductField.PRICE_WITH_TAX: unchecked,
    ProductField.DISCOUNT: unchecked,
}

CUSTOMER_RULES: dict[CustomerField, Rule] = {
    CustomerField.CUSTOMER_NAME: required("Customer name is required"),
    CustomerField.PHONE_NUMBER: required("Phone number is required"),
    CustomerField.COMPANY_NAME: unchecked,
    CustomerField.TOTAL_PURCHASE_AMOUNT: unchecked,
}

RULES_BY_TYPE: dict[type[Record], dict] = {
    Invoice: INVOICE_RULES,
    Product: PRODUCT_RULES,
    Customer: CUSTOMER_RULES,
}

# Short labels for blank key invoice fields, in display order
MISSING_LABELS: dict[InvoiceField, str] = {
    InvoiceField.SERIAL_NUMBER: "Serial #",
    InvoiceField.INVOICE_DATE: "Date",
    InvoiceField.CUSTOMER_NAME: "Customer",
    InvoiceField.PRODUCT_NAME: "Product",
    InvoiceField.QUANTITY: "Quantity",
}


def _evaluate(record: Record, rules: dict) -> list[FieldError]:
    errors = []
    for field in record.field_enum:
        error = rules[field](field.value, record.value_of(field))
        if error is not None:
            errors.append(error)
    return errors


def validate_invoice(invoice: Invoice) -> list[FieldError]:
    return _evaluate(invoice, INVOICE_RULES)


def validate_product(product: Product) -> list[FieldError]:
    return _evaluate(product, PRODUCT_RULES)


def validate_customer(customer: Customer) -> list[FieldError]:
    return _evaluate(customer, CUSTOMER_RULES)


def validate_record(record: Record) -> list[FieldError]:
    """Dispatch to the rule table for the record's type"""
    return _evaluate(record, RULES_BY_TYPE[type(record)])


def missing_labels(invoice: Invoice) -> list[str]:
    return [
        label for field, label in MISSING_LABELS.items()
        if not (invoice.value_of(field) or "").strip()
    ]
