"""
Record types for the three editable collections.

Values are kept as display strings exactly as extracted so the user sees
the original formatting; numbers that arrive as JSON numbers are coerced to
strings. Wire names are camelCase, Python attributes are snake_case.
"""

import json
from enum import Enum
from typing import ClassVar
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class InvoiceField(str, Enum):
    SERIAL_NUMBER = "serialNumber"
    INVOICE_DATE = "invoiceDate"
    CUSTOMER_NAME = "customerName"
    PRODUCT_NAME = "productName"
    QUANTITY = "quantity"
    TAX_PERCENT = "taxPercent"
    PRICE_WITH_TAX = "priceWithTax"
    TOTAL_AMOUNT = "totalAmount"
    COMPANY_NAME = "companyName"
    PHONE_NUMBER = "phoneNumber"
    STATUS = "status"


class ProductField(str, Enum):
    NAME = "name"
    QUANTITY = "quantity"
    UNIT_PRICE = "unitPrice"
    TAX_PERCENT = "taxPercent"
    PRICE_WITH_TAX = "priceWithTax"
    DISCOUNT = "discount"


class CustomerField(str, Enum):
    CUSTOMER_NAME = "customerName"
    PHONE_NUMBER = "phoneNumber"
    COMPANY_NAME = "companyName"
    TOTAL_PURCHASE_AMOUNT = "totalPurchaseAmount"


class FieldError(BaseModel):
    """A single advisory validation error scoped to one field"""
    field: str
    message: str


def display_string(value):
    """Render a JSON value as display text; strings and None pass through"""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return value


class Record(BaseModel):
    """
    Base class for invoices, products and customers.

    Subclasses declare ``field_enum``; every member of it maps to exactly
    one attribute through the attribute's alias.
    """
    field_enum: ClassVar[type[Enum]]

    model_config = ConfigDict(populate_by_name=True)

    validation_errors: list[FieldError] = Field(default_factory=list, alias="validationErrors")

    @field_validator("*", mode="before")
    @classmethod
    def coerce_display_strings(cls, value, info: ValidationInfo):
        if info.field_name == "validation_errors":
            return value
        return display_string(value)

    @classmethod
    def attribute_for(cls, field: Enum) -> str:
        for name, info in cls.model_fields.items():
            if (info.alias or name) == field.value:
                return name
        raise KeyError(field)

    def value_of(self, field: Enum) -> str | None:
        return getattr(self, self.attribute_for(field))

    def with_value(self, field: Enum, value: str | None):
        """Return a copy of this record with one field replaced"""
        return self.model_copy(update={self.attribute_for(field): value})

    def with_errors(self, errors: list[FieldError]):
        return self.model_copy(update={"validation_errors": list(errors)})

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class Invoice(Record):
    """One product line of one source invoice"""
    field_enum: ClassVar[type[Enum]] = InvoiceField

    serial_number: str | None = Field(default=None, alias="serialNumber")
    invoice_date: str | None = Field(default=None, alias="invoiceDate")
    customer_name: str | None = Field(default=None, alias="customerName")
    product_name: str | None = Field(default=None, alias="productName")
    quantity: str | None = Field(default=None, alias="quantity")
    tax_percent: str | None = Field(default=None, alias="taxPercent")
    price_with_tax: str | None = Field(default=None, alias="priceWithTax")
    total_amount: str | None = Field(default=None, alias="totalAmount")
    company_name: str | None = Field(default=None, alias="companyName")
    phone_number: str | None = Field(default=None, alias="phoneNumber")
    status: str | None = Field(default=None, alias="status")


class Product(Record):
    """Deduplicated catalog entry"""
    field_enum: ClassVar[type[Enum]] = ProductField

    name: str | None = Field(default=None, alias="name")
    quantity: str | None = Field(default=None, alias="quantity")
    unit_price: str | None = Field(default=None, alias="unitPrice")
    tax_percent: str | None = Field(default=None, alias="taxPercent")
    price_with_tax: str | None = Field(default=None, alias="priceWithTax")
    discount: str | None = Field(default=None, alias="discount")


class Customer(Record):
    """Deduplicated customer with summed purchase amount"""
    field_enum: ClassVar[type[Enum]] = CustomerField

    customer_name: str | None = Field(default=None, alias="customerName")
    phone_number: str | None = Field(default=None, alias="phoneNumber")
    company_name: str | None = Field(default=None, alias="companyName")
    total_purchase_amount: str | None = Field(default=None, alias="totalPurchaseAmount")


class Collection(str, Enum):
    INVOICES = "invoices"
    PRODUCTS = "products"
    CUSTOMERS = "customers"


RECORD_TYPES: dict[Collection, type[Record]] = {
    Collection.INVOICES: Invoice,
    Collection.PRODUCTS: Product,
    Collection.CUSTOMERS: Customer,
}
