from loguru import logger
from pydantic import BaseModel, Field, ValidationInfo, field_validator
from .records import Customer, Invoice, Product, Record, display_string


class ExtractionResult(BaseModel):
    """
    Decoded model output.

    Validation is lenient so that a decodable response always yields a
    result: malformed record sets and non-object entries are dropped with a
    warning, and missing_fields entries are rendered as strings.
    """
    invoices: list[Invoice] = Field(default_factory=list)
    products: list[Product] = Field(default_factory=list)
    customers: list[Customer] = Field(default_factory=list)
    missing_fields: list[str] = Field(default_factory=list)

    @field_validator("invoices", "products", "customers", mode="before")
    @classmethod
    def keep_record_objects(cls, value, info: ValidationInfo):
        if value is None:
            return []
        if not isinstance(value, list):
            logger.warning("Dropping record set that is not a list", field=info.field_name, type=type(value).__name__)
            return []
        kept = [v for v in value if isinstance(v, (dict, Record))]
        if len(kept) != len(value):
            logger.warning("Dropping non-object records", field=info.field_name, dropped=len(value) - len(kept))
        return kept

    @field_validator("missing_fields", mode="before")
    @classmethod
    def missing_as_strings(cls, value):
        if value is None:
            return []
        if not isinstance(value, list):
            value = [value]
        return [str(display_string(v)) for v in value if v is not None]

    def to_wire(self) -> dict:
        return {
            "invoices": [i.model_dump(by_alias=True, exclude={"validation_errors"}) for i in self.invoices],
            "products": [p.model_dump(by_alias=True, exclude={"validation_errors"}) for p in self.products],
            "customers": [c.model_dump(by_alias=True, exclude={"validation_errors"}) for c in self.customers],
            "missing_fields": list(self.missing_fields),
        }


class DegradedResult(BaseModel):
    """Returned when the model output could not be decoded"""
    error: str = "Failed to parse JSON"
    raw: str = ""

    def to_wire(self) -> dict:
        return self.model_dump()
