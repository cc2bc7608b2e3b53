"""
Single-field record edits: validate, write, then reconcile.
"""

from dataclasses import dataclass
from enum import Enum
from loguru import logger
from ..models.records import Collection, Record
from .reconciliation import FieldEdited, PropagationReport, ReconciliationRouter
from .store import EntityStore
from .validation import validate_record


@dataclass
class EditOutcome:
    key: int
    record: Record
    propagation: PropagationReport

    @property
    def is_valid(self) -> bool:
        return not self.record.validation_errors


class RecordEditor:
    def __init__(self, store: EntityStore, router: ReconciliationRouter | None = None):
        self.store = store
        self.router = router or ReconciliationRouter(store)

    def parse_field(self, collection: Collection, field: str) -> Enum:
        """Resolve a wire field name against the collection's closed field set (ValueError if unknown)"""
        return self.store.collection(collection).record_type.field_enum(field)

    def edit(self, collection: Collection, key: int, field: Enum, value: str | None) -> EditOutcome:
        """
        Apply one field edit.

        Validation errors are attached to the written record but never block
        the write. The edit is then routed for cross-collection propagation,
        matching on the field's value from before the edit.
        """
        collection = Collection(collection)
        target = self.store.collection(collection)
        current = target.get(key)
        previous_value = current.value_of(field)

        edited = current.with_value(field, value)
        errors = validate_record(edited)
        record = target.update(key, edited.with_errors(errors))

        logger.info(
            "Record edited",
            collection=collection.value,
            key=key,
            field=field.value,
            errors=len(errors),
        )

        report = self.router.route(
            FieldEdited(
                collection=collection,
                key=key,
                field=field,
                previous_value=previous_value,
                new_value=value,
            )
        )
        return EditOutcome(key=key, record=record, propagation=report)
