from typing import AsyncIterator
from pydantic import BaseModel, field_validator
from ..models.records import display_string
from ..services.editor import RecordEditor
from ..services.extraction import ExtractionOrchestrator
from ..services.gemini import GeminiClient
from ..services.store import EntityStore, entity_store


class EditRequest(BaseModel):
    field: str
    value: str | None = None

    @field_validator("value", mode="before")
    @classmethod
    def coerce_value(cls, value):
        return display_string(value)


class EditResponse(BaseModel):
    key: int
    record: dict
    valid: bool
    propagated: dict[str, list[int]]
    failed: dict[str, dict[int, str]]


class ErrorResponse(BaseModel):
    error: str
    details: str


def get_store() -> EntityStore:
    return entity_store


def get_editor() -> RecordEditor:
    return RecordEditor(entity_store)


async def get_orchestrator() -> AsyncIterator[ExtractionOrchestrator]:
    async with GeminiClient() as client:
        yield ExtractionOrchestrator(client)
