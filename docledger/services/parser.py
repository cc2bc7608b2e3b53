"""
Turn raw model text into the three record sets.

Models like to wrap JSON in Markdown fences even when told not to, so every
fence token is stripped wherever it appears. Output that still cannot be
decoded as a JSON object is returned as a DegradedResult carrying the cleaned
text, so the user can recover it by hand instead of getting a hard failure.
A decoded object always yields a result, even when parts of it are malformed.
"""

import json
from loguru import logger
from ..models.extraction import DegradedResult, ExtractionResult

FENCE_TOKENS = ("```json", "```")
PARSE_FAILURE = "Failed to parse JSON"


def clean_response_text(text: str | None) -> str:
    cleaned = text or ""
    for token in FENCE_TOKENS:
        cleaned = cleaned.replace(token, "")
    return cleaned.strip()


def parse_extraction_response(text: str | None) -> ExtractionResult | DegradedResult:
    cleaned = clean_response_text(text)
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning(f"Model output could not be decoded: {e.msg}", raw_chars=len(cleaned))
        return DegradedResult(error=PARSE_FAILURE, raw=cleaned)
    if not isinstance(payload, dict):
        logger.warning(f"Model output is a JSON {type(payload).__name__}, not an object", raw_chars=len(cleaned))
        return DegradedResult(error=PARSE_FAILURE, raw=cleaned)

    result = ExtractionResult.model_validate(payload)

    logger.info(
        "Parsed extraction response",
        invoices=len(result.invoices),
        products=len(result.products),
        customers=len(result.customers),
        missing_fields=len(result.missing_fields),
    )
    return result
