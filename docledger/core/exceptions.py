"""
Exception hierarchy for the extraction pipeline and record editing.

Every error knows the HTTP status it maps to and how to render itself as the
transport-level failure body ``{"error": ..., "details": ...}``.
"""
from typing import Optional


class DocLedgerError(Exception):
    """
    Base exception for all docledger errors.

    Attributes:
        message: Short human-readable error message
        details: Longer explanation (rendered as the "details" field)
        http_status: Status code used by the API layer
    """
    http_status: int = 500

    def __init__(self, message: str = "An unexpected error occurred", details: Optional[str] = None):
        self.message = message
        self.details = details or message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert exception to the transport failure body."""
        return {"error": self.message, "details": self.details}


# Intake errors
class IngestError(DocLedgerError):
    """No files were supplied with an extraction request."""
    http_status = 400

    def __init__(self, message: str = "No files uploaded", **kwargs):
        super().__init__(message, **kwargs)


class FileTooLargeError(DocLedgerError):
    """An uploaded file exceeds the per-file size ceiling."""
    http_status = 413

    def __init__(self, filename: str, size: int, max_size: int):
        self.filename = filename
        self.size = size
        self.max_size = max_size
        super().__init__(
            "File too large",
            details=f"{filename} is {size} bytes; maximum size is {max_size // (1024 * 1024)}MB",
        )


class DecodeError(DocLedgerError):
    """A spreadsheet could not be decoded."""
    http_status = 422

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        super().__init__("Failed to read spreadsheet", details=f"{filename}: {reason}")


# Remote service errors
class RemoteAssetError(DocLedgerError):
    """Upload or status polling against the inference service failed."""
    http_status = 502

    def __init__(self, message: str = "Remote asset processing failed", **kwargs):
        super().__init__(message, **kwargs)


class AssetTimeoutError(RemoteAssetError):
    """A remote asset did not leave the processing state within the attempt budget."""
    http_status = 504

    def __init__(self, asset_name: str, attempts: int):
        self.asset_name = asset_name
        self.attempts = attempts
        super().__init__(
            "Remote asset not ready",
            details=f"{asset_name} still processing after {attempts} status checks",
        )


class InferenceError(DocLedgerError):
    """The generate-content call failed or returned no text."""
    http_status = 502

    def __init__(self, message: str = "Inference call failed", **kwargs):
        super().__init__(message, **kwargs)


# Record errors
class RecordNotFoundError(DocLedgerError):
    """No record with the given key exists in the collection."""
    http_status = 404

    def __init__(self, collection: str, key: int):
        self.collection = collection
        self.key = key
        super().__init__("Record not found", details=f"No {collection} record with key {key}")


class UnknownFieldError(DocLedgerError):
    """The edited field is not part of the collection's field set."""
    http_status = 422

    def __init__(self, collection: str, field: str):
        self.collection = collection
        self.field = field
        super().__init__("Unknown field", details=f"{collection} records have no field '{field}'")
