from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse
from loguru import logger
from ..deps import ErrorResponse, get_orchestrator, get_store
from ...core.config import settings
from ...core.exceptions import DocLedgerError, FileTooLargeError, IngestError
from ...models.extraction import ExtractionResult
from ...services.extraction import ExtractionOrchestrator, SourceFile
from ...services.store import EntityStore

router = APIRouter(prefix="/api", tags=["extraction"])


@router.post(
    "/extract",
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def extract(
    files: list[UploadFile] | None = File(None),
    orchestrator: ExtractionOrchestrator = Depends(get_orchestrator),
    store: EntityStore = Depends(get_store),
):
    """
    Extract invoices, products and customers from uploaded documents.

    Accepts multipart/form-data with one or more parts named "files"
    (PDF, images, Excel workbooks; 10 MB each by default).

    Always answers 200 once the model has replied, even when its output
    could not be decoded - in that case the body is {"error", "raw"} and the
    record store is left untouched. Transport-level failures answer with
    {"error", "details"} and an error status.
    """
    if not files:
        raise IngestError(details="Request contained no file parts under 'files'")

    sources = []
    for upload in files:
        data = await upload.read()
        if len(data) > settings.max_upload_size_bytes:
            raise FileTooLargeError(upload.filename or "file", len(data), settings.max_upload_size_bytes)
        sources.append(SourceFile(filename=upload.filename or "file", content_type=upload.content_type, data=data))

    try:
        result = await orchestrator.extract(sources)
    except DocLedgerError:
        raise
    except Exception as e:
        logger.exception(f"Extraction failed: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to process files", "details": str(e)})

    if isinstance(result, ExtractionResult):
        store.load_result(result)
    return JSONResponse(status_code=200, content=result.to_wire())
