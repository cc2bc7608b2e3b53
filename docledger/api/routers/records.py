from fastapi import APIRouter, Depends
from ..deps import EditRequest, EditResponse, ErrorResponse, get_editor, get_store
from ...core.exceptions import UnknownFieldError
from ...models.records import Collection
from ...services.editor import RecordEditor
from ...services.store import EntityStore
from ...services.validation import missing_labels

router = APIRouter(prefix="/records", tags=["records"])


@router.get("")
async def list_records(store: EntityStore = Depends(get_store)):
    """All three collections, each record tagged with its stable key"""
    return store.snapshot()


@router.get("/{collection}")
async def list_collection(collection: Collection, store: EntityStore = Depends(get_store)):
    records = []
    for key, record in store.collection(collection).items():
        entry = {"key": key, **record.to_wire()}
        if collection == Collection.INVOICES:
            entry["missing"] = missing_labels(record)
        records.append(entry)
    return {"collection": collection.value, "total": len(records), "records": records}


@router.patch(
    "/{collection}/{key}",
    response_model=EditResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def edit_record(
    collection: Collection,
    key: int,
    req: EditRequest,
    editor: RecordEditor = Depends(get_editor),
):
    """
    Edit one field of one record.

    Validation errors come back attached to the record and never block the
    write. Renames of product and customer names (and an invoice's product
    name) are propagated to the related collections.
    """
    try:
        field = editor.parse_field(collection, req.field)
    except ValueError:
        raise UnknownFieldError(collection.value, req.field)

    outcome = editor.edit(collection, key, field, req.value)
    return EditResponse(
        key=outcome.key,
        record=outcome.record.to_wire(),
        valid=outcome.is_valid,
        propagated=outcome.propagation.updated,
        failed=outcome.propagation.failed,
    )


@router.delete("")
async def reset_records(store: EntityStore = Depends(get_store)):
    """Clear all three collections"""
    store.clear()
    return {"status": "cleared"}
