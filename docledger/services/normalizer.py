"""
Spreadsheet normalization and media-type dispatch.

Spreadsheets are flattened to plain text (one CSV section per sheet) so they
can be sent inline with the extraction prompt; PDFs and images are passed
through untouched and uploaded as binary assets instead.
"""

import csv
import io
import mimetypes
from datetime import date, datetime, time
from enum import Enum
from loguru import logger
from ..core.exceptions import DecodeError

LEGACY_EXCEL_TYPES = {"application/vnd.ms-excel"}
GENERIC_TYPES = {"", "application/octet-stream", "binary/octet-stream"}


class MediaKind(str, Enum):
    SPREADSHEET = "spreadsheet"
    DOCUMENT = "document"
    IMAGE = "image"
    UNSUPPORTED = "unsupported"


def resolve_media_type(content_type: str | None, filename: str | None) -> str:
    """
    Return the declared media type, falling back to a guess from the filename
    when the client sent nothing useful.
    """
    declared = (content_type or "").split(";")[0].strip().lower()
    if declared in GENERIC_TYPES and filename:
        guessed, _ = mimetypes.guess_type(filename)
        if guessed:
            return guessed
    return declared


def classify_media_type(content_type: str | None, filename: str | None = None) -> MediaKind:
    media_type = resolve_media_type(content_type, filename)
    if "spreadsheet" in media_type or "excel" in media_type:
        return MediaKind.SPREADSHEET
    if "pdf" in media_type:
        return MediaKind.DOCUMENT
    if media_type.startswith("image/"):
        return MediaKind.IMAGE
    return MediaKind.UNSUPPORTED


def _cell_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def _rows_to_csv(rows) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    for row in rows:
        writer.writerow([_cell_text(v) for v in row])
    return buffer.getvalue().rstrip("\n")


def _read_xlsx_sheets(data: bytes) -> list[tuple[str, list[tuple]]]:
    from openpyxl import load_workbook

    wb = load_workbook(filename=io.BytesIO(data), read_only=True, data_only=True)
    try:
        return [(ws.title, list(ws.iter_rows(values_only=True))) for ws in wb.worksheets]
    finally:
        wb.close()


def _read_xls_sheets(data: bytes) -> list[tuple[str, list[tuple]]]:
    import xlrd

    book = xlrd.open_workbook(file_contents=data)
    sheets = []
    for sheet in book.sheets():
        rows = []
        for r in range(sheet.nrows):
            row = []
            for c in range(sheet.ncols):
                cell = sheet.cell(r, c)
                if cell.ctype == xlrd.XL_CELL_DATE:
                    row.append(xlrd.xldate.xldate_as_datetime(cell.value, book.datemode))
                elif cell.ctype == xlrd.XL_CELL_BOOLEAN:
                    row.append(bool(cell.value))
                elif cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
                    row.append(None)
                else:
                    row.append(cell.value)
            rows.append(tuple(row))
        sheets.append((sheet.name, rows))
    return sheets


def read_sheets(data: bytes, filename: str) -> list[tuple[str, list[tuple]]]:
    """
    Read every sheet of a workbook in native order.

    The container format is detected from the leading bytes: OOXML workbooks
    are zip archives, legacy BIFF workbooks are OLE2 compound files.

    Raises:
        DecodeError: if the bytes are not a readable workbook
    """
    try:
        if data[:4] == b"PK\x03\x04":
            return _read_xlsx_sheets(data)
        if data[:8] == b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1":
            return _read_xls_sheets(data)
    except Exception as e:
        logger.error(f"Spreadsheet decode failed for {filename}: {e}")
        raise DecodeError(filename, str(e)) from e
    raise DecodeError(filename, "not a supported spreadsheet container")


def spreadsheet_to_text(data: bytes, filename: str = "workbook") -> str:
    """
    Render every sheet of a workbook as a delimited CSV section.

    Each sheet becomes ``\\n=== Sheet: <name> ===\\n<csv>\\n`` and sections are
    concatenated in workbook order.
    """
    sheets = read_sheets(data, filename)
    text = ""
    for name, rows in sheets:
        text += f"\n=== Sheet: {name} ===\n{_rows_to_csv(rows)}\n"

    logger.info("Normalized spreadsheet", filename=filename, sheets=len(sheets), chars=len(text))
    return text
