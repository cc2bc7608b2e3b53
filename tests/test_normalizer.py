"""
Tests for spreadsheet normalization and media-type dispatch.
"""

from datetime import date
from pathlib import Path

import pytest
from docledger.core.exceptions import DecodeError
from docledger.services.normalizer import MediaKind, classify_media_type, spreadsheet_to_text

FIXTURES = Path(__file__).parent / "fixtures"


class TestClassifyMediaType:
    @pytest.mark.parametrize("content_type", [
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-excel",
    ])
    def test_spreadsheets(self, content_type):
        assert classify_media_type(content_type, "book.xlsx") == MediaKind.SPREADSHEET

    def test_pdf_is_document(self):
        assert classify_media_type("application/pdf", "scan.pdf") == MediaKind.DOCUMENT

    @pytest.mark.parametrize("content_type", ["image/png", "image/jpeg"])
    def test_images(self, content_type):
        assert classify_media_type(content_type, "photo") == MediaKind.IMAGE

    def test_unknown_type_is_unsupported(self):
        assert classify_media_type("text/plain", "notes.txt") == MediaKind.UNSUPPORTED

    def test_generic_type_falls_back_to_extension(self):
        assert classify_media_type("application/octet-stream", "scan.pdf") == MediaKind.DOCUMENT
        assert classify_media_type(None, "receipt.png") == MediaKind.IMAGE

    def test_content_type_parameters_ignored(self):
        assert classify_media_type("application/pdf; charset=binary", "x") == MediaKind.DOCUMENT


class TestSpreadsheetToText:
    def test_one_section_per_sheet_in_order(self, workbook_bytes):
        text = spreadsheet_to_text(workbook_bytes, "sales.xlsx")

        assert text.count("=== Sheet: ") == 2
        assert text.index("=== Sheet: January ===") < text.index("=== Sheet: February ===")

    def test_sheet_rendered_as_csv(self, workbook_bytes):
        text = spreadsheet_to_text(workbook_bytes, "sales.xlsx")

        assert text == (
            "\n=== Sheet: January ===\nInvoice No,Item,Qty\nINV-1,Widget,2\n"
            "\n=== Sheet: February ===\nInvoice No,Item,Qty\nINV-2,Gadget,3.5\n"
        )

    def test_cells_needing_quotes_are_quoted(self, workbook_factory):
        data = workbook_factory({"Items": [["Name", "Price"], ["Bolt, steel", 1200.0]]})

        text = spreadsheet_to_text(data)

        assert '"Bolt, steel",1200' in text

    def test_empty_cells_and_dates(self, workbook_factory):
        data = workbook_factory({"S": [["a", None, "c"], [date(2024, 3, 1), "x", None]]})

        text = spreadsheet_to_text(data)

        assert "a,,c" in text
        assert "2024-03-01" in text

    def test_many_sheets_keep_count(self, workbook_factory):
        data = workbook_factory({f"Sheet{i}": [[i]] for i in range(5)})

        text = spreadsheet_to_text(data)

        assert text.count("=== Sheet: ") == 5
        positions = [text.index(f"=== Sheet: Sheet{i} ===") for i in range(5)]
        assert positions == sorted(positions)

    def test_garbage_raises_decode_error(self):
        with pytest.raises(DecodeError) as exc:
            spreadsheet_to_text(b"definitely not a workbook", "broken.xlsx")
        assert "broken.xlsx" in exc.value.details

    def test_corrupt_zip_raises_decode_error(self):
        with pytest.raises(DecodeError):
            spreadsheet_to_text(b"PK\x03\x04" + b"\x00" * 64, "truncated.xlsx")


class TestLegacyWorkbook:
    """ledger.xls is a two-sheet BIFF8 workbook with date, boolean and blank cells"""

    @pytest.fixture
    def xls_bytes(self):
        return (FIXTURES / "ledger.xls").read_bytes()

    def test_sheets_rendered_in_order(self, xls_bytes):
        text = spreadsheet_to_text(xls_bytes, "ledger.xls")

        assert text == (
            "\n=== Sheet: Ledger ===\n"
            "Invoice No,Date,Paid,Note,Qty\n"
            "INV-9,2024-04-01T00:00:00,TRUE,,4\n"
            'INV-10,2024-04-02T12:00:00,FALSE,"rush, fragile",2.5\n'
            "\n=== Sheet: Notes ===\nCafé\n"
        )

    def test_detected_by_content_not_extension(self, xls_bytes):
        text = spreadsheet_to_text(xls_bytes, "upload.bin")

        assert "=== Sheet: Ledger ===" in text

    def test_truncated_compound_file_raises_decode_error(self, xls_bytes):
        with pytest.raises(DecodeError) as exc:
            spreadsheet_to_text(xls_bytes[:700], "ledger.xls")
        assert "ledger.xls" in exc.value.details
