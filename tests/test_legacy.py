"""Tests for legacy-format advisories and container sniffing."""

from datetime import datetime, timezone

from conftest import damage_zip_member, make_ole_blob, make_xlsx

from doctext.extractor.legacy import (
    is_compound_binary,
    is_encrypted_ooxml,
    legacy_powerpoint_advisory,
    legacy_word_advisory,
    spreadsheet_notice,
    xlsx_modified_date,
)
from doctext.extractor.types import Document


class TestContainerSniffing:
    def test_compound_binary_signature(self):
        assert is_compound_binary(make_ole_blob()) is True
        assert is_compound_binary(b"PK\x03\x04") is False

    def test_encrypted_ooxml(self):
        assert is_encrypted_ooxml(make_ole_blob(encrypted=True)) is True
        assert is_encrypted_ooxml(make_ole_blob()) is False

    def test_encrypted_marker_outside_container_is_ignored(self):
        assert is_encrypted_ooxml("EncryptedPackage".encode("utf-16-le")) is False


class TestAdvisories:
    def test_word_advisory_has_metadata_and_guidance(self):
        document = Document(content=b"x" * 2048, name="syllabus.doc")
        text = legacy_word_advisory(document)
        assert "File Name: syllabus.doc" in text
        assert "File Size: 2.00 KB" in text
        assert ".docx" in text
        assert "PDF" in text

    def test_powerpoint_advisory(self):
        text = legacy_powerpoint_advisory(Document(content=b"", name="week1.ppt"))
        assert "week1.ppt" in text
        assert ".pptx" in text


class TestSpreadsheetNotice:
    def test_uses_supplied_last_modified(self):
        document = Document(
            content=b"", name="grades.xls", last_modified=datetime(2023, 1, 9, 8, 0)
        )
        text = spreadsheet_notice(document)
        assert "File Name: grades.xls" in text
        assert "Last Modified: 2023-01-09" in text

    def test_reads_core_properties_for_xlsx(self):
        text = spreadsheet_notice(Document(content=make_xlsx(), name="grades.xlsx"))
        assert "Last Modified: 2024-03-05" in text

    def test_unknown_last_modified(self):
        text = spreadsheet_notice(Document(content=make_ole_blob(), name="old.xls"))
        assert "Last Modified: Unknown" in text

    def test_xlsx_modified_date(self):
        assert xlsx_modified_date(make_xlsx()) == datetime(
            2024, 3, 5, 10, 15, tzinfo=timezone.utc
        )
        assert xlsx_modified_date(make_xlsx(modified=None)) is None
        assert xlsx_modified_date(make_xlsx(modified="yesterday")) is None

    def test_damaged_core_properties(self):
        data = damage_zip_member(make_xlsx(), "docProps/core.xml")
        assert xlsx_modified_date(data) is None

        text = spreadsheet_notice(Document(content=data, name="grades.xlsx"))
        assert "Last Modified: Unknown" in text

    def test_encrypted_workbook_is_flagged(self):
        text = spreadsheet_notice(
            Document(content=make_ole_blob(encrypted=True), name="locked.xlsx")
        )
        assert "Password-protected" in text
        assert "Last Modified: Unknown" in text

    def test_plain_workbook_is_not_flagged(self):
        text = spreadsheet_notice(Document(content=make_xlsx(), name="grades.xlsx"))
        assert "Protection:" not in text
