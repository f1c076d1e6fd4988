"""Tests for the openpyxl file-format host."""

from types import SimpleNamespace

import pytest
from openpyxl import Workbook

from linkguard.core.models import ScanRequest
from linkguard.core.scanner import scan
from linkguard.hosts.base import AutomationSession, DocumentHandle, OpenFailure, QueryFailure, SessionFailure
from linkguard.hosts.factory import resolve_engine, session_factory
from linkguard.hosts.openpyxl_host import OpenpyxlDocument, OpenpyxlSession, _link_targets


def _save_plain_workbook(path):
    wb = Workbook()
    ws = wb.active
    ws["A1"] = 1
    ws["A2"] = "=A1*2"
    wb.save(path)
    return path


class TestLinkTargets:
    """Reading targets off openpyxl's external link parts."""

    def test_targets_in_part_order(self):
        wb = SimpleNamespace(
            _external_links=[
                SimpleNamespace(file_link=SimpleNamespace(Target="file:///C:/share/B.xlsx")),
                SimpleNamespace(file_link=SimpleNamespace(Target="C.xlsx")),
            ]
        )

        assert _link_targets(wb) == ["file:///C:/share/B.xlsx", "C.xlsx"]

    def test_missing_file_link_skipped(self):
        wb = SimpleNamespace(_external_links=[SimpleNamespace(file_link=None)])

        assert _link_targets(wb) == []

    def test_no_external_links_attribute(self):
        assert _link_targets(SimpleNamespace()) == []

    def test_query_failure_wrapped(self):
        class Broken:
            @property
            def _external_links(self):
                raise KeyError("xl/externalLinks/externalLink1.xml")

        doc = OpenpyxlDocument("x.xlsx", Broken())

        with pytest.raises(QueryFailure):
            doc.get_external_link_targets()


class TestSession:
    """Opening real files from disk."""

    def test_satisfies_protocols(self):
        session = OpenpyxlSession()

        assert isinstance(session, AutomationSession)
        assert isinstance(OpenpyxlDocument("x", None), DocumentHandle)

    def test_workbook_without_links(self, tmp_path):
        path = _save_plain_workbook(tmp_path / "plain.xlsx")
        session = OpenpyxlSession()

        doc = session.open_document(str(path))
        try:
            assert doc.get_external_link_targets() == []
        finally:
            doc.close(save=False)
        session.shutdown()

    def test_close_is_idempotent(self, tmp_path):
        path = _save_plain_workbook(tmp_path / "plain.xlsx")
        doc = OpenpyxlSession().open_document(str(path))

        doc.close()
        doc.close()

    def test_corrupt_file(self, tmp_path):
        bad = tmp_path / "corrupt.xlsx"
        bad.write_bytes(b"this is not a zip archive")

        with pytest.raises(OpenFailure):
            OpenpyxlSession().open_document(str(bad))

    def test_legacy_xls_unsupported(self, tmp_path):
        old = tmp_path / "old.xls"
        old.write_bytes(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 64)

        with pytest.raises(OpenFailure):
            OpenpyxlSession().open_document(str(old))

    def test_password_requires_excel(self, tmp_path):
        path = _save_plain_workbook(tmp_path / "plain.xlsx")

        with pytest.raises(OpenFailure, match="excel engine"):
            OpenpyxlSession().open_document(str(path), password="pw")

    def test_scan_mixed_folder(self, tmp_path):
        _save_plain_workbook(tmp_path / "good.xlsx")
        (tmp_path / "bad.xlsx").write_bytes(b"garbage")

        result = scan(ScanRequest(path=str(tmp_path), filter="*.xlsx"), OpenpyxlSession)

        assert result.processed == 2
        assert [r.workbook.endswith("bad.xlsx") for r in result.rows] == [True]
        assert result.rows[0].error


class TestEngineSelection:
    def test_explicit_openpyxl(self):
        assert resolve_engine("openpyxl") == "openpyxl"
        assert session_factory("openpyxl") is OpenpyxlSession

    def test_auto_without_pywin32(self, monkeypatch):
        from linkguard.hosts import excel_host

        monkeypatch.setattr(excel_host, "WINDOWS_EXCEL_AVAILABLE", False)

        assert resolve_engine("auto") == "openpyxl"

    def test_auto_with_pywin32(self, monkeypatch):
        from linkguard.hosts import excel_host

        monkeypatch.setattr(excel_host, "WINDOWS_EXCEL_AVAILABLE", True)

        assert resolve_engine("AUTO") == "excel"

    def test_unknown_engine(self):
        with pytest.raises(SessionFailure):
            resolve_engine("libreoffice")
