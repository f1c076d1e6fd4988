"""Tests for report building and the JSON/CSV/HTML writers."""

import csv
import json

from linkguard.core.models import ResultRow, ScanRequest, ScanResult
from linkguard.reporting.artifacts import build_report, resolve_output_dir, write_report
from linkguard.reporting.csv_export import write_rows_csv
from linkguard.reporting.html_report import render_html_report


def _result(tmp_path):
    a = str(tmp_path / "A.xls")
    return ScanResult(
        rows=[
            ResultRow.for_link(a, r"C:\share\B.xls"),
            ResultRow.for_link(a, r"C:\share\C.xls"),
            ResultRow.for_error(str(tmp_path / "E.xls"), "File is <corrupt>"),
        ],
        files=[a, str(tmp_path / "D.xls"), str(tmp_path / "E.xls")],
        processed=3,
        failed=1,
    )


class TestBuildReport:
    def test_shape(self, tmp_path):
        request = ScanRequest(path=str(tmp_path), password="secret")

        report = build_report(request, _result(tmp_path), {}, engine="openpyxl")

        assert report["root"] == str(tmp_path)
        assert report["engine"] == "openpyxl"
        assert report["request"]["password_supplied"] is True
        assert "secret" not in json.dumps(report)
        assert report["rows"][0] == {"Workbook": str(tmp_path / "A.xls"), "Link": r"C:\share\B.xls", "Exception": ""}
        assert report["summary"]["counters"]["links"] == 2
        assert report["summary"]["counters"]["failed"] == 1
        assert {t["name"] for t in report["findings"]["top_targets"]} == {"B.xls", "C.xls"}

    def test_top_n_from_config(self, tmp_path):
        report = build_report(
            ScanRequest(path=str(tmp_path)), _result(tmp_path), {"reporting": {"top_n": 1}}
        )

        assert len(report["findings"]["top_targets"]) == 1


class TestWriters:
    def test_json_and_html_written(self, tmp_path):
        report = build_report(ScanRequest(path=str(tmp_path)), _result(tmp_path), {})
        out = resolve_output_dir(str(tmp_path))

        json_path, html_path = write_report(report, out)

        assert json.loads(open(json_path, encoding="utf-8").read())["failed"] == 1
        assert open(html_path, encoding="utf-8").read().startswith("<!doctype html>")
        assert out.parent.parent.name == "output"

    def test_skip_html(self, tmp_path):
        report = build_report(ScanRequest(path=str(tmp_path)), _result(tmp_path), {})

        json_path, html_path = write_report(report, tmp_path / "run", write_html=False)

        assert json_path
        assert html_path == ""

    def test_output_dir_override(self, tmp_path):
        out = resolve_output_dir(str(tmp_path / "scan"), str(tmp_path / "reports"))

        assert str(out).startswith(str((tmp_path / "reports").resolve()))

    def test_csv(self, tmp_path):
        path = write_rows_csv(_result(tmp_path).rows, tmp_path / "out" / "links.csv")

        with open(path, newline="", encoding="utf-8-sig") as fh:
            rows = list(csv.DictReader(fh))
        assert [r["Link"] for r in rows] == [r"C:\share\B.xls", r"C:\share\C.xls", ""]
        assert rows[2]["Exception"] == "File is <corrupt>"


class TestHtml:
    def test_placeholders_filled_and_escaped(self, tmp_path):
        report = build_report(ScanRequest(path=str(tmp_path)), _result(tmp_path), {})

        html = render_html_report(report)

        assert "$TABLE" not in html
        assert "$LINKS" not in html
        assert "File is &lt;corrupt&gt;" in html
        assert "File is <corrupt>" not in html
        assert 'class="pill' in html

    def test_dry_run_banner(self, tmp_path):
        report = build_report(
            ScanRequest(path=str(tmp_path)),
            ScanResult(files=[str(tmp_path / "A.xls")], planned=1),
            {},
            dry_run=True,
        )

        html = render_html_report(report)

        assert "DRY RUN" in html
        assert "No external links found." in html


class TestRelativeRoot:
    def test_cycle_found_when_scanned_by_relative_path(self, tmp_path, monkeypatch):
        """Hosts report absolute targets even when the scan root was given relative."""
        monkeypatch.chdir(tmp_path)
        result = ScanResult(
            rows=[
                ResultRow.for_link("books/A.xls", str(tmp_path / "books" / "B.xls")),
                ResultRow.for_link("books/B.xls", str(tmp_path / "books" / "A.xls")),
            ],
            files=["books/A.xls", "books/B.xls"],
            processed=2,
        )

        report = build_report(ScanRequest(path="books"), result, {})

        assert report["findings"]["circular"]["cycle_count"] == 1
        assert report["summary"]["risk"] == "HIGH"
