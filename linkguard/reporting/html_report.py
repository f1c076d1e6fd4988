# linkguard/reporting/html_report.py
from __future__ import annotations

from html import escape
from pathlib import Path
from typing import Any, Dict, List

_TEMPLATES = Path(__file__).resolve().parent / "templates"


def _default_css() -> str:
    """Load embedded CSS for the HTML report.

    Prefers templates/styles.css (kept under version control).
    Falls back to minimal CSS if missing.
    """
    try:
        return (_TEMPLATES / "styles.css").read_text(encoding="utf-8")
    except OSError:
        return "body{font-family:system-ui,Segoe UI,Roboto,Arial;margin:16px;} .card{border:1px solid #ddd;padding:12px;border-radius:10px;}"


def _e(v: Any) -> str:
    return escape(str(v if v is not None else ""))


def _risk_badge(risk: str) -> str:
    r = (risk or "UNKNOWN").upper()
    cls = "med"
    if r == "LOW":
        cls = "low"
    elif r == "HIGH":
        cls = "high"
    return f'<span class="pill {cls}">{_e(r)}</span>'


def _render_links(rows: List[Dict[str, Any]]) -> str:
    links = [r for r in rows if r.get("Link")]
    if not links:
        return '<tr><td colspan="2" class="muted">No external links found.</td></tr>'
    return "".join(
        "<tr>"
        f"<td class=\"mono\">{_e(r.get('Workbook'))}</td>"
        f"<td class=\"mono\">{_e(r.get('Link'))}</td>"
        "</tr>"
        for r in links
    )


def _render_errors(rows: List[Dict[str, Any]]) -> str:
    errs = [r for r in rows if r.get("Exception")]
    if not errs:
        return '<tr><td colspan="2" class="muted">Every workbook was scanned.</td></tr>'
    return "".join(
        "<tr>"
        f"<td class=\"mono\">{_e(r.get('Workbook'))}</td>"
        f"<td>{_e(r.get('Exception'))}</td>"
        "</tr>"
        for r in errs
    )


def _render_top_targets(top: List[Dict[str, Any]]) -> str:
    if not top:
        return '<tr><td colspan="4" class="muted">No link targets.</td></tr>'
    rows = []
    for t in top:
        rows.append(
            "<tr>"
            f"<td class=\"mono\">{_e(t.get('target'))}</td>"
            f"<td>{int(t.get('direct_dependents', 0) or 0)}</td>"
            f"<td>{int(t.get('total_dependents', 0) or 0)}</td>"
            f"<td>{'yes' if t.get('is_scanned_workbook') else 'no'}</td>"
            "</tr>"
        )
    return "".join(rows)


def _render_broken(items: List[Dict[str, Any]]) -> str:
    if not items:
        return '<tr><td colspan="3" class="muted">No broken links detected.</td></tr>'
    return "".join(
        "<tr>"
        f"<td class=\"mono\">{_e(it.get('workbook'))}</td>"
        f"<td class=\"mono\">{_e(it.get('link'))}</td>"
        f"<td class=\"mono\">{_e(it.get('resolved'))}</td>"
        "</tr>"
        for it in items
    )


def _render_cycles(circular: Dict[str, Any]) -> str:
    items = (circular or {}).get("items", []) or []
    if not items:
        return '<tr><td colspan="2" class="muted">No link cycles found.</td></tr>'
    rows = []
    for it in items:
        books = " &rarr; ".join(_e(b) for b in (it.get("workbooks", []) or []))
        rows.append(f"<tr><td>{_e(it.get('cycle_type', 'cycle'))}</td><td class=\"mono\">{books}</td></tr>")
    return "".join(rows)


def _render_dry_run_banner(dry_run: bool) -> str:
    if not dry_run:
        return ""
    return '<div class="badge" style="margin-top:10px;">DRY RUN - no workbook was opened</div>'


def render_html_report(report: Dict[str, Any]) -> str:
    """Fill templates/report.html from the report dict written as links.json."""
    template = (_TEMPLATES / "report.html").read_text(encoding="utf-8")

    summary = report.get("summary", {}) or {}
    counters = summary.get("counters", {}) or {}
    findings = report.get("findings", {}) or {}
    rows = report.get("rows", []) or []

    html = template
    html = html.replace("$CSS", _default_css())

    # scalars first; table cells carry user paths that must not be re-substituted
    html = html.replace("$RISK_BADGE", _risk_badge(str(summary.get("risk", "UNKNOWN"))))
    html = html.replace("$DRY_RUN_BANNER", _render_dry_run_banner(bool(report.get("dry_run", False))))
    html = html.replace("$ROOT", _e(report.get("root", "")))
    html = html.replace("$GENERATED", _e(report.get("generated", "")))
    html = html.replace("$ENGINE", _e(report.get("engine", "")))
    html = html.replace("$REASON", _e(summary.get("reason", "")))

    html = html.replace("$LINKED_WORKBOOKS", str(int(counters.get("linked_workbooks", 0) or 0)))
    html = html.replace("$DISTINCT_TARGETS", str(int(counters.get("distinct_targets", 0) or 0)))
    html = html.replace("$PROCESSED", str(int(counters.get("processed", 0) or 0)))
    html = html.replace("$FAILED", str(int(counters.get("failed", 0) or 0)))
    html = html.replace("$BROKEN", str(int(counters.get("broken_links", 0) or 0)))
    html = html.replace("$CYCLES", str(int(counters.get("cycles", 0) or 0)))
    html = html.replace("$FILES", str(int(counters.get("files", 0) or 0)))
    html = html.replace("$LINKS", str(int(counters.get("links", 0) or 0)))

    html = html.replace("$TABLE_TOP_TARGETS", _render_top_targets(findings.get("top_targets", []) or []))
    html = html.replace("$TABLE_BROKEN", _render_broken(findings.get("broken_links", []) or []))
    html = html.replace("$TABLE_CYCLES", _render_cycles(findings.get("circular", {}) or {}))
    html = html.replace("$TABLE_LINKS", _render_links(rows))
    html = html.replace("$TABLE_ERRORS", _render_errors(rows))

    return html
