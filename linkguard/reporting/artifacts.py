"""
linkguard/reporting/artifacts.py

Turns a ScanResult into the report dict (findings + summary) and writes it
out as links.json / links.report.html under a timestamped run folder.
"""

from __future__ import annotations

import datetime as _dt
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from linkguard.core.config import cfg_get
from linkguard.core.graph import build_link_graph
from linkguard.core.models import ScanRequest, ScanResult
from linkguard.detectors.broken import detect_broken_links
from linkguard.detectors.circular import circular_link_findings
from linkguard.detectors.impact import rank_link_targets
from linkguard.detectors.summary import compute_scan_summary
from linkguard.reporting.html_report import render_html_report

logger = logging.getLogger(__name__)


def _utc_iso() -> str:
    return _dt.datetime.now(_dt.timezone.utc).isoformat().replace("+00:00", "Z")


def resolve_output_dir(root: str, out_dir: str = "") -> Path:
    """
    <out_dir or root>/output/linkguard/<YYYYMMDD_HHMMSS>/
    """
    base = Path(out_dir) if out_dir else Path(root)
    ts = _dt.datetime.now().strftime("%Y%m%d_%H%M%S")
    return (base / "output" / "linkguard" / ts).resolve()


def build_report(
    request: ScanRequest,
    result: ScanResult,
    cfg: Optional[Dict[str, Any]] = None,
    *,
    engine: str = "",
    dry_run: bool = False,
) -> Dict[str, Any]:
    cfg = cfg or {}
    top_n = int(cfg_get(cfg, "reporting.top_n", 10) or 10)
    max_cycles = int(cfg_get(cfg, "reporting.max_cycles", 25) or 25)

    graph = build_link_graph(result.rows)
    g = graph["graph_obj"]

    findings: Dict[str, Any] = {
        "top_targets": rank_link_targets(g, top_n=top_n),
        "circular": circular_link_findings(g, limit=max_cycles),
        "broken_links": [b.to_dict() for b in detect_broken_links(result.rows)],
    }
    summary = compute_scan_summary(result, findings)

    return {
        "root": str(request.path),
        "generated": _utc_iso(),
        "engine": engine,
        "dry_run": bool(dry_run),
        "request": {
            "match": request.match,
            "filter": request.filter,
            "recurse": bool(request.recurse),
            "depth": request.depth,
            "format_code": int(request.format_code),
            "password_supplied": bool(request.password),
            "filter_links": bool(request.filter_links),
        },
        "summary": summary,
        "graph": graph["stats"],
        "findings": findings,
        **result.to_dict(),
    }


def write_report(
    report: Dict[str, Any],
    out_path: Path,
    *,
    write_json: bool = True,
    write_html: bool = True,
) -> Tuple[str, str]:
    """Returns (json_path, html_path); an empty string for anything not written."""
    out_path.mkdir(parents=True, exist_ok=True)
    json_path = ""
    html_path = ""
    if write_json:
        p = out_path / "links.json"
        p.write_text(json.dumps(report, indent=2, ensure_ascii=False), encoding="utf-8")
        json_path = str(p)
    if write_html:
        p = out_path / "links.report.html"
        p.write_text(render_html_report(report), encoding="utf-8")
        html_path = str(p)
    logger.info("Report written to %s", out_path)
    return json_path, html_path
