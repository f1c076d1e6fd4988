from __future__ import annotations

from typing import Any, Dict, List

from linkguard.core.models import ScanResult


def compute_scan_summary(result: ScanResult, findings: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deterministic estate summary.

    Inputs:
      - result: rows/files/planned/processed/failed from the scan
      - findings: broken_links (list), circular (dict with cycle_count), top_targets (list)

    Risk rules:
      - HIGH: any broken link or any workbook link cycle
      - MEDIUM: any external link, or any workbook that could not be scanned
      - LOW: otherwise
    """
    link_rows = result.link_rows
    linked_workbooks = sorted({r.workbook for r in link_rows})
    distinct_targets = sorted({r.link for r in link_rows})
    broken = findings.get("broken_links", []) or []
    cycle_count = int((findings.get("circular", {}) or {}).get("cycle_count", 0) or 0)

    risk = "LOW"
    reasons: List[str] = []

    if broken:
        risk = "HIGH"
        reasons.append(f"{len(broken)} broken link(s)")
    if cycle_count:
        risk = "HIGH"
        reasons.append(f"{cycle_count} workbook link cycle(s)")

    if risk != "HIGH":
        if link_rows:
            risk = "MEDIUM"
            reasons.append(f"{len(link_rows)} external link(s) in {len(linked_workbooks)} workbook(s)")
        if result.failed:
            risk = "MEDIUM"
            reasons.append(f"{result.failed} workbook(s) could not be scanned")

    if result.planned and not result.processed:
        reasons.append(f"dry run: {result.planned} workbook(s) would be scanned")

    if not reasons:
        reasons.append("No external links found")

    return {
        "risk": risk,
        "reason": "; ".join(reasons),
        "counters": {
            "files": len(result.files),
            "processed": int(result.processed),
            "planned": int(result.planned),
            "failed": int(result.failed),
            "links": len(link_rows),
            "linked_workbooks": len(linked_workbooks),
            "distinct_targets": len(distinct_targets),
            "broken_links": len(broken),
            "cycles": cycle_count,
        },
    }
