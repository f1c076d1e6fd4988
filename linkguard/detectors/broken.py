# linkguard/detectors/broken.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from linkguard.core.graph import target_key
from linkguard.core.links import is_url
from linkguard.core.models import ResultRow


@dataclass(frozen=True)
class BrokenLink:
    workbook: str
    link: str
    resolved: str
    reason: str = "link target not found on disk"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "BROKEN_LINK",
            "workbook": self.workbook,
            "link": self.link,
            "resolved": self.resolved,
            "reason": self.reason,
        }


def detect_broken_links(
    rows: Iterable[ResultRow],
    *,
    exists: Optional[Callable[[str], bool]] = None,
    max_findings: int = 200,
) -> List[BrokenLink]:
    """
    Link rows whose target resolves to a local path that does not exist.

    Relative targets resolve against the linking workbook's folder. URLs are
    skipped. Each (workbook, resolved target) pair is reported once.
    """
    exists = exists or os.path.exists
    seen = set()
    out: List[BrokenLink] = []
    for row in rows:
        if row.is_error or not row.link or is_url(row.link):
            continue
        resolved = target_key(row.workbook, row.link)
        key = (row.workbook, resolved)
        if key in seen:
            continue
        seen.add(key)
        if exists(resolved):
            continue
        out.append(BrokenLink(workbook=row.workbook, link=row.link, resolved=resolved))
        if max_findings > 0 and len(out) >= max_findings:
            break
    return out
