"""
linkguard/core/models.py

Plain value types shared by the scanner, reporting and CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

DEFAULT_MATCH = r".*\[.*\].*"
DEFAULT_FILTER = "*.xls"
DEFAULT_FORMAT_CODE = 2


@dataclass(frozen=True)
class ScanRequest:
    path: str
    match: str = DEFAULT_MATCH
    filter: str = DEFAULT_FILTER
    recurse: bool = True
    depth: Optional[int] = None
    format_code: int = DEFAULT_FORMAT_CODE
    password: str = ""
    # apply `match` to extracted links; off by default, links are reported exhaustively
    filter_links: bool = False


@dataclass(frozen=True)
class ResultRow:
    workbook: str
    link: str = ""
    error: str = ""

    @property
    def is_error(self) -> bool:
        return bool(self.error)

    def to_dict(self) -> Dict[str, Any]:
        return {"Workbook": self.workbook, "Link": self.link, "Exception": self.error}

    @staticmethod
    def for_link(workbook: Path | str, link: str) -> "ResultRow":
        return ResultRow(workbook=str(workbook), link=str(link), error="")

    @staticmethod
    def for_error(workbook: Path | str, error: str) -> "ResultRow":
        return ResultRow(workbook=str(workbook), link="", error=str(error))


@dataclass
class ScanResult:
    rows: List[ResultRow] = field(default_factory=list)
    files: List[str] = field(default_factory=list)
    planned: int = 0
    processed: int = 0
    failed: int = 0

    @property
    def link_rows(self) -> List[ResultRow]:
        return [r for r in self.rows if not r.is_error]

    @property
    def error_rows(self) -> List[ResultRow]:
        return [r for r in self.rows if r.is_error]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files": list(self.files),
            "planned": int(self.planned),
            "processed": int(self.processed),
            "failed": int(self.failed),
            "rows": [r.to_dict() for r in self.rows],
        }
