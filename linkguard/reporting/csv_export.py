# linkguard/reporting/csv_export.py
from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from linkguard.core.models import ResultRow

FIELDNAMES = ["Workbook", "Link", "Exception"]


def write_rows_csv(rows: Iterable[ResultRow], path: str | Path) -> Path:
    """Write result rows as Workbook,Link,Exception. utf-8-sig so Excel opens it cleanly."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", newline="", encoding="utf-8-sig") as fh:
        writer = csv.DictWriter(fh, fieldnames=FIELDNAMES)
        writer.writeheader()
        for row in rows:
            writer.writerow(row.to_dict())
    return out
