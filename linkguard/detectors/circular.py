from __future__ import annotations

from typing import Dict, List

import networkx as nx

from linkguard.core.graph import detect_cycles


def circular_link_findings(g: nx.DiGraph, limit: int = 25) -> Dict:
    """
    Workbooks that link to each other in a loop, using graph cycle detection.
    """
    cycles = detect_cycles(g, limit=limit)

    items: List[Dict] = []
    for cyc in cycles:
        books = cyc.get("workbooks", [])
        if len(books) == 1:
            items.append(
                {
                    "cycle_type": "self_link",
                    "workbooks": books,
                    "explanation": "Workbook links to itself by file path.",
                }
            )
        else:
            items.append(
                {
                    "cycle_type": "multi_workbook_cycle",
                    "workbooks": books,
                    "explanation": "Workbooks form a link loop; none can be moved alone.",
                }
            )

    return {
        "rule_id": "CIRCULAR_LINK",
        "severity": "HIGH" if cycles else "LOW",
        "cycle_count": len(cycles),
        "items": items,
    }
