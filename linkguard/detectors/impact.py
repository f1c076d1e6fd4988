from __future__ import annotations

from typing import Dict, List

import networkx as nx

from linkguard.core.graph import dependents


def rank_link_targets(g: nx.DiGraph, top_n: int = 10) -> List[Dict]:
    """
    Returns top N link targets by direct dependents (distinct linking
    workbooks), then by transitive dependents.
    """
    scored = []
    for n in g.nodes:
        direct = int(g.in_degree(n))
        if direct == 0:
            continue
        scored.append((direct, dependents(g, n), str(n)))

    # highest fan-in first; name ascending breaks ties
    scored.sort(key=lambda t: (-t[0], -t[1], t[2]))
    out = []
    for direct, reach, n in scored[: max(0, int(top_n))]:
        out.append(
            {
                "target": n,
                "name": g.nodes[n].get("name", ""),
                "direct_dependents": direct,
                "total_dependents": int(reach),
                "is_scanned_workbook": bool(g.nodes[n].get("is_workbook", False)),
                "explanation": "Moving or renaming this file breaks every dependent workbook.",
            }
        )
    return out
