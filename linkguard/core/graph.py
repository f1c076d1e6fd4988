"""
linkguard/core/graph.py

Builds a workbook-level link graph from scan rows.
Edge direction: workbook -> link target (the workbook depends on the target).

Public API:
  - build_link_graph(rows) -> dict with keys:
      graph_obj: nx.DiGraph
      workbook_nodes: list[str]
      stats: dict(nodes=int, edges=int, targets=int)
  - target_key(workbook, link) -> str
  - workbook_key(path) -> str
  - dependents(g, node) -> int
  - detect_cycles(g, limit=25) -> list[dict]  (each dict has type, workbooks)
"""

from __future__ import annotations

import ntpath
import os
import posixpath
from typing import Any, Dict, Iterable, List

import networkx as nx

from linkguard.core.links import is_url, link_display_name
from linkguard.core.models import ResultRow


def _is_windows_path(s: str) -> bool:
    return "\\" in s or (len(s) > 1 and s[1] == ":")


def _is_absolute(s: str) -> bool:
    return ntpath.isabs(s) if _is_windows_path(s) else posixpath.isabs(s)


def target_key(workbook: str, link: str) -> str:
    """
    Graph node id for a link target.

    Absolute paths and URLs are used as-is; relative paths are resolved
    against the linking workbook's folder, so the same target reached from
    different folders collapses into one node.
    """
    if not link:
        return ""
    if is_url(link) or _is_absolute(link):
        return _normpath(link)
    workbook = workbook_key(workbook)
    base = ntpath.dirname(workbook) if _is_windows_path(workbook) else posixpath.dirname(workbook)
    joiner = ntpath if _is_windows_path(workbook) or _is_windows_path(link) else posixpath
    return _normpath(joiner.join(base, link))


def _normpath(s: str) -> str:
    if is_url(s):
        return s
    if _is_windows_path(s):
        return ntpath.normpath(s)
    return posixpath.normpath(s)


def workbook_key(path: str) -> str:
    """Graph node id for a scanned workbook: absolute, so links that name it by full path land on it."""
    if is_url(path) or _is_absolute(path):
        return _normpath(path)
    return _normpath(os.path.abspath(path))


def build_link_graph(rows: Iterable[ResultRow]) -> Dict[str, Any]:
    g = nx.DiGraph()
    workbook_nodes: List[str] = []

    for row in rows:
        src = workbook_key(row.workbook)
        if not g.has_node(src):
            g.add_node(src, is_workbook=True, name=link_display_name(src))
            workbook_nodes.append(src)
        elif not g.nodes[src].get("is_workbook"):
            # first seen as another workbook's link target
            g.nodes[src]["is_workbook"] = True
            workbook_nodes.append(src)

        # failed workbooks are nodes without edges
        if row.is_error or not row.link:
            continue

        dst = target_key(row.workbook, row.link)
        if not g.has_node(dst):
            g.add_node(dst, is_workbook=False, name=link_display_name(row.link))
        g.nodes[dst].setdefault("raw_links", set()).add(row.link)
        g.add_edge(src, dst)

    targets = sum(1 for n in g.nodes if g.in_degree(n) > 0)
    return {
        "graph_obj": g,
        "workbook_nodes": workbook_nodes,
        "stats": {"nodes": g.number_of_nodes(), "edges": g.number_of_edges(), "targets": targets},
    }


def dependents(g: nx.DiGraph, node: str) -> int:
    """Number of workbooks that reach node through links (direct or chained)."""
    try:
        return len(nx.ancestors(g, node))
    except nx.NetworkXError:
        return 0


def detect_cycles(g: nx.DiGraph, limit: int = 25) -> List[Dict[str, Any]]:
    """
    Return up to `limit` cycles. Each cycle is:
      { "type": "cycle", "workbooks": ["C:\\a\\A.xls", ...] }
    """
    out: List[Dict[str, Any]] = []
    for cyc in nx.simple_cycles(g):
        out.append({"type": "cycle", "workbooks": [str(x) for x in cyc]})
        if len(out) >= limit:
            break
    return out
