"""
linkguard/core/links.py

Helpers for link targets as reported by automation hosts.

Hosts return targets in whatever shape the file stores them:
  - Excel LinkSources():        C:\\share\\Budget\\B.xls
  - openpyxl externalLink rel:  file:///C:\\share\\Budget\\B.xls, ../Budget/B%20v2.xlsx
  - formula-style text:         [B.xls]Sheet1!A1, 'C:\\share\\[B.xls]Sheet1'!A1

No formula parsing happens here; these only tidy the target strings.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Pattern
from urllib.parse import unquote

_FILE_SCHEME = re.compile(r"^file:(?:/{2,3})?", re.IGNORECASE)
_URL_SCHEME = re.compile(r"^(?:https?|ftp)://", re.IGNORECASE)
# [Book.xls]Sheet!A1 style (optionally quoted and path-prefixed)
_BRACKETED = re.compile(r"\[(?P<book>[^\[\]]+)\]")


def normalize_link_target(raw: str) -> str:
    """
    Make a stored link target readable:
      - drop file:// scheme prefixes
      - percent-decode (%20 -> space)
      - strip surrounding quotes/whitespace
    Plain paths pass through unchanged.
    """
    if not raw:
        return ""
    s = str(raw).strip().strip("'\"")
    m = _FILE_SCHEME.match(s)
    if m:
        slashes = m.group(0).count("/")
        s = s[m.end():]
        # file:///C:/x -> C:/x, file:///srv/x -> /srv/x, file://host/x -> //host/x
        if slashes == 3 and not re.match(r"^[A-Za-z]:", s):
            s = "/" + s
        elif slashes == 2:
            s = "//" + s
    if "%" in s:
        s = unquote(s)
    return s


def is_url(target: str) -> bool:
    return bool(_URL_SCHEME.match(target or ""))


def link_display_name(target: str) -> str:
    """
    File-name part of a target, e.g. 'B.xls' for:
      C:\\share\\B.xls, /srv/share/B.xls, [B.xls]Sheet1!A1, 'C:\\x\\[B.xls]Sheet1'!A1
    """
    if not target:
        return ""
    s = normalize_link_target(target)
    m = _BRACKETED.search(s)
    if m:
        return m.group("book")
    s = s.rstrip("/\\")
    # either separator, regardless of platform
    for sep in ("\\", "/"):
        if sep in s:
            s = s.rsplit(sep, 1)[-1]
    return s


def compile_match(pattern: Optional[str]) -> Optional[Pattern[str]]:
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ValueError(f"Invalid match pattern {pattern!r}: {e}") from e


def match_link(pattern: Optional[Pattern[str] | str], link: str) -> bool:
    """True when the pattern is empty or found anywhere in the link."""
    if not pattern:
        return True
    rx = compile_match(pattern) if isinstance(pattern, str) else pattern
    return bool(rx.search(link or ""))


def filter_links(links: Iterable[str], pattern: Optional[Pattern[str] | str]) -> List[str]:
    return [l for l in links if match_link(pattern, l)]
