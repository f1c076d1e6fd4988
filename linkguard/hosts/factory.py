# linkguard/hosts/factory.py
from __future__ import annotations

import logging
from typing import Callable

from linkguard.hosts.base import AutomationSession, SessionFailure
from linkguard.hosts import excel_host

logger = logging.getLogger(__name__)

ENGINES = ("auto", "excel", "openpyxl")


def resolve_engine(engine: str) -> str:
    """'auto' -> 'excel' when pywin32 is importable, else 'openpyxl'."""
    e = (engine or "auto").strip().lower()
    if e not in ENGINES:
        raise SessionFailure(f"Unknown engine: {engine!r} (expected one of {', '.join(ENGINES)})")
    if e == "auto":
        return "excel" if excel_host.WINDOWS_EXCEL_AVAILABLE else "openpyxl"
    return e


def session_factory(engine: str = "auto") -> Callable[[], AutomationSession]:
    """Return a zero-arg callable that starts a session for the chosen engine."""
    resolved = resolve_engine(engine)
    logger.debug("engine %r resolved to %r", engine, resolved)

    if resolved == "excel":
        return lambda: excel_host.ExcelSession(visible=False)

    from linkguard.hosts.openpyxl_host import OpenpyxlSession

    return OpenpyxlSession
