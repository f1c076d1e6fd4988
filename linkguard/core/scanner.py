"""
linkguard/core/scanner.py

Batch driver: enumerate workbooks, ask the automation host for each one's
external link targets, and collect one row per link (or one error row per
workbook that could not be read).

Processing is strictly sequential. The host session is created at most once per
scan and is always shut down, whether the loop finishes, a workbook fails, or
the caller interrupts.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Pattern

from linkguard.core.discovery import list_workbooks
from linkguard.core.links import compile_match, filter_links, normalize_link_target
from linkguard.core.models import ResultRow, ScanRequest, ScanResult
from linkguard.hosts.base import AutomationSession, SessionFailure, describe_error

logger = logging.getLogger(__name__)

ConfirmFn = Callable[[str], bool]
ProgressFn = Callable[[int, int, str], None]
SessionFactory = Callable[[], AutomationSession]


def always_confirm(_description: str) -> bool:
    return True


def never_confirm(_description: str) -> bool:
    """Dry-run policy: every file is counted, none is opened."""
    return False


class _LazySession:
    """Defers starting the host until it is first needed, so dry runs never launch it."""

    def __init__(self, factory: SessionFactory):
        self._factory = factory
        self._session: Optional[AutomationSession] = None

    def get(self) -> AutomationSession:
        if self._session is None:
            try:
                self._session = self._factory()
            except SessionFailure:
                raise
            except Exception as e:
                raise SessionFailure(f"Could not start automation host: {describe_error(e)}") from e
        return self._session

    def shutdown(self) -> None:
        if self._session is None:
            return
        session, self._session = self._session, None
        session.shutdown()


@contextmanager
def automation_session(factory: SessionFactory) -> Iterator[_LazySession]:
    """Scope one host session around a whole batch."""
    lazy = _LazySession(factory)
    try:
        yield lazy
    finally:
        try:
            lazy.shutdown()
        except Exception as e:
            logger.error("Automation session shutdown failed: %s", describe_error(e))


def scan_file(
    session: AutomationSession,
    path: Path,
    request: ScanRequest,
    match_rx: Optional[Pattern[str]] = None,
) -> List[ResultRow]:
    """
    Open one workbook, list its external links and close it again.

    Any failure while opening or querying becomes a single error row.
    """
    workbook = str(path)
    try:
        doc = session.open_document(
            workbook,
            update_links=False,
            read_only=True,
            format_code=int(request.format_code),
            password=request.password or "",
        )
    except Exception as e:
        logger.warning("Open failed for %s: %s", workbook, describe_error(e))
        return [ResultRow.for_error(workbook, describe_error(e))]

    try:
        targets = doc.get_external_link_targets() or []
    except Exception as e:
        logger.warning("Link query failed for %s: %s", workbook, describe_error(e))
        return [ResultRow.for_error(workbook, describe_error(e))]
    finally:
        try:
            doc.close(save=False)
        except Exception as e:
            logger.warning("Close failed for %s: %s", workbook, describe_error(e))

    links = [link for link in (normalize_link_target(raw) for raw in targets) if link]
    rows: List[ResultRow] = [ResultRow.for_link(workbook, link) for link in filter_links(links, match_rx)]
    logger.debug("%s: %d link(s)", workbook, len(rows))
    return rows


def scan(
    request: ScanRequest,
    session_factory: SessionFactory,
    confirm: ConfirmFn = always_confirm,
    progress: Optional[ProgressFn] = None,
    dry_run: bool = False,
) -> ScanResult:
    """
    Run a full scan.

    With dry_run the host is never started and no file is opened; every
    enumerated file is counted in `planned`. Otherwise the host is started
    before enumeration so an unavailable host fails fast.

    Raises:
        SessionFailure: the host could not be started.
        EnumerationError: request.path is not a readable directory.
    """
    if dry_run:
        confirm = never_confirm

    match_rx = compile_match(request.match) if request.filter_links else None

    with automation_session(session_factory) as lazy:
        if not dry_run:
            lazy.get()

        files = list_workbooks(
            request.path,
            pattern=request.filter,
            recurse=bool(request.recurse),
            max_depth=request.depth if request.recurse else None,
        )
        total = len(files)
        logger.info("%d file(s) matching %r under %s", total, request.filter, request.path)

        result = ScanResult(files=[str(p) for p in files])

        for index, path in enumerate(files, start=1):
            if confirm(f"Scan workbook {path}"):
                rows = scan_file(lazy.get(), path, request, match_rx=match_rx)
                result.processed += 1
                if any(r.is_error for r in rows):
                    result.failed += 1
                result.rows.extend(rows)
            else:
                result.planned += 1

            if progress is not None:
                progress(index, total, str(path))

    return result
