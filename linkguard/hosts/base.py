"""
linkguard/hosts/base.py

Capability interface for spreadsheet automation hosts.

The scan loop only ever talks to these two shapes:
  - AutomationSession: one long-lived host (an Excel process, or a file-format reader)
  - DocumentHandle: one open workbook, owned by the loop while it processes a file

Errors raised by hosts are mapped onto the taxonomy below so the scanner can tell
per-file failures (recorded as rows) from fatal ones (abort the run).
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable


class LinkScanError(Exception):
    """Base class for linkguard errors."""


class EnumerationError(LinkScanError):
    """Root path missing or unreadable. Fatal."""


class SessionFailure(LinkScanError):
    """Automation host could not be started. Fatal."""


class OpenFailure(LinkScanError):
    """A workbook could not be opened (password, corruption, format, lock)."""


class QueryFailure(LinkScanError):
    """Listing external links failed on an already-open workbook."""


@runtime_checkable
class DocumentHandle(Protocol):
    def get_external_link_targets(self) -> List[str]:
        ...

    def close(self, save: bool = False) -> None:
        ...


@runtime_checkable
class AutomationSession(Protocol):
    def open_document(
        self,
        path: str,
        *,
        update_links: bool = False,
        read_only: bool = True,
        format_code: int = 2,
        password: str = "",
    ) -> DocumentHandle:
        ...

    def shutdown(self) -> None:
        ...


def describe_error(exc: BaseException) -> str:
    """Text stored in the Exception column for a failed workbook."""
    msg = str(exc).strip()
    return msg or type(exc).__name__
