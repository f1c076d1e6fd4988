"""
linkguard/hosts/excel_host.py

Excel COM host (Windows, requires Excel installed).

One hidden Excel.Application instance is created per scan. Workbooks are opened
read-only with link updating disabled, queried with LinkSources(), marked saved
and closed without saving. shutdown() quits Excel and uninitializes COM.
"""

from __future__ import annotations

import logging
import os
from typing import Any, List

# Windows-only; availability is checked when a session is created
try:
    import pythoncom  # type: ignore
    import win32com.client  # type: ignore
    WINDOWS_EXCEL_AVAILABLE = True
except ImportError:
    WINDOWS_EXCEL_AVAILABLE = False

from linkguard.hosts.base import OpenFailure, QueryFailure, SessionFailure

logger = logging.getLogger(__name__)

# XlLink enumeration
XL_EXCEL_LINKS = 1
# XlUpdateLinks: never update
XL_UPDATE_LINKS_NEVER = 0


class ExcelDocument:
    def __init__(self, path: str, wb: Any):
        self.path = path
        self._wb = wb

    def get_external_link_targets(self) -> List[str]:
        try:
            sources = self._wb.LinkSources(XL_EXCEL_LINKS)
        except Exception as e:
            raise QueryFailure(f"LinkSources failed: {e}") from e
        # None when the workbook has no links
        if not sources:
            return []
        if isinstance(sources, str):
            return [sources]
        return [str(s) for s in sources]

    def close(self, save: bool = False) -> None:
        if self._wb is None:
            return
        wb, self._wb = self._wb, None
        if not save:
            wb.Saved = True
        wb.Close(SaveChanges=bool(save))


class ExcelSession:
    """Manages a single hidden Excel Application instance."""

    name = "excel"

    def __init__(self, visible: bool = False):
        if not WINDOWS_EXCEL_AVAILABLE:
            raise SessionFailure("Excel automation requires Windows with pywin32 and Excel installed")

        pythoncom.CoInitialize()
        self.app = None
        try:
            self.app = win32com.client.Dispatch("Excel.Application")
            self.app.Visible = visible
            self.app.DisplayAlerts = False
            self.app.AskToUpdateLinks = False
            self.app.ScreenUpdating = False
        except Exception as e:
            self.app = None
            pythoncom.CoUninitialize()
            raise SessionFailure(f"Failed to create Excel instance: {e}") from e
        logger.info("Excel session started (version %s)", getattr(self.app, "Version", "?"))

    def open_document(
        self,
        path: str,
        *,
        update_links: bool = False,
        read_only: bool = True,
        format_code: int = 2,
        password: str = "",
    ) -> ExcelDocument:
        abs_path = os.path.abspath(path)
        kwargs = {
            "UpdateLinks": 3 if update_links else XL_UPDATE_LINKS_NEVER,
            "ReadOnly": bool(read_only),
            "Format": int(format_code),
        }
        # an empty Password still makes Excel treat the file as protected
        if password:
            kwargs["Password"] = password
        try:
            wb = self.app.Workbooks.Open(abs_path, **kwargs)
        except Exception as e:
            raise OpenFailure(f"Failed to open workbook at {path}: {e}") from e
        return ExcelDocument(abs_path, wb)

    def shutdown(self) -> None:
        if self.app is None:
            return
        app, self.app = self.app, None
        try:
            app.DisplayAlerts = False
            app.Quit()
        except Exception as e:
            logger.error("Error quitting Excel: %s", e)
        finally:
            del app
            pythoncom.CoUninitialize()
        logger.info("Excel session closed")
