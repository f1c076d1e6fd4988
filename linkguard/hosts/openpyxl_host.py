# linkguard/hosts/openpyxl_host.py
from __future__ import annotations

import logging
from typing import Any, List
from zipfile import BadZipFile

from openpyxl import load_workbook

# openpyxl exception compatibility (varies by version)
try:
    from openpyxl.utils.exceptions import InvalidFileException  # type: ignore
except Exception:  # pragma: no cover
    InvalidFileException = Exception  # fallback

from linkguard.hosts.base import OpenFailure, QueryFailure

logger = logging.getLogger(__name__)


def _link_targets(wb: Any) -> List[str]:
    """
    Targets of the workbook's externalLinkN.xml parts, in part order.

    openpyxl keeps these on the private `_external_links` list; each entry's
    `file_link.Target` is the relationship target as stored in the file.
    """
    out: List[str] = []
    for link in getattr(wb, "_external_links", None) or []:
        file_link = getattr(link, "file_link", None)
        if file_link is None:
            continue
        target = getattr(file_link, "Target", None) or getattr(file_link, "target", None)
        if target:
            out.append(str(target))
    return out


class OpenpyxlDocument:
    def __init__(self, path: str, wb: Any):
        self.path = path
        self._wb = wb

    def get_external_link_targets(self) -> List[str]:
        try:
            return _link_targets(self._wb)
        except Exception as e:
            raise QueryFailure(f"Could not read external links: {e}") from e

    def close(self, save: bool = False) -> None:
        # read-only workbooks are never written; `save` is accepted for interface parity
        if self._wb is None:
            return
        wb, self._wb = self._wb, None
        wb.close()


class OpenpyxlSession:
    """
    File-format host: reads link targets straight out of .xlsx/.xlsm packages.

    No application process is involved, so format codes are ignored and
    encrypted workbooks cannot be opened.
    """

    name = "openpyxl"

    def __init__(self) -> None:
        self.opened = 0
        logger.info("openpyxl session ready")

    def open_document(
        self,
        path: str,
        *,
        update_links: bool = False,
        read_only: bool = True,
        format_code: int = 2,
        password: str = "",
    ) -> OpenpyxlDocument:
        if password:
            raise OpenFailure("Password-protected workbooks need the excel engine")
        try:
            wb = load_workbook(filename=path, read_only=True, keep_links=True, data_only=False)
        except InvalidFileException as e:
            raise OpenFailure(f"Invalid or unsupported workbook file: {e}") from e
        except BadZipFile as e:
            raise OpenFailure(f"Not an OOXML workbook (corrupt or encrypted): {e}") from e
        except (OSError, KeyError, ValueError) as e:
            raise OpenFailure(f"Failed to open workbook at {path}: {e}") from e
        self.opened += 1
        return OpenpyxlDocument(path, wb)

    def shutdown(self) -> None:
        logger.info("openpyxl session closed (%d workbook(s) read)", self.opened)
