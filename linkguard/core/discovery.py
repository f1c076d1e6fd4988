"""File discovery for workbook scans."""

from __future__ import annotations

import fnmatch
import logging
from pathlib import Path
from typing import Iterator, List, Optional

from linkguard.hosts.base import EnumerationError

logger = logging.getLogger(__name__)

# Excel owner files written next to an open workbook
LOCK_FILE_PREFIX = "~$"


def _name_matches(name: str, pattern: str) -> bool:
    return fnmatch.fnmatch(name.lower(), (pattern or "*").lower())


def _dir_key(path: Path) -> str:
    try:
        return str(path.resolve())
    except OSError:
        return str(path.absolute())


def iter_workbooks(
    root: Path,
    pattern: str = "*.xls",
    recurse: bool = True,
    max_depth: Optional[int] = None,
) -> Iterator[Path]:
    """
    Iterate over files under root whose name matches `pattern`.

    Args:
        root: Directory to scan.
        pattern: Glob applied to the file name only.
        recurse: Descend into subdirectories.
        max_depth: Deepest directory level to visit (0 = root only). Ignored
                   unless recurse is true. None means unlimited.

    Yields:
        Paths in a stable order: files of a directory (sorted by name) before
        its subdirectories (also sorted). Symlinked directories are not
        followed and no directory is listed twice.

    Raises:
        EnumerationError: root does not exist, is not a directory, or cannot be listed.
    """
    root = Path(root)
    if not root.exists():
        raise EnumerationError(f"Path not found: {root}")
    if not root.is_dir():
        raise EnumerationError(f"Not a directory: {root}")

    limit = max_depth if recurse else 0
    seen = {_dir_key(root)}

    def _walk(current: Path, depth: int) -> Iterator[Path]:
        try:
            entries = sorted(current.iterdir(), key=lambda p: p.name.lower())
        except OSError as e:
            if depth == 0:
                raise EnumerationError(f"Cannot read {current}: {e}") from e
            logger.warning("Skipping unreadable directory %s: %s", current, e)
            return

        subdirs: List[Path] = []
        for entry in entries:
            if entry.is_dir():
                # linked folders can loop back to an ancestor
                if entry.is_symlink():
                    logger.info("Skipping linked directory %s", entry)
                    continue
                key = _dir_key(entry)
                if key in seen:
                    logger.info("Skipping already visited directory %s", entry)
                    continue
                seen.add(key)
                subdirs.append(entry)
            elif entry.is_file():
                if entry.name.startswith(LOCK_FILE_PREFIX):
                    continue
                if _name_matches(entry.name, pattern):
                    yield entry

        if not recurse:
            return
        if limit is not None and depth >= limit:
            return
        for sub in subdirs:
            yield from _walk(sub, depth + 1)

    yield from _walk(root, 0)


def list_workbooks(
    root: Path | str,
    pattern: str = "*.xls",
    recurse: bool = True,
    max_depth: Optional[int] = None,
) -> List[Path]:
    """Materialized iter_workbooks(); the scanner needs the total up front for progress."""
    return list(iter_workbooks(Path(root), pattern=pattern, recurse=recurse, max_depth=max_depth))
