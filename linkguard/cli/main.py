# linkguard/cli/main.py
from __future__ import annotations

import argparse
import logging
import os
import sys
import traceback
import webbrowser
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from tqdm import tqdm

from linkguard.core.config import cfg_get, load_settings
from linkguard.core.models import ResultRow, ScanRequest, ScanResult
from linkguard.core.scanner import always_confirm, scan
from linkguard.hosts.base import EnumerationError, SessionFailure
from linkguard.hosts.factory import ENGINES, resolve_engine, session_factory
from linkguard.reporting.artifacts import build_report, resolve_output_dir, write_report
from linkguard.reporting.csv_export import write_rows_csv

logger = logging.getLogger("linkguard")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_ENUMERATION = 3
EXIT_SESSION = 4
EXIT_INTERRUPTED = 130


def setup_logging(level: str = "WARNING") -> logging.Logger:
    """Route linkguard.* loggers to stderr; safe to call more than once."""
    _logger = logging.getLogger("linkguard")
    _logger.setLevel(getattr(logging, str(level).upper(), logging.WARNING))
    _logger.handlers.clear()
    ch = logging.StreamHandler(sys.stderr)
    ch.setFormatter(logging.Formatter(LOG_FORMAT))
    _logger.addHandler(ch)
    return _logger


class PromptConfirm:
    """
    Per-file confirmation: [y]es, [n]o, yes to [a]ll, [s]kip all.

    `ask` is injectable so answers can be scripted.
    """

    def __init__(self, ask: Callable[[str], str] = input):
        self._ask = ask
        self._all: Optional[bool] = None

    def __call__(self, description: str) -> bool:
        if self._all is not None:
            return self._all
        while True:
            try:
                answer = self._ask(f"{description}? [y/n/a/s] ").strip().lower()
            except EOFError:
                answer = "s"
            if answer in ("y", "yes"):
                return True
            if answer in ("n", "no", ""):
                return False
            if answer in ("a", "all"):
                self._all = True
                return True
            if answer in ("s", "skip"):
                self._all = False
                return False


class TqdmProgress:
    """progress(index, total, path) callback backed by a tqdm bar."""

    def __init__(self, disable: bool = False):
        self.disable = disable
        self._bar: Optional[tqdm] = None

    def __call__(self, index: int, total: int, path: str) -> None:
        if self._bar is None:
            self._bar = tqdm(total=total, desc="Scanning workbooks", unit="file", disable=self.disable)
        self._bar.set_postfix_str(Path(path).name, refresh=False)
        self._bar.update(1)

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None


def _non_negative_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if n < 0:
        raise argparse.ArgumentTypeError("must be >= 0")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkguard",
        description="linkguard - find workbooks whose formulas link to other files",
    )
    parser.add_argument("path", nargs="?", help="Root directory to scan")
    parser.add_argument("--match", default=None, help=r"Link pattern (default: .*\[.*\].*); filters only with --filter-links. Searched in the target as the host reports it; Excel reports plain paths without [brackets]")
    parser.add_argument("--filter", default=None, help="File-name glob (default: *.xls)")
    parser.add_argument("--recurse", action=argparse.BooleanOptionalAction, default=None, help="Descend into subdirectories (default: on)")
    parser.add_argument("--depth", type=_non_negative_int, default=None, help="Max directory depth below the root (with --recurse)")
    parser.add_argument("--format", dest="format_code", type=int, default=None, help="Format code passed to the host when opening (default: 2)")
    parser.add_argument("--password", default="", help="Password for protected workbooks")
    parser.add_argument("--dry-run", "--what-if", dest="dry_run", action="store_true", help="List what would be scanned without opening any workbook")
    parser.add_argument("--confirm", action="store_true", help="Ask before scanning each workbook")
    parser.add_argument("--engine", choices=ENGINES, default=None, help="Automation host (default: auto)")
    parser.add_argument("--filter-links", dest="filter_links", action="store_true", default=None, help="Only report links matching --match")
    parser.add_argument("-o", "--out", dest="out_dir", default="", help="Output base directory (default: scanned folder)")
    parser.add_argument("--csv", dest="csv_path", default="", help="Also write rows to this CSV file")
    parser.add_argument("--no-report", action="store_true", help="Do not write JSON/HTML artifacts")
    parser.add_argument("--no-open", action="store_true", help="Do not open report automatically")
    parser.add_argument("--no-progress", action="store_true", help="Disable the progress bar")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default=None)
    parser.add_argument("--config", dest="config_path", default=None, help="YAML settings file")
    return parser


def request_from_args(args: argparse.Namespace, cfg: Dict[str, Any]) -> ScanRequest:
    """CLI flags win; anything not given falls back to the scan.* config keys."""

    def pick(value: Any, key: str, default: Any) -> Any:
        return value if value is not None else cfg_get(cfg, key, default)

    depth = pick(args.depth, "scan.depth", None)
    return ScanRequest(
        path=str(args.path),
        match=str(pick(args.match, "scan.match", r".*\[.*\].*")),
        filter=str(pick(args.filter, "scan.filter", "*.xls")),
        recurse=bool(pick(args.recurse, "scan.recurse", True)),
        depth=int(depth) if depth is not None else None,
        format_code=int(pick(args.format_code, "scan.format_code", 2)),
        password=args.password or "",
        filter_links=bool(pick(args.filter_links, "scan.filter_links", False)),
    )


def print_rows(rows: List[ResultRow], stream=None) -> None:
    stream = stream or sys.stdout
    print("Workbook\tLink\tException", file=stream)
    for r in rows:
        print(f"{r.workbook}\t{r.link}\t{r.error}", file=stream)


def run_scan(
    request: ScanRequest,
    *,
    engine: str = "auto",
    dry_run: bool = False,
    confirm: Callable[[str], bool] = always_confirm,
    show_progress: bool = True,
) -> Tuple[ScanResult, str]:
    """
    Programmatic wrapper:
      returns (scan_result, resolved_engine)
    """
    resolved = resolve_engine(engine)
    progress = TqdmProgress(disable=not show_progress)
    try:
        result = scan(
            request,
            session_factory(resolved),
            confirm=confirm,
            progress=progress,
            dry_run=dry_run,
        )
    finally:
        progress.close()
    return result, resolved


def main(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.path:
        print("ERROR: No path provided.")
        return EXIT_USAGE

    cfg = load_settings(args.config_path)
    setup_logging(args.log_level or cfg_get(cfg, "logging.level", "WARNING"))
    logger.debug("settings: %s", cfg)

    try:
        request = request_from_args(args, cfg)
        engine = str(args.engine or cfg_get(cfg, "scan.engine", "auto"))

        confirm = PromptConfirm() if args.confirm and not args.dry_run else always_confirm
        result, resolved = run_scan(
            request,
            engine=engine,
            dry_run=bool(args.dry_run),
            confirm=confirm,
            # the bar would fight with per-file prompts
            show_progress=not (args.no_progress or args.confirm),
        )

        if args.dry_run:
            print(f"What if: {result.planned} workbook(s) would be scanned under {request.path}")
            for f in result.files:
                print(f"  {f}")
        else:
            print_rows(result.rows)
            print(
                f"Scanned {result.processed} of {len(result.files)} workbook(s): "
                f"{len(result.link_rows)} link(s), {result.failed} failure(s)",
                file=sys.stderr,
            )

        if args.csv_path and not args.dry_run:
            print(f"CSV: {write_rows_csv(result.rows, args.csv_path)}")

        # a what-if run leaves the scanned tree untouched unless --out points elsewhere
        write_artifacts = not args.no_report and (not args.dry_run or bool(args.out_dir))
        if write_artifacts:
            report = build_report(request, result, cfg, engine=resolved, dry_run=bool(args.dry_run))
            json_path, html_path = write_report(
                report,
                resolve_output_dir(request.path, args.out_dir),
                write_json=bool(cfg_get(cfg, "reporting.write_json", True)),
                write_html=bool(cfg_get(cfg, "reporting.write_html", True)),
            )
            if json_path:
                print(f"JSON: {json_path}")
            if html_path:
                print(f"HTML: {html_path}")
                if not (args.no_open or args.dry_run) and os.path.exists(html_path):
                    webbrowser.open_new_tab(Path(html_path).as_uri())
        return EXIT_OK
    except EnumerationError as e:
        print(f"ERROR: {e}")
        return EXIT_ENUMERATION
    except SessionFailure as e:
        print(f"ERROR: {e}")
        return EXIT_SESSION
    except ValueError as e:
        print(f"ERROR: {e}")
        return EXIT_USAGE
    except KeyboardInterrupt:
        print("Interrupted.")
        return EXIT_INTERRUPTED
    except Exception as e:
        print("ERROR:", e)
        traceback.print_exc()
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
