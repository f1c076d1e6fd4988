"""Shared fixtures: a scripted automation host and workbook trees on disk."""

from pathlib import Path
from typing import Dict, List, Optional, Union

import pytest

from linkguard.hosts.base import OpenFailure


class FakeDocument:
    def __init__(self, session, path, links):
        self.session = session
        self.path = path
        self.links = links
        self.closed_with = None

    def get_external_link_targets(self):
        self.session.calls.append(("query", self.path))
        if isinstance(self.links, Exception):
            raise self.links
        return list(self.links)

    def close(self, save=False):
        self.session.calls.append(("close", self.path))
        self.closed_with = save
        self.session.open_docs.discard(self.path)


class FakeSession:
    """
    Host double keyed by file name.

    script maps a file name to:
      - a list of link targets (returned by the query)
      - an exception instance raised by open (OpenFailure etc.)
      - ("query_error", exc) to fail the query after a successful open
    Unlisted files open fine and have no links.
    """

    def __init__(self, script: Optional[Dict[str, Union[List[str], Exception, tuple]]] = None):
        self.script = script or {}
        self.calls: List[tuple] = []
        self.open_kwargs: List[dict] = []
        self.open_docs = set()
        self.leaked: List[str] = []
        self.shutdown_count = 0

    def open_document(self, path, *, update_links=False, read_only=True, format_code=2, password=""):
        name = Path(path).name
        self.calls.append(("open", path))
        self.open_kwargs.append(
            {"update_links": update_links, "read_only": read_only, "format_code": format_code, "password": password}
        )
        # a still-open document means the loop skipped a close
        if self.open_docs:
            self.leaked.extend(sorted(self.open_docs))
        entry = self.script.get(name, [])
        if isinstance(entry, Exception):
            raise entry
        if isinstance(entry, tuple) and entry and entry[0] == "query_error":
            links = entry[1]
        else:
            links = entry
        self.open_docs.add(path)
        return FakeDocument(self, path, links)

    def shutdown(self):
        self.shutdown_count += 1
        self.calls.append(("shutdown", None))

    @property
    def opened(self) -> List[str]:
        return [p for (op, p) in self.calls if op == "open"]


class FactorySpy:
    """Zero-arg session factory that records how often it was called."""

    def __init__(self, session):
        self.session = session
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.session


def touch(root: Path, *relpaths: str) -> List[Path]:
    out = []
    for rel in relpaths:
        p = root / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(b"")
        out.append(p)
    return out


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def estate(tmp_path):
    """
    tmp/
      A.xls, D.xls, E.xls, notes.txt
      sub/F.xls
      sub/deeper/G.xls
      sub/deeper/deepest/H.xls
    """
    touch(
        tmp_path,
        "A.xls",
        "D.xls",
        "E.xls",
        "notes.txt",
        "sub/F.xls",
        "sub/deeper/G.xls",
        "sub/deeper/deepest/H.xls",
    )
    return tmp_path


@pytest.fixture
def e2e_script():
    return {
        "A.xls": [r"C:\share\B.xls", r"C:\share\C.xls"],
        "D.xls": [],
        "E.xls": OpenFailure("File format or extension is not valid (corrupt)"),
    }
