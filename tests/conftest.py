import html
import re
from typing import List, Tuple
from urllib.parse import parse_qs, urlsplit

import pytest
from fastapi.testclient import TestClient

from updown.core.config import Settings
from updown.main import create_app


ENTRY_RE = re.compile(r'<li><a href="([^"]*)">(.*?)</a> (.*?)</li>')


def parse_entries(page: str) -> List[Tuple[str, str, str, str]]:
    """(name, type, url path, p) for each listed entry, in page order."""
    entries = []
    for href, name, kind in ENTRY_RE.findall(page):
        url = urlsplit(html.unescape(href))
        p = parse_qs(url.query)["p"][0]
        entries.append((html.unescape(name), html.unescape(kind), url.path, p))
    return entries


@pytest.fixture
def serve_dir(tmp_path):
    root = tmp_path / "serve"
    root.mkdir()
    (root / "docs").mkdir()
    (root / "docs" / "readme.txt").write_text("read me", encoding="utf-8")
    (root / "hello.txt").write_bytes(b"hello world")
    return root


@pytest.fixture
def output_dir(tmp_path):
    out = tmp_path / "out"
    out.mkdir()
    return out


@pytest.fixture
def client(serve_dir, output_dir):
    app = create_app(Settings(serve_dir=serve_dir, output_dir=output_dir))
    with TestClient(app) as c:
        yield c
