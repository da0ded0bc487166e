"""Directory listing entries for the browse page."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple
from urllib.parse import urlencode

from updown.core.paths import nav_join, resolve_within


DIR_TYPE = "<DIR>"


@dataclass
class FileEntry:
    url: str
    name: str
    type: str = ""


def url_with_path(url_path: str, nav_path: str) -> str:
    return f"{url_path}?{urlencode({'p': nav_path})}"


def list_directory(serve_dir: Path, nav_path: str) -> Tuple[Path, List[FileEntry]]:
    """List ``nav_path`` under ``serve_dir``.

    Returns the resolved directory and its entries: a parent link first, then
    one entry per child in the order the filesystem yields them. Directories
    link back to the listing, everything else to the download endpoint.
    Raises PathEscapeError for paths outside the root and OSError when the
    directory cannot be read.
    """
    full_path = resolve_within(serve_dir, nav_path)
    entries = [FileEntry(url=url_with_path("/", nav_join(nav_path, "..")), name="../", type=DIR_TYPE)]
    with os.scandir(full_path) as it:
        for child in it:
            target = nav_join(nav_path, child.name)
            if child.is_dir():
                entries.append(FileEntry(url=url_with_path("/", target), name=child.name + "/", type=DIR_TYPE))
            else:
                entries.append(FileEntry(url=url_with_path("/download", target), name=child.name))
    return full_path, entries
