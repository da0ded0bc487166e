"""File download endpoint.

GET /download?p=<path> streams a file under the serve root as an attachment.
"""

import logging
import os
import posixpath
from pathlib import Path
from typing import Iterator
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from updown.core.config import Settings, get_settings
from updown.core.paths import InvalidPathError, PathEscapeError, get_nav_path, resolve_within
from updown.core.routing import ByMethod, route_by_method


router = APIRouter()

CHUNK_SIZE = 64 * 1024


def content_disposition(filename: str) -> str:
    """Attachment header; names that can't go in a quoted string get an RFC 6266 ``filename*``."""
    fallback = "".join(c if 0x20 <= ord(c) < 0x7F and c not in '"\\' else "_" for c in filename)
    if fallback == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def _preflight(path: Path) -> int:
    """Size of the file at ``path``; fails the same way opening it for the body would."""
    with open(path, "rb") as f:
        return os.fstat(f.fileno()).st_size


def _iter_file(path: Path) -> Iterator[bytes]:
    # The handle lives only while the body is being iterated
    lg = logging.getLogger(__name__)
    try:
        f = open(path, "rb")
    except OSError:
        lg.exception("download_open_failed", extra={"path": str(path)})
        raise
    try:
        while True:
            chunk = f.read(CHUNK_SIZE)
            if not chunk:
                break
            yield chunk
    except OSError:
        # Headers are already out; the connection is dropped instead
        lg.exception("download_read_failed", extra={"path": str(path)})
        raise
    finally:
        try:
            f.close()
        except OSError:
            lg.warning("Unable to close file", extra={"path": str(path)}, exc_info=True)


def download(
    nav_path: str = Depends(get_nav_path),
    settings: Settings = Depends(get_settings),
) -> StreamingResponse:
    lg = logging.getLogger(__name__)
    try:
        fs_path = resolve_within(settings.serve_dir, nav_path)
    except InvalidPathError:
        lg.warning("download_bad_path", extra={"nav_path": nav_path})
        raise HTTPException(status_code=400)
    except PathEscapeError:
        lg.warning("download_outside_root", extra={"nav_path": nav_path})
        raise HTTPException(status_code=403)
    except (OSError, RuntimeError):
        lg.warning("download_failed", extra={"nav_path": nav_path}, exc_info=True)
        raise HTTPException(status_code=500)

    try:
        size = _preflight(fs_path)
    except (OSError, ValueError):
        lg.warning("download_open_failed", extra={"path": str(fs_path)}, exc_info=True)
        raise HTTPException(status_code=500)

    # Name the attachment after the requested path, not a resolved symlink target
    filename = posixpath.basename(posixpath.normpath(nav_path))
    lg.info("download_started", extra={"path": str(fs_path), "bytes": size})
    return StreamingResponse(
        _iter_file(fs_path),
        media_type="application/octet-stream",
        headers={
            "content-disposition": content_disposition(filename),
            "content-length": str(size),
        },
    )


route_by_method(router, "/download", ByMethod(get=download), response_class=StreamingResponse)
