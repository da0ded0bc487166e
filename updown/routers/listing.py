"""Directory browsing page.

GET /?p=<path> lists a directory under the serve root as HTML, with the
upload form on top. ``p`` defaults to the root itself.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from jinja2 import TemplateError

from updown.core.config import Settings, get_settings
from updown.core.paths import TEMPLATES_DIR, InvalidPathError, PathEscapeError, get_nav_path
from updown.core.routing import ByMethod, route_by_method
from updown.services.listing import list_directory


router = APIRouter()
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def browse(
    request: Request,
    nav_path: str = Depends(get_nav_path),
    settings: Settings = Depends(get_settings),
) -> HTMLResponse:
    lg = logging.getLogger(__name__)
    try:
        full_path, files = list_directory(settings.serve_dir, nav_path)
    except InvalidPathError:
        lg.warning("listing_bad_path", extra={"nav_path": nav_path})
        raise HTTPException(status_code=400)
    except PathEscapeError:
        lg.warning("listing_outside_root", extra={"nav_path": nav_path})
        raise HTTPException(status_code=403)
    except (OSError, RuntimeError):
        lg.warning("listing_failed", extra={"nav_path": nav_path}, exc_info=True)
        raise HTTPException(status_code=500)

    try:
        return templates.TemplateResponse(request, "root.html", {"full_path": str(full_path), "files": files})
    except TemplateError:
        lg.exception("listing_render_failed", extra={"nav_path": nav_path})
        raise HTTPException(status_code=500)


route_by_method(router, "/", ByMethod(get=browse), response_class=HTMLResponse)
