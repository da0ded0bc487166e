"""Upload endpoint.

POST /upload accepts multipart form-data. The first part named ``file`` is
written to the output directory under the base name of its filename; other
parts are skipped and nothing after the stored part is read. Redirects to /.
"""

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from starlette.concurrency import run_in_threadpool

from updown.core.config import Settings, get_settings
from updown.core.paths import upload_basename
from updown.core.routing import ByMethod, route_by_method
from updown.services.multipart import MultipartError, MultipartReader, Part


router = APIRouter()

UPLOAD_FIELD = "file"


async def _store_part(part: Part, output_dir: Path) -> Path:
    lg = logging.getLogger(__name__)
    try:
        name = upload_basename(part.filename or "")
    except ValueError as e:
        lg.warning("upload_rejected", extra={"reason": str(e)})
        raise HTTPException(status_code=400)

    dest = output_dir / name
    lg.info("upload_received", extra={"upload_filename": part.filename, "dest": str(dest)})
    try:
        f = await run_in_threadpool(open, dest, "wb")
    except (OSError, ValueError):
        lg.exception("upload_create_failed", extra={"dest": str(dest)})
        raise HTTPException(status_code=500)

    written = 0
    try:
        async for chunk in part.chunks():
            await run_in_threadpool(f.write, chunk)
            written += len(chunk)
    except OSError:
        # The partial file is left in place
        lg.exception("upload_write_failed", extra={"dest": str(dest), "bytes": written})
        raise HTTPException(status_code=500)
    finally:
        try:
            await run_in_threadpool(f.close)
        except OSError:
            lg.warning("Unable to close file", extra={"dest": str(dest)}, exc_info=True)

    lg.info("upload_saved", extra={"dest": str(dest), "bytes": written})
    return dest


async def upload(request: Request, settings: Settings = Depends(get_settings)) -> RedirectResponse:
    lg = logging.getLogger(__name__)
    try:
        reader = MultipartReader.from_request(request)
        async for part in reader:
            if part.name != UPLOAD_FIELD:
                continue
            await _store_part(part, settings.output_dir)
            return RedirectResponse("/", status_code=302)
    except MultipartError as e:
        lg.warning("upload_rejected", extra={"reason": str(e)})
        raise HTTPException(status_code=400)

    lg.warning("upload_rejected", extra={"reason": f"no '{UPLOAD_FIELD}' part"})
    raise HTTPException(status_code=400)


route_by_method(router, "/upload", ByMethod(post=upload), response_class=RedirectResponse)
