import json
from typing import Iterable, Optional, Tuple
from fastapi import HTTPException, Request, status
from starlette.datastructures import UploadFile
from globetrotter.core.config import settings
from globetrotter.core.logger import logger


async def read_payload(
    request: Request,
    file_fields: Iterable[str] = ("image",),
    json_fields: Iterable[str] = (),
) -> Tuple[dict, Optional[UploadFile]]:
    """
    Read a JSON body or a multipart form into a plain dict.

    For multipart requests the first non-empty file among ``file_fields`` is
    returned alongside the fields; blank text fields are dropped and
    ``json_fields`` are decoded from their JSON string form.
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        data = {}
        upload = None
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key in file_fields and upload is None and value.filename:
                    upload = value
                continue
            if value == "":
                continue
            data[key] = value
        for key in json_fields:
            if isinstance(data.get(key), str):
                try:
                    data[key] = json.loads(data[key])
                except ValueError:
                    logger.warning(f"Ignoring malformed JSON form field '{key}'")
                    data.pop(key)
        return data, upload

    raw = await request.body()
    if not raw:
        return {}, None
    try:
        body = json.loads(raw)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON body")
    if not isinstance(body, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Request body must be a JSON object")
    return body, None


async def read_upload(upload: UploadFile) -> bytes:
    content = await upload.read()
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Image parsing failed: file exceeds {settings.MAX_UPLOAD_BYTES // (1024 * 1024)} MB limit"
        )
    return content
