"""
Uniform response envelope: {success, message, data?, error?}

success is derived from the status code (< 400). data and error are omitted
when empty.
"""

from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def envelope(
    status_code: int, message: str, data: Any = None, error: Any = None
) -> dict:
    body = {"success": status_code < 400, "message": message}
    if data is not None:
        body["data"] = jsonable_encoder(data, exclude_none=True)
    if error is not None:
        body["error"] = jsonable_encoder(error)
    return body


def api_response(
    status_code: int, message: str, data: Any = None, error: Optional[Any] = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=envelope(status_code, message, data, error)
    )
