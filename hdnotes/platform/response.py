from typing import Any, Dict, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def error_response(
    *,
    message: str,
    code: str,
    status_code: int = status.HTTP_400_BAD_REQUEST,
    hint: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """
    Single source of truth for API error bodies.

    Shape: {"error": <message>, "code": <stable error code>, ...hint}
    Clients branch on "code", never on the message text.
    """
    content: Dict[str, Any] = {"error": message, "code": code}
    if hint:
        content.update(jsonable_encoder(hint))

    return JSONResponse(status_code=status_code, content=content)
