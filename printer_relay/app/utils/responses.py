from typing import Any, Dict

from fastapi.responses import JSONResponse


def err(message: str) -> Dict[str, Any]:
    """Return the error body understood by the desktop UI."""
    return {"error": message}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(err(message), status_code=status_code)
