from fastapi.responses import JSONResponse
from typing import Any
import json


class PrettyJSONResponse(JSONResponse):
    """JSON response rendered with a two space indent."""

    def render(self, content: Any) -> bytes:
        return json.dumps(content, ensure_ascii=False, indent=2).encode("utf-8")


def error_response(status_code: int, message: str) -> JSONResponse:
    """Error body shared by every failure path: ``{"message": ...}``."""
    return JSONResponse(status_code=status_code, content={"message": message})
