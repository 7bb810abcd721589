from typing import Any, Optional
from pydantic import BaseModel


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


def ok(data: Any = None, message: Optional[str] = None, pagination: Optional[dict] = None, **extra) -> dict:
    """Envelope estándar de éxito: {success, data?, message?, pagination?}."""
    body: dict = {"success": True}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    if pagination is not None:
        body["pagination"] = Pagination(**pagination)
    body.update(extra)
    return body
