from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, Query, Request, status

from blog.db import sa
from blog.services.articles import ArticleStore


logger = logging.getLogger("blog.deps")


def get_store() -> ArticleStore:
    """Store bound to the app-wide sessionmaker. Tests override this dependency."""
    return ArticleStore(sa.sessionmaker())


def parse_cursor(cursor: Optional[str] = Query(None, description="Last article id already shown")) -> int:
    if cursor is None or cursor.strip() == "":
        return 0
    try:
        return int(cursor)
    except ValueError:
        logger.info(
            "Rejected malformed cursor",
            extra={"event": "cursor_invalid", "cursor": cursor},
        )
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid cursor")


class PayloadError(Exception):
    """Request body could not be read as a form or a JSON object."""


async def read_payload(request: Request) -> Dict[str, Any]:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise PayloadError("malformed JSON body") from exc
        if not isinstance(data, dict):
            raise PayloadError("JSON body must be an object")
        return data
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}
