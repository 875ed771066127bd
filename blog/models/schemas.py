# blog/models/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


# --- Article as returned to clients ---
# Used by the JSON list/get endpoints and inside the write results
class ArticleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    body: str
    created: datetime
    updated: datetime


# --- Write results ---
# One explicit shape per write endpoint instead of ad-hoc dicts
class ArticleCreateResult(BaseModel):
    article: Optional[ArticleOut] = None
    message: str = ""
    validation_errors: List[str] = []


class ArticleUpdateResult(BaseModel):
    article: Optional[ArticleOut] = None
    message: str = ""
    validation_errors: List[str] = []


class ArticleDeleteResult(BaseModel):
    id: int
    message: str
