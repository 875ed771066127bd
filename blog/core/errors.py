"""Error taxonomy shared by the article store and its handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List


class BlogError(Exception):
    """Base class for every error the blog core raises on purpose."""


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


class ArticleValidationError(BlogError):
    """One or more article fields failed validation. No storage was touched."""

    def __init__(self, errors: List[FieldError]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(e.message for e in self.errors) or "invalid article")


class NotFoundError(BlogError):
    def __init__(self, article_id: int) -> None:
        self.article_id = article_id
        super().__init__(f"article {article_id} not found")


class StoreError(BlogError):
    """Connectivity, query or transaction failure in the backing database.

    The message never carries driver detail; the driver error is kept as
    ``__cause__`` for logs only.
    """
