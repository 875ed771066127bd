"""Article field validation and its translation into user-facing messages.

``validate`` checks the required-field contract of an article payload and
``explain`` turns the resulting error into one message per offending field,
ordered the same way the fields are declared on :class:`ArticleDraft`, so the
output for a given input is always the same list.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from blog.core.errors import ArticleValidationError, FieldError


class ArticleDraft(BaseModel):
    """Caller-supplied part of an article; id and timestamps belong to the store."""

    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., min_length=1)
    # may be empty, but must be present
    body: str


_FIELD_ORDER = list(ArticleDraft.model_fields)

# pydantic error type -> message suffix
_MESSAGES = {
    "missing": "is required",
    "string_too_short": "is required",
    "string_type": "must be a string",
}


def _as_mapping(data: Any) -> Mapping[str, Any]:
    if isinstance(data, Mapping):
        return data
    return {name: getattr(data, name, None) for name in _FIELD_ORDER}


def _field_errors(exc: ValidationError) -> List[FieldError]:
    seen: Dict[str, FieldError] = {}
    for err in exc.errors():
        loc = err.get("loc") or ()
        field = str(loc[0]) if loc else "article"
        if field in seen:
            continue
        etype = err.get("type", "")
        # None for a required str reports as string_type, but it means absent
        if etype == "string_type" and err.get("input") is None:
            etype = "missing"
        suffix = _MESSAGES.get(etype, "is invalid")
        seen[field] = FieldError(field=field, message=f"{field} {suffix}")

    def _rank(fe: FieldError) -> int:
        try:
            return _FIELD_ORDER.index(fe.field)
        except ValueError:
            return len(_FIELD_ORDER)

    return sorted(seen.values(), key=_rank)


def validate(data: Any) -> ArticleDraft:
    """Check ``data`` (a mapping or an object with ``title``/``body``).

    Raises :class:`ArticleValidationError` listing every offending field.
    """
    try:
        return ArticleDraft.model_validate(dict(_as_mapping(data)))
    except ValidationError as exc:
        raise ArticleValidationError(_field_errors(exc)) from exc


def explain(error: ArticleValidationError) -> List[str]:
    return [fe.message for fe in error.errors]
