from __future__ import annotations

from datetime import date, datetime, timezone

from fastapi import HTTPException
from sqlalchemy import asc, desc
from sqlalchemy.orm import Query

from rinkforms.models.form_template import FormTemplate
from rinkforms.schemas.forms import TemplateQuery

# Columns of the template library a client may filter or sort on.
QUERYABLE_COLUMNS = {
    "template_name": FormTemplate.template_name,
    "form_type": FormTemplate.form_type,
    "category": FormTemplate.category,
    "is_system_template": FormTemplate.is_system_template,
    "version": FormTemplate.version,
    "created_by": FormTemplate.created_by,
    "created_at": FormTemplate.created_at,
    "updated_at": FormTemplate.updated_at,
}


def _bad_filter_value(column_key: str, kind: str) -> HTTPException:
    return HTTPException(status_code=400, detail=f'Invalid filter value for "{column_key}" ({kind})')


def _coerce_bool(column_key: str, value) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value or "").strip().lower()
    if text in {"1", "true", "yes", "y"}:
        return True
    if text in {"0", "false", "no", "n"}:
        return False
    raise _bad_filter_value(column_key, "boolean")


def _coerce_int(column_key: str, value) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise _bad_filter_value(column_key, "number")


def _coerce_datetime(column_key: str, value) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value or "").strip()
        try:
            if len(text) == 10 and "T" not in text:
                parsed = datetime.combine(date.fromisoformat(text), datetime.min.time())
            else:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            raise _bad_filter_value(column_key, "datetime")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _coerce_filter_value(column_key: str, value):
    if column_key == "is_system_template":
        return _coerce_bool(column_key, value)
    if column_key == "version":
        return _coerce_int(column_key, value)
    if column_key in {"created_at", "updated_at"}:
        return _coerce_datetime(column_key, value)
    return value


def apply_template_query(q: Query, tq: TemplateQuery) -> Query:
    for f in tq.filters:
        col = QUERYABLE_COLUMNS.get(f.field)
        if col is None:
            raise HTTPException(status_code=400, detail=f'Filtering by "{f.field}" is not supported')
        value = _coerce_filter_value(f.field, f.value)
        if f.op == "=":
            q = q.filter(col == value)
        elif f.op == "!=":
            q = q.filter(col != value)
        elif f.op == ">":
            q = q.filter(col > value)
        elif f.op == "<":
            q = q.filter(col < value)
        elif f.op == ">=":
            q = q.filter(col >= value)
        elif f.op == "<=":
            q = q.filter(col <= value)
        elif f.op == "~":
            q = q.filter(col.ilike(f"%{value}%"))
    for s in tq.sort:
        col = QUERYABLE_COLUMNS.get(s.field)
        if col is None:
            continue
        q = q.order_by(asc(col) if s.dir == "asc" else desc(col))
    if not tq.sort:
        q = q.order_by(FormTemplate.template_name.asc())
    return q
