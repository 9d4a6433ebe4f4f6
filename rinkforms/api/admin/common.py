from __future__ import annotations

from typing import Any

from rinkforms.models.form_template import FormTemplate
from rinkforms.schemas.forms import EditSession, FieldDefinition
from rinkforms.services.template_store import fields_from_document


def fields_payload(fields: list[FieldDefinition]) -> list[dict[str, Any]]:
    return [field.model_dump(mode="json", by_alias=True) for field in fields]


def session_payload(session: EditSession) -> dict[str, Any]:
    return session.model_dump(mode="json", by_alias=True)


def template_row(row: FormTemplate, with_fields: bool = False) -> dict[str, Any]:
    payload = {
        "id": str(row.id),
        "template_name": row.template_name,
        "form_type": row.form_type,
        "description": row.description,
        "category": row.category,
        "version": row.version,
        "is_system_template": bool(row.is_system_template),
        "field_count": len(row.configuration or []),
        "created_by": row.created_by,
        "created_at": row.created_at.isoformat() if row.created_at else None,
        "updated_at": row.updated_at.isoformat() if row.updated_at else None,
    }
    if with_fields:
        payload["fields"] = fields_payload(fields_from_document(row.configuration))
    return payload


def attachment_headers(filename: str) -> dict[str, str]:
    safe = "".join(ch if ch.isalnum() or ch in "-_." else "_" for ch in filename) or "form"
    return {"Content-Disposition": f'attachment; filename="{safe}.json"'}
