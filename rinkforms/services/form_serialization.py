from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from rinkforms.schemas.forms import FieldDefinition, new_field_id, renumber_fields
from rinkforms.services.field_names import normalize_field_name
from rinkforms.services.form_errors import InvalidFormatError

logger = logging.getLogger(__name__)

EXPORT_FORMAT_VERSION = "1.0"
# Identity and position are regenerated by whoever imports the document.
_EXPORT_EXCLUDE = {"id", "order"}


def export_fields(
    fields: list[FieldDefinition],
    form_type: str,
    template_name: str = "",
    exported_at: datetime | None = None,
) -> dict[str, Any]:
    stamp = exported_at or datetime.now(timezone.utc)
    return {
        "formType": form_type,
        "templateName": template_name,
        "exportDate": stamp.isoformat(),
        "version": EXPORT_FORMAT_VERSION,
        "fields": [
            field.model_dump(mode="json", by_alias=True, exclude=_EXPORT_EXCLUDE)
            for field in renumber_fields(list(fields))
        ],
    }


def export_json(fields: list[FieldDefinition], form_type: str, template_name: str = "") -> str:
    return json.dumps(export_fields(fields, form_type, template_name), ensure_ascii=False, indent=2)


def _parse_document(document: Any) -> dict[str, Any]:
    if isinstance(document, (str, bytes, bytearray)):
        try:
            document = json.loads(document)
        except (TypeError, ValueError):
            raise InvalidFormatError("Import file is not valid JSON")
    if not isinstance(document, dict):
        raise InvalidFormatError("Import document must be a JSON object")
    return document


def import_fields(document: Any) -> list[FieldDefinition]:
    """Build a fresh collection from an exported document.

    The result replaces the caller's working collection; it is not stored.
    """
    payload = _parse_document(document)
    raw_fields = payload.get("fields")
    if not isinstance(raw_fields, list):
        raise InvalidFormatError('Import document must contain a "fields" array')

    imported: list[FieldDefinition] = []
    for index, raw in enumerate(raw_fields):
        if not isinstance(raw, dict):
            raise InvalidFormatError(f"Field #{index + 1} is not an object")
        data = {key: value for key, value in raw.items() if key not in _EXPORT_EXCLUDE}
        if not str(data.get("name") or "").strip():
            data["name"] = normalize_field_name(data.get("label"))
        data["id"] = new_field_id()
        data["order"] = index
        try:
            imported.append(FieldDefinition.model_validate(data))
        except ValidationError as exc:
            logger.info("form import rejected field #%s: %s", index + 1, exc.errors())
            raise InvalidFormatError(f"Field #{index + 1} is invalid: {exc.errors()[0].get('msg')}")
    return renumber_fields(imported)
