"""Edit operations over a form's working field collection.

Every operation takes an ``EditSession`` and returns a new one; nothing here
touches storage. Each result has ``order`` re-derived from list position,
whatever ``order`` values the caller sent in.
"""

from __future__ import annotations

from typing import Any

from rinkforms.schemas.forms import (
    DeleteOp,
    DuplicateOp,
    EditSession,
    FieldDefinition,
    FieldPatch,
    InsertOp,
    MoveOp,
    SelectOp,
    UpdateOp,
    new_field_id,
    renumber_fields,
)
from rinkforms.services.field_names import unique_field_name, validate_field_name
from rinkforms.services.field_types import FieldType, field_type_spec
from rinkforms.services.form_errors import FieldError, FieldNameError, FormEngineError

_IMMUTABLE_KEYS = {"id", "order"}


class FieldNotFoundError(FormEngineError):
    status_code = 404
    kind = "FieldNotFound"

    def __init__(self, field_id: str):
        self.field_id = field_id
        super().__init__(f'Field "{field_id}" not found in the form')


def _index_of(fields: list[FieldDefinition], field_id: str) -> int:
    for index, field in enumerate(fields):
        if field.id == field_id:
            return index
    raise FieldNotFoundError(field_id)


def _with_fields(session: EditSession, fields: list[FieldDefinition], **extra: Any) -> EditSession:
    return session.model_copy(update={"fields": renumber_fields(fields), **extra})


def _generated_name(fields: list[FieldDefinition]) -> str:
    taken = {field.name for field in fields}
    counter = len(fields) + 1
    while f"field_{counter}" in taken:
        counter += 1
    return f"field_{counter}"


def start_session(fields: list[FieldDefinition] | None = None, base_version: int | None = None) -> EditSession:
    return EditSession(fields=renumber_fields(list(fields or [])), base_version=base_version)


def insert_from_palette(session: EditSession, field_type: FieldType | str, label: str | None = None) -> EditSession:
    info = field_type_spec(field_type)
    fields = list(session.fields)
    field = FieldDefinition(
        id=new_field_id(),
        name=_generated_name(fields),
        label=str(label or "").strip() or info.palette_label,
        type=info.type,
        order=len(fields),
    )
    fields.append(field)
    return _with_fields(session, fields, selected_field_id=field.id)


def move_field(session: EditSession, moved_id: str, target_index: int) -> EditSession:
    fields = list(session.fields)
    current = _index_of(fields, moved_id)
    target = max(0, min(int(target_index), len(fields) - 1))
    field = fields.pop(current)
    fields.insert(target, field)
    return _with_fields(session, fields)


def delete_field(session: EditSession, field_id: str) -> EditSession:
    fields = [field for field in session.fields if field.id != field_id]
    selected = None if session.selected_field_id == field_id else session.selected_field_id
    return _with_fields(session, fields, selected_field_id=selected)


def update_field(session: EditSession, field_id: str, changes: FieldPatch | dict[str, Any]) -> EditSession:
    if isinstance(changes, FieldPatch):
        updates = changes.model_dump(exclude_unset=True)
    else:
        updates = dict(changes)
    updates = {key: value for key, value in updates.items() if key not in _IMMUTABLE_KEYS and value is not None}

    fields = list(session.fields)
    index = _index_of(fields, field_id)
    current = fields[index]
    if "name" in updates:
        taken = [field.name for field in fields if field.id != field_id]
        updates["name"] = validate_field_name(updates["name"], taken, field_id=field_id)

    merged = current.model_dump()
    merged.update(updates)
    fields[index] = FieldDefinition.model_validate(merged)
    return _with_fields(session, fields)


def duplicate_field(session: EditSession, field_id: str) -> EditSession:
    fields = list(session.fields)
    source = fields[_index_of(fields, field_id)]
    copy = source.model_copy(
        update={
            "id": new_field_id(),
            "name": unique_field_name(f"{source.name}_copy", [field.name for field in fields]),
            "label": f"{source.label} (Copy)",
            "options": list(source.options),
            "order": len(fields),
        }
    )
    fields.append(copy)
    return _with_fields(session, fields)


def select_field(session: EditSession, field_id: str | None) -> EditSession:
    if field_id is not None:
        _index_of(list(session.fields), field_id)
    return session.model_copy(update={"selected_field_id": field_id})


def replace_fields(session: EditSession, fields: list[FieldDefinition]) -> EditSession:
    """Swap in a whole new collection (import, apply template, restore)."""
    return _with_fields(session, list(fields), selected_field_id=None)


def apply_operation(
    session: EditSession,
    operation: InsertOp | MoveOp | DeleteOp | UpdateOp | DuplicateOp | SelectOp,
) -> EditSession:
    if isinstance(operation, InsertOp):
        return insert_from_palette(session, operation.type, operation.label)
    if isinstance(operation, MoveOp):
        return move_field(session, operation.field_id, operation.target_index)
    if isinstance(operation, DeleteOp):
        return delete_field(session, operation.field_id)
    if isinstance(operation, UpdateOp):
        return update_field(session, operation.field_id, operation.changes)
    if isinstance(operation, DuplicateOp):
        return duplicate_field(session, operation.field_id)
    if isinstance(operation, SelectOp):
        return select_field(session, operation.field_id)
    raise TypeError(f"Unsupported editor operation: {type(operation).__name__}")


def validate_fields(fields: list[FieldDefinition]) -> list[FieldError]:
    """Name problems per field, checked before a collection is committed."""
    errors: list[FieldError] = []
    seen: list[str] = []
    for field in fields:
        try:
            seen.append(validate_field_name(field.name, seen, field_id=field.id))
        except FieldNameError as exc:
            errors.append(FieldError(name=exc.name, kind=exc.kind, message=str(exc.detail)))
    return errors
