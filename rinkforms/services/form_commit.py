"""Commit units: each function stages the store write, the history entry and
the audit record, then commits once."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rinkforms.models.audit_log import AuditLog
from rinkforms.models.form_template import FormTemplate
from rinkforms.schemas.forms import FieldDefinition, TemplateCreate, renumber_fields
from rinkforms.services.field_names import normalize_field_name
from rinkforms.services.form_editor import validate_fields
from rinkforms.services.form_errors import FormValidationError
from rinkforms.services.template_store import FormKey, TemplateStore
from rinkforms.services.template_versions import VersionHistory

logger = logging.getLogger(__name__)


def _append_audit(db: Session, actor: str, key: FormKey, action: str, diff: dict[str, Any]) -> None:
    db.add(
        AuditLog(
            actor=actor,
            entity="form_templates" if key.is_template else "form_configurations",
            entity_id=key.subject_key,
            action=action,
            diff=diff,
        )
    )


def _commit(db: Session, store: TemplateStore, key: FormKey) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        raise store.persistence_failure("commit", key)


def prepare_fields(fields: list[FieldDefinition]) -> list[FieldDefinition]:
    errors = validate_fields(fields)
    if errors:
        raise FormValidationError(errors)
    return renumber_fields([field.model_copy(update={"name": normalize_field_name(field.name)}) for field in fields])


def commit_fields(
    db: Session,
    key: FormKey,
    fields: list[FieldDefinition],
    author: str,
    changelog: str | None = None,
    expected_version: int | None = None,
    action: str = "SAVE",
) -> dict[str, Any]:
    prepared = prepare_fields(fields)
    store = TemplateStore(db)
    version = store.replace_all(key, prepared, expected_version=expected_version, author=author)
    VersionHistory(db).capture(key, prepared, author, changelog)
    _append_audit(db, author, key, action, {"version": version, "field_count": len(prepared)})
    _commit(db, store, key)
    logger.info("form committed subject=%s version=%s fields=%s by=%s", key.subject_key, version, len(prepared), author)
    return {"version": version, "fields": prepared}


def restore_version(
    db: Session,
    key: FormKey,
    version: int,
    author: str,
    expected_version: int | None = None,
) -> dict[str, Any]:
    fields = VersionHistory(db).restore(key, version)
    return commit_fields(
        db,
        key,
        fields,
        author,
        changelog=f"Restored from version {int(version)}",
        expected_version=expected_version,
        action="RESTORE",
    )


def create_template(db: Session, payload: TemplateCreate, author: str) -> FormTemplate:
    prepared = prepare_fields(payload.fields)
    store = TemplateStore(db)
    row = store.create_template(
        template_name=payload.template_name,
        form_type=payload.form_type,
        description=payload.description,
        category=payload.category,
        fields=prepared,
        is_system_template=payload.is_system_template,
        author=author,
    )
    key = FormKey(template_id=row.id)
    VersionHistory(db).capture(key, prepared, author, payload.changelog or "Initial version")
    _append_audit(db, author, key, "CREATE", {"template_name": row.template_name, "field_count": len(prepared)})
    _commit(db, store, key)
    db.refresh(row)
    logger.info("form template created id=%s name=%s by=%s", row.id, row.template_name, author)
    return row


def duplicate_template(db: Session, template_id: str | uuid.UUID, template_name: str, author: str) -> FormTemplate:
    store = TemplateStore(db)
    source = store.get_template(template_id)
    source_name = source.template_name
    new_id = store.duplicate(source.id, template_name, author=author)
    key = FormKey(template_id=new_id)
    VersionHistory(db).capture(key, store.load(key), author, f'Duplicated from "{source_name}"')
    _append_audit(db, author, key, "DUPLICATE", {"source_template_id": str(source.id)})
    _commit(db, store, key)
    row = store.get_template(new_id)
    logger.info("form template duplicated source=%s copy=%s by=%s", source.id, new_id, author)
    return row


def delete_template(db: Session, template_id: str | uuid.UUID, author: str) -> None:
    store = TemplateStore(db)
    row = store.get_template(template_id)
    key = FormKey(template_id=row.id)
    name = row.template_name
    store.delete(row.id)
    _append_audit(db, author, key, "DELETE", {"template_name": name})
    _commit(db, store, key)
    logger.info("form template deleted id=%s name=%s by=%s", key.template_id, name, author)
