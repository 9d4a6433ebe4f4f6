from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from urllib.parse import quote

from fastapi import HTTPException
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rinkforms.models.form_configuration import FormConfiguration
from rinkforms.models.form_configuration_head import FormConfigurationHead
from rinkforms.models.form_template import FormTemplate
from rinkforms.models.form_template_version import FormTemplateVersion
from rinkforms.schemas.forms import FieldDefinition, new_field_id, renumber_fields, sort_by_stored_order
from rinkforms.services.form_errors import (
    ForbiddenSystemTemplateError,
    PersistenceFailureError,
    TemplateConflictError,
    TemplateNotFoundError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormKey:
    """Address of a stored field collection: a facility binding or a library template."""

    facility_id: str | None = None
    form_type: str | None = None
    template_id: uuid.UUID | None = None

    @classmethod
    def binding(cls, facility_id: str, form_type: str) -> "FormKey":
        facility = str(facility_id or "").strip()
        kind = str(form_type or "").strip()
        if not facility or not kind:
            raise HTTPException(status_code=400, detail="Facility and form type are required")
        return cls(facility_id=facility, form_type=kind)

    @classmethod
    def template(cls, template_id: str | uuid.UUID) -> "FormKey":
        return cls(template_id=template_uuid_or_404(template_id))

    @property
    def is_template(self) -> bool:
        return self.template_id is not None

    @property
    def subject_key(self) -> str:
        if self.is_template:
            return f"template:{self.template_id}"
        return f"binding:{quote(self.facility_id, safe='')}:{quote(self.form_type, safe='')}"


def template_uuid_or_404(raw: str | uuid.UUID) -> uuid.UUID:
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw))
    except (TypeError, ValueError):
        raise TemplateNotFoundError()


def _row_uuids(fields: list[FieldDefinition]) -> list[uuid.UUID]:
    # Keep field ids stable across saves; anything unusable gets a new one.
    ids: list[uuid.UUID] = []
    for field in fields:
        try:
            value = uuid.UUID(str(field.id))
        except (TypeError, ValueError):
            value = uuid.uuid4()
        if value in ids:
            value = uuid.uuid4()
        ids.append(value)
    return ids


def field_from_row(row: FormConfiguration) -> FieldDefinition:
    return FieldDefinition(
        id=row.id.hex,
        name=row.field_name,
        label=row.field_label,
        type=row.field_type,
        options=row.field_options or [],
        is_required=bool(row.is_required),
        placeholder=row.placeholder_text,
        help_text=row.help_text,
        default_value=row.default_value,
        width=row.field_width or "full",
        order=row.display_order or 0,
    )


def configuration_document(fields: list[FieldDefinition]) -> list[dict]:
    return [field.model_dump(mode="json", by_alias=True) for field in renumber_fields(list(fields))]


def fields_from_document(document: list | None) -> list[FieldDefinition]:
    return sort_by_stored_order([FieldDefinition.model_validate(item) for item in (document or [])])


def fresh_copies(fields: list[FieldDefinition]) -> list[FieldDefinition]:
    """Same fields under new ids, order preserved."""
    return renumber_fields([field.model_copy(update={"id": new_field_id()}) for field in fields])


class TemplateStore:
    """Committed field collections.

    Methods only flush; the caller owns the transaction and commits once the
    whole save (fields plus history entry) is staged. Database errors roll
    the session back and surface as ``PersistenceFailureError``.
    """

    def __init__(self, db: Session):
        self.db = db

    def persistence_failure(self, action: str, key: FormKey) -> PersistenceFailureError:
        logger.exception("form store %s failed subject=%s", action, key.subject_key)
        try:
            self.db.rollback()
        except SQLAlchemyError:
            logger.debug("form_store_rollback_failed", exc_info=True)
        return PersistenceFailureError()

    def _head(self, key: FormKey) -> FormConfigurationHead | None:
        return (
            self.db.query(FormConfigurationHead)
            .filter(
                FormConfigurationHead.facility_id == key.facility_id,
                FormConfigurationHead.form_type == key.form_type,
            )
            .first()
        )

    def get_template(self, template_id: str | uuid.UUID) -> FormTemplate:
        row = self.db.get(FormTemplate, template_uuid_or_404(template_id))
        if row is None:
            raise TemplateNotFoundError()
        return row

    def load(self, key: FormKey) -> list[FieldDefinition]:
        """Committed fields in order; empty when nothing is configured."""
        if key.is_template:
            row = self.db.get(FormTemplate, key.template_id)
            return fields_from_document(row.configuration) if row is not None else []
        rows = (
            self.db.query(FormConfiguration)
            .filter(
                FormConfiguration.facility_id == key.facility_id,
                FormConfiguration.form_type == key.form_type,
                FormConfiguration.is_active.is_(True),
            )
            .order_by(FormConfiguration.display_order.asc(), FormConfiguration.field_name.asc())
            .all()
        )
        return sort_by_stored_order([field_from_row(row) for row in rows])

    def current_version(self, key: FormKey) -> int:
        if key.is_template:
            return int(self.get_template(key.template_id).version or 0)
        head = self._head(key)
        return int(head.version or 0) if head is not None else 0

    def replace_all(
        self,
        key: FormKey,
        fields: list[FieldDefinition],
        expected_version: int | None = None,
        author: str | None = None,
    ) -> int:
        """Replace the whole committed collection; returns the new version."""
        ordered = renumber_fields(list(fields))
        current = self.current_version(key)
        if expected_version is not None and int(expected_version) != current:
            raise TemplateConflictError(int(expected_version), current)
        try:
            if key.is_template:
                row = self.get_template(key.template_id)
                row.configuration = configuration_document(ordered)
                row.version = current + 1
                self.db.add(row)
            else:
                self.db.execute(
                    delete(FormConfiguration).where(
                        FormConfiguration.facility_id == key.facility_id,
                        FormConfiguration.form_type == key.form_type,
                    )
                )
                self.db.flush()
                self.db.add_all(
                    [
                        FormConfiguration(
                            id=row_id,
                            facility_id=key.facility_id,
                            form_type=key.form_type,
                            field_name=field.name,
                            field_label=field.label,
                            field_type=field.type.value,
                            field_options=list(field.options),
                            is_required=bool(field.is_required),
                            placeholder_text=field.placeholder,
                            help_text=field.help_text,
                            field_width=field.width.value,
                            default_value=field.default_value,
                            display_order=field.order,
                            is_active=True,
                        )
                        for row_id, field in zip(_row_uuids(ordered), ordered)
                    ]
                )
                head = self._head(key)
                if head is None:
                    head = FormConfigurationHead(facility_id=key.facility_id, form_type=key.form_type, version=0)
                head.version = current + 1
                head.updated_by = author
                self.db.add(head)
            self.db.flush()
        except SQLAlchemyError:
            raise self.persistence_failure("replace_all", key)
        return current + 1

    def list_templates(self, form_type: str | None = None, category: str | None = None) -> list[FormTemplate]:
        query = self.db.query(FormTemplate)
        if form_type:
            query = query.filter(FormTemplate.form_type == form_type)
        if category:
            query = query.filter(FormTemplate.category == category)
        return query.order_by(FormTemplate.template_name.asc(), FormTemplate.created_at.asc()).all()

    def create_template(
        self,
        *,
        template_name: str,
        form_type: str,
        fields: list[FieldDefinition],
        description: str | None = None,
        category: str | None = None,
        is_system_template: bool = False,
        author: str | None = None,
    ) -> FormTemplate:
        row = FormTemplate(
            template_name=template_name,
            form_type=form_type,
            description=description,
            category=category,
            configuration=configuration_document(fields),
            version=1,
            is_system_template=bool(is_system_template),
            created_by=author,
        )
        try:
            self.db.add(row)
            self.db.flush()
        except SQLAlchemyError:
            raise self.persistence_failure("create_template", FormKey(form_type=form_type))
        return row

    def duplicate(self, template_id: str | uuid.UUID, new_name: str, author: str | None = None) -> uuid.UUID:
        source = self.get_template(template_id)
        copy = self.create_template(
            template_name=new_name,
            form_type=source.form_type,
            description=source.description,
            category=source.category,
            fields=fresh_copies(fields_from_document(source.configuration)),
            is_system_template=False,
            author=author,
        )
        return copy.id

    def delete(self, template_id: str | uuid.UUID) -> None:
        row = self.get_template(template_id)
        if row.is_system_template:
            raise ForbiddenSystemTemplateError(row.template_name)
        key = FormKey(template_id=row.id)
        try:
            self.db.execute(delete(FormTemplateVersion).where(FormTemplateVersion.subject_key == key.subject_key))
            self.db.delete(row)
            self.db.flush()
        except SQLAlchemyError:
            raise self.persistence_failure("delete", key)
