from __future__ import annotations

from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rinkforms.models.form_template_version import FormTemplateVersion
from rinkforms.schemas.forms import FieldDefinition
from rinkforms.services.form_errors import VersionNotFoundError
from rinkforms.services.template_store import (
    FormKey,
    TemplateStore,
    configuration_document,
    fields_from_document,
    fresh_copies,
)

DIFF_ADDED = "added"
DIFF_REMOVED = "removed"
DIFF_MODIFIED = "modified"
DIFF_UNCHANGED = "unchanged"


def version_row(row: FormTemplateVersion) -> dict[str, Any]:
    return {
        "id": str(row.id),
        "template_id": str(row.template_id) if row.template_id else None,
        "facility_id": row.facility_id,
        "form_type": row.form_type,
        "version": row.version,
        "field_count": len(row.configuration or []),
        "fields": list(row.configuration or []),
        "changed_by": row.changed_by,
        "changelog": row.changelog,
        "created_at": row.created_at.isoformat() if row.created_at else None,
    }


class VersionHistory:
    """Append-only snapshots of committed field collections."""

    def __init__(self, db: Session):
        self.db = db
        self.store = TemplateStore(db)

    def capture(
        self,
        key: FormKey,
        fields: list[FieldDefinition],
        author: str,
        changelog: str | None = None,
    ) -> FormTemplateVersion:
        """Record the collection just written by ``TemplateStore.replace_all``.

        Runs inside the caller's transaction, so a failed store write never
        leaves a history entry behind.
        """
        form_type = key.form_type
        if key.is_template:
            form_type = self.store.get_template(key.template_id).form_type
        row = FormTemplateVersion(
            subject_key=key.subject_key,
            template_id=key.template_id,
            facility_id=key.facility_id,
            form_type=form_type,
            version=self.store.current_version(key),
            configuration=configuration_document(fields),
            changed_by=author,
            changelog=(str(changelog).strip() or None) if changelog is not None else None,
        )
        try:
            self.db.add(row)
            self.db.flush()
        except SQLAlchemyError:
            raise self.store.persistence_failure("capture", key)
        return row

    def list_versions(self, key: FormKey) -> list[FormTemplateVersion]:
        return (
            self.db.query(FormTemplateVersion)
            .filter(FormTemplateVersion.subject_key == key.subject_key)
            .order_by(FormTemplateVersion.version.desc())
            .all()
        )

    def get_version(self, key: FormKey, version: int) -> FormTemplateVersion:
        row = (
            self.db.query(FormTemplateVersion)
            .filter(
                FormTemplateVersion.subject_key == key.subject_key,
                FormTemplateVersion.version == int(version),
            )
            .first()
        )
        if row is None:
            raise VersionNotFoundError(int(version))
        return row

    def restore(self, key: FormKey, version: int) -> list[FieldDefinition]:
        """Fields of a past version, ready to become a working collection."""
        return fresh_copies(fields_from_document(self.get_version(key, version).configuration))

    def compare_versions(self, key: FormKey, from_version: int, to_version: int) -> dict[str, Any]:
        old = fields_from_document(self.get_version(key, from_version).configuration)
        new = fields_from_document(self.get_version(key, to_version).configuration)
        diffs = diff_fields(old, new)
        stats = {kind: 0 for kind in (DIFF_ADDED, DIFF_REMOVED, DIFF_MODIFIED, DIFF_UNCHANGED)}
        for item in diffs:
            stats[item["type"]] += 1
        return {"from_version": int(from_version), "to_version": int(to_version), "diffs": diffs, "stats": stats}


def _field_changes(old: FieldDefinition, new: FieldDefinition) -> list[str]:
    changes: list[str] = []
    if old.label != new.label:
        changes.append(f'Label: "{old.label}" -> "{new.label}"')
    if old.type != new.type:
        changes.append(f"Type: {old.type.value} -> {new.type.value}")
    if old.is_required != new.is_required:
        changes.append(f"Required: {str(old.is_required).lower()} -> {str(new.is_required).lower()}")
    if old.width != new.width:
        changes.append(f"Width: {old.width.value} -> {new.width.value}")
    if old.options != new.options:
        changes.append("Options changed")
    if old.placeholder != new.placeholder:
        changes.append("Placeholder changed")
    if old.help_text != new.help_text:
        changes.append("Help text changed")
    if old.default_value != new.default_value:
        changes.append(f'Default: "{old.default_value}" -> "{new.default_value}"')
    return changes


def diff_fields(old: list[FieldDefinition], new: list[FieldDefinition]) -> list[dict[str, Any]]:
    """Field-by-field difference keyed on field name."""
    old_by_name = {field.name: field for field in old}
    new_by_name = {field.name: field for field in new}
    names = list(old_by_name)
    names.extend(name for name in new_by_name if name not in old_by_name)

    diffs: list[dict[str, Any]] = []
    for name in names:
        before = old_by_name.get(name)
        after = new_by_name.get(name)
        if before is None:
            diffs.append({"type": DIFF_ADDED, "field_name": name, "changes": []})
        elif after is None:
            diffs.append({"type": DIFF_REMOVED, "field_name": name, "changes": []})
        else:
            changes = _field_changes(before, after)
            kind = DIFF_MODIFIED if changes else DIFF_UNCHANGED
            diffs.append({"type": kind, "field_name": name, "changes": changes})
    return diffs
