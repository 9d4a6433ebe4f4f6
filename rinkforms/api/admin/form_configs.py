from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from rinkforms.core.deps import actor_name, require_editor
from rinkforms.db.session import get_db
from rinkforms.schemas.forms import EditorApplyIn, FieldsSave
from rinkforms.services.field_types import palette
from rinkforms.services.form_commit import commit_fields, restore_version
from rinkforms.services.form_editor import apply_operation, start_session
from rinkforms.services.form_serialization import export_fields, import_fields
from rinkforms.services.template_store import FormKey, TemplateStore
from rinkforms.services.template_versions import VersionHistory, version_row

from .common import attachment_headers, fields_payload, session_payload

router = APIRouter()


def _configuration_response(key: FormKey, version: int, fields) -> dict[str, Any]:
    return {
        "facility_id": key.facility_id,
        "form_type": key.form_type,
        "version": version,
        "fields": fields_payload(fields),
    }


@router.get("/palette")
def get_palette(admin=Depends(require_editor)):
    return {"categories": palette()}


@router.post("/editor/apply")
def apply_editor_operation(payload: EditorApplyIn, admin=Depends(require_editor)):
    session = apply_operation(payload.session, payload.operation)
    return {"session": session_payload(session)}


@router.get("/configs/{facility_id}/{form_type}")
def get_configuration(facility_id: str, form_type: str, db: Session = Depends(get_db), admin=Depends(require_editor)):
    key = FormKey.binding(facility_id, form_type)
    store = TemplateStore(db)
    return _configuration_response(key, store.current_version(key), store.load(key))


@router.put("/configs/{facility_id}/{form_type}")
def save_configuration(
    facility_id: str,
    form_type: str,
    payload: FieldsSave,
    db: Session = Depends(get_db),
    admin=Depends(require_editor),
):
    key = FormKey.binding(facility_id, form_type)
    result = commit_fields(
        db,
        key,
        payload.fields,
        actor_name(admin),
        changelog=payload.changelog,
        expected_version=payload.expected_version,
    )
    return _configuration_response(key, result["version"], result["fields"])


@router.get("/configs/{facility_id}/{form_type}/versions")
def list_configuration_versions(
    facility_id: str,
    form_type: str,
    db: Session = Depends(get_db),
    admin=Depends(require_editor),
):
    rows = VersionHistory(db).list_versions(FormKey.binding(facility_id, form_type))
    return {"rows": [version_row(row) for row in rows], "total": len(rows)}


@router.get("/configs/{facility_id}/{form_type}/versions/compare")
def compare_configuration_versions(
    facility_id: str,
    form_type: str,
    from_version: int = Query(...),
    to_version: int = Query(...),
    db: Session = Depends(get_db),
    admin=Depends(require_editor),
):
    return VersionHistory(db).compare_versions(FormKey.binding(facility_id, form_type), from_version, to_version)


@router.get("/configs/{facility_id}/{form_type}/versions/{version}")
def get_configuration_version(
    facility_id: str,
    form_type: str,
    version: int,
    db: Session = Depends(get_db),
    admin=Depends(require_editor),
):
    return version_row(VersionHistory(db).get_version(FormKey.binding(facility_id, form_type), version))


@router.post("/configs/{facility_id}/{form_type}/versions/{version}/restore")
def restore_configuration_version(
    facility_id: str,
    form_type: str,
    version: int,
    expected_version: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    admin=Depends(require_editor),
):
    key = FormKey.binding(facility_id, form_type)
    result = restore_version(db, key, version, actor_name(admin), expected_version=expected_version)
    return _configuration_response(key, result["version"], result["fields"])


@router.get("/configs/{facility_id}/{form_type}/export")
def export_configuration(facility_id: str, form_type: str, db: Session = Depends(get_db), admin=Depends(require_editor)):
    key = FormKey.binding(facility_id, form_type)
    document = export_fields(TemplateStore(db).load(key), key.form_type, template_name=f"{key.facility_id} {key.form_type}")
    return JSONResponse(document, headers=attachment_headers(f"{key.form_type}-{key.facility_id}"))


@router.post("/configs/{facility_id}/{form_type}/import")
def import_configuration(
    facility_id: str,
    form_type: str,
    document: Any = Body(...),
    db: Session = Depends(get_db),
    admin=Depends(require_editor),
):
    """Parse an exported document into a working session; nothing is saved."""
    key = FormKey.binding(facility_id, form_type)
    fields = import_fields(document)
    session = start_session(fields, base_version=TemplateStore(db).current_version(key))
    return {"session": session_payload(session)}
