from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from rinkforms.core.deps import actor_name, require_editor
from rinkforms.db.session import get_db
from rinkforms.models.form_template import FormTemplate
from rinkforms.schemas.forms import FieldsSave, TemplateCreate, TemplateDuplicate, TemplateQuery
from rinkforms.services import form_commit
from rinkforms.services.form_editor import start_session
from rinkforms.services.form_serialization import export_fields
from rinkforms.services.template_query import apply_template_query
from rinkforms.services.template_store import FormKey, TemplateStore, fresh_copies
from rinkforms.services.template_versions import VersionHistory, version_row

from .common import attachment_headers, session_payload, template_row

router = APIRouter()


@router.get("/templates")
def list_templates(
    form_type: Optional[str] = Query(default=None),
    category: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    admin=Depends(require_editor),
):
    rows = TemplateStore(db).list_templates(form_type=form_type, category=category)
    return {"rows": [template_row(r) for r in rows], "total": len(rows)}


@router.post("/templates/query")
def query_templates(tq: TemplateQuery, db: Session = Depends(get_db), admin=Depends(require_editor)):
    q = apply_template_query(db.query(FormTemplate), tq)
    total = q.count()
    rows = q.offset(tq.page.offset).limit(tq.page.limit).all()
    return {"rows": [template_row(r) for r in rows], "total": total}


@router.post("/templates", status_code=201)
def create_template(payload: TemplateCreate, db: Session = Depends(get_db), admin=Depends(require_editor)):
    row = form_commit.create_template(db, payload, actor_name(admin))
    return template_row(row, with_fields=True)


@router.get("/templates/{template_id}")
def get_template(template_id: str, db: Session = Depends(get_db), admin=Depends(require_editor)):
    return template_row(TemplateStore(db).get_template(template_id), with_fields=True)


@router.put("/templates/{template_id}")
def save_template(template_id: str, payload: FieldsSave, db: Session = Depends(get_db), admin=Depends(require_editor)):
    key = FormKey.template(template_id)
    store = TemplateStore(db)
    store.get_template(key.template_id)
    form_commit.commit_fields(
        db,
        key,
        payload.fields,
        actor_name(admin),
        changelog=payload.changelog,
        expected_version=payload.expected_version,
    )
    return template_row(store.get_template(key.template_id), with_fields=True)


@router.delete("/templates/{template_id}")
def delete_template(template_id: str, db: Session = Depends(get_db), admin=Depends(require_editor)):
    form_commit.delete_template(db, template_id, actor_name(admin))
    return {"status": "deleted", "id": template_id}


@router.post("/templates/{template_id}/duplicate", status_code=201)
def duplicate_template(
    template_id: str,
    payload: TemplateDuplicate,
    db: Session = Depends(get_db),
    admin=Depends(require_editor),
):
    row = form_commit.duplicate_template(db, template_id, payload.template_name, actor_name(admin))
    return template_row(row, with_fields=True)


@router.get("/templates/{template_id}/apply")
def apply_template(template_id: str, db: Session = Depends(get_db), admin=Depends(require_editor)):
    """Template fields as a fresh working session for a facility form."""
    key = FormKey.template(template_id)
    store = TemplateStore(db)
    store.get_template(key.template_id)
    return {"session": session_payload(start_session(fresh_copies(store.load(key))))}


@router.get("/templates/{template_id}/versions")
def list_template_versions(template_id: str, db: Session = Depends(get_db), admin=Depends(require_editor)):
    key = FormKey.template(template_id)
    TemplateStore(db).get_template(key.template_id)
    rows = VersionHistory(db).list_versions(key)
    return {"rows": [version_row(row) for row in rows], "total": len(rows)}


@router.get("/templates/{template_id}/versions/compare")
def compare_template_versions(
    template_id: str,
    from_version: int = Query(...),
    to_version: int = Query(...),
    db: Session = Depends(get_db),
    admin=Depends(require_editor),
):
    return VersionHistory(db).compare_versions(FormKey.template(template_id), from_version, to_version)


@router.post("/templates/{template_id}/versions/{version}/restore")
def restore_template_version(
    template_id: str,
    version: int,
    expected_version: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    admin=Depends(require_editor),
):
    key = FormKey.template(template_id)
    store = TemplateStore(db)
    store.get_template(key.template_id)
    form_commit.restore_version(db, key, version, actor_name(admin), expected_version=expected_version)
    return template_row(store.get_template(key.template_id), with_fields=True)


@router.get("/templates/{template_id}/export")
def export_template(template_id: str, db: Session = Depends(get_db), admin=Depends(require_editor)):
    key = FormKey.template(template_id)
    store = TemplateStore(db)
    row = store.get_template(key.template_id)
    document = export_fields(store.load(key), row.form_type, template_name=row.template_name)
    return JSONResponse(document, headers=attachment_headers(row.template_name))
