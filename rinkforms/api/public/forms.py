from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rinkforms.core.deps import actor_name, require_entry_user
from rinkforms.db.session import get_db
from rinkforms.schemas.forms import FormSubmit
from rinkforms.services.form_collector import FormEntrySession
from rinkforms.services.form_errors import FormValidationError
from rinkforms.services.template_store import FormKey, TemplateStore

router = APIRouter()
logger = logging.getLogger(__name__)


def _open_session(db: Session, facility_id: str, form_type: str, initial_values=None):
    key = FormKey.binding(facility_id, form_type)
    store = TemplateStore(db)
    session = FormEntrySession(initial_values)
    rendered = session.load(store.load(key))
    return key, store.current_version(key), session, rendered


def _form_payload(key: FormKey, version: int, session: FormEntrySession, rendered) -> dict:
    return {
        "facility_id": key.facility_id,
        "form_type": key.form_type,
        "version": version,
        "state": session.state.value,
        "fields": [item.as_dict() for item in rendered],
    }


@router.get("/{facility_id}/{form_type}")
def get_form(facility_id: str, form_type: str, db: Session = Depends(get_db), user=Depends(require_entry_user)):
    key, version, session, rendered = _open_session(db, facility_id, form_type)
    return _form_payload(key, version, session, rendered)


@router.post("/{facility_id}/{form_type}/render")
def render_form_with_values(
    facility_id: str,
    form_type: str,
    payload: FormSubmit,
    db: Session = Depends(get_db),
    user=Depends(require_entry_user),
):
    """Render the form seeded with an existing record, e.g. when editing an entry."""
    key, version, session, rendered = _open_session(db, facility_id, form_type, payload.values)
    return _form_payload(key, version, session, rendered)


@router.post("/{facility_id}/{form_type}/submit")
def submit_form(
    facility_id: str,
    form_type: str,
    payload: FormSubmit,
    db: Session = Depends(get_db),
    user=Depends(require_entry_user),
):
    key, version, session, _ = _open_session(db, facility_id, form_type)
    result = session.submit(payload.values)
    if not result.is_ok:
        raise FormValidationError(result.errors)
    logger.info("form submitted subject=%s version=%s by=%s", key.subject_key, version, actor_name(user))
    return {
        "status": session.state.value,
        "facility_id": key.facility_id,
        "form_type": key.form_type,
        "version": version,
        "record": result.record,
    }
