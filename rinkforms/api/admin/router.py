from fastapi import APIRouter
from rinkforms.api.admin import form_configs, form_templates

router = APIRouter()
router.include_router(form_configs.router, prefix="/forms", tags=["AdminForms"])
router.include_router(form_templates.router, prefix="/forms", tags=["AdminFormTemplates"])
