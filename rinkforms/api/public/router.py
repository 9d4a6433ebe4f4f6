from fastapi import APIRouter
from rinkforms.api.public import forms

router = APIRouter()
router.include_router(forms.router, tags=["FormEntry"])
