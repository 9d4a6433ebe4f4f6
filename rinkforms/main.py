import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from rinkforms.core.config import settings
from rinkforms.core.http_hardening import install_http_hardening
from rinkforms.api.public.router import router as public_router
from rinkforms.api.admin.router import router as admin_router
from rinkforms.services.form_errors import FormEngineError

logging.getLogger("rinkforms").setLevel(settings.LOG_LEVEL.upper())

app = FastAPI(title=settings.APP_NAME, version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
install_http_hardening(app)

app.include_router(public_router, prefix="/api/forms")
app.include_router(admin_router, prefix="/api/admin")

@app.exception_handler(FormEngineError)
async def form_engine_error_handler(request: Request, exc: FormEngineError):
    return JSONResponse({"detail": exc.detail, "kind": exc.kind}, status_code=exc.status_code)

@app.get("/", include_in_schema=False)
def landing():
    return JSONResponse({"service": settings.APP_NAME, "status": "ok"})

@app.get("/health")
def health():
    return {"status": "ok"}
