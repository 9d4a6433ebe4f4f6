from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from rinkforms.core.config import settings
from rinkforms.core.security import decode_jwt

bearer = HTTPBearer(auto_error=False)

def get_current_user(creds: HTTPAuthorizationCredentials = Depends(bearer)) -> dict:
    if not creds:
        raise HTTPException(status_code=401, detail="Missing authorization token")
    try:
        return decode_jwt(creds.credentials, settings.ADMIN_JWT_SECRET)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")

def require_role(*roles: str):
    allowed = {str(role).upper() for role in roles}

    def _inner(user: dict = Depends(get_current_user)) -> dict:
        if str(user.get("role") or "").upper() not in allowed:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user
    return _inner

def require_editor(user: dict = Depends(get_current_user)) -> dict:
    return require_role(*settings.editor_roles_list)(user)

def require_entry_user(user: dict = Depends(get_current_user)) -> dict:
    return require_role(*settings.entry_roles_list)(user)

def actor_name(user: dict | None) -> str:
    if not user:
        return settings.DEFAULT_AUTHOR
    for key in ("name", "email", "sub"):
        value = str(user.get(key) or "").strip()
        if value:
            return value
    return settings.DEFAULT_AUTHOR
