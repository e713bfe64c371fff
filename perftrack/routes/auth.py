# perftrack/routes/auth.py
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordRequestForm

from perftrack.auth import create_access_token, get_current_user
from perftrack.db.mongo import DocumentStore
from perftrack.deps import get_docs, get_identity, get_settings_dep
from perftrack.errors import Unauthenticated
from perftrack.identity import IdentityProvider
from perftrack.settings import Settings
from perftrack.utils.logger import log_activity

router = APIRouter(prefix="/auth", tags=["auth"])


# ---------- Email/Password Login ----------
@router.post("/token")
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    identity: IdentityProvider = Depends(get_identity),
    docs: DocumentStore = Depends(get_docs),
    settings: Settings = Depends(get_settings_dep),
):
    user = identity.authenticate(form_data.username, form_data.password)
    if not user:
        raise Unauthenticated("Invalid credentials")

    access_token = create_access_token(settings, str(user["_id"]), user["role"], user.get("object_id"))
    log_activity(docs, user_id=str(user["_id"]), action="login_password", metadata={"role": user["role"]})

    # JSON for API clients, cookie for the browser
    resp = JSONResponse({
        "access_token": access_token,
        "token_type": "bearer",
        "role": user["role"],
    })
    resp.set_cookie(key="token", value=access_token, httponly=True, samesite="lax")
    return resp


@router.post("/logout")
def logout():
    resp = JSONResponse({"message": "Logged out"})
    resp.delete_cookie("token")
    return resp


@router.get("/me")
def me(user: dict = Depends(get_current_user)):
    return user
