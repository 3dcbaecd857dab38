# family100/routers/auth.py
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from typing import Optional
import logging

from family100.errors import AuthFailure
from family100.models import UserLogin
from family100.security import normalize_username

router = APIRouter()
logger = logging.getLogger(__name__)

SESSION_COOKIE = "family100_session"


def current_session(request: Request) -> Optional[dict]:
    """Return the web session behind the request cookie, if it is still valid."""
    return request.app.state.sessions.get(request.cookies.get(SESSION_COOKIE))


@router.post("/api/login")
async def login(user: UserLogin, request: Request):
    """Handles cookie-session authentication."""
    if not user.username or not user.password:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": "Username and password are required"},
        )

    logger.info(f"Login attempt for user: {user.username}")
    try:
        role = request.app.state.identity.lookup(user.username, user.password)
    except AuthFailure:
        logger.warning(f"Login failed for user: {user.username}")
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"success": False, "message": "Invalid username or password"},
        )

    settings = request.app.state.settings
    sid = request.app.state.sessions.create(normalize_username(user.username), role)
    response = JSONResponse({"success": True, "role": role.value, "message": "Login successful"})
    response.set_cookie(
        SESSION_COOKIE,
        sid,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return response


@router.post("/api/logout")
async def logout(request: Request):
    request.app.state.sessions.delete(request.cookies.get(SESSION_COOKIE))
    response = JSONResponse({"success": True, "message": "Logged out successfully"})
    response.delete_cookie(SESSION_COOKIE)
    return response


@router.get("/api/auth-status")
async def auth_status(request: Request):
    """Check authentication status."""
    session = current_session(request)
    if not session:
        return {"authenticated": False}
    return {
        "authenticated": True,
        "username": session["username"],
        "role": session["role"].value,
    }
