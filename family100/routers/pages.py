# family100/routers/pages.py
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse, PlainTextResponse, RedirectResponse

from family100.routers.auth import current_session

router = APIRouter()

LOGIN_PAGE = "/login.html"
HOST_ROLES = ("admin", "host")


def _serve(request: Request, page: str, allowed_roles=None):
    session = current_session(request)
    if not session:
        return RedirectResponse(LOGIN_PAGE, status_code=302)
    if allowed_roles is not None and session["role"].value not in allowed_roles:
        return PlainTextResponse("Access denied: Insufficient permissions", status_code=403)

    path = request.app.state.settings.public_dir / page
    if not path.is_file():
        raise HTTPException(status_code=404, detail=f"{page} not found")
    return FileResponse(path)


@router.get("/")
async def root(request: Request):
    """Send each user to the page for their role."""
    session = current_session(request)
    if not session:
        return RedirectResponse(LOGIN_PAGE, status_code=302)
    if session["role"].host_privileged:
        return RedirectResponse("/host", status_code=302)
    return RedirectResponse("/player", status_code=302)


@router.get("/family")
async def family_page(request: Request):
    return _serve(request, "family.html", HOST_ROLES)


@router.get("/host")
async def host_page(request: Request):
    return _serve(request, "host.html", HOST_ROLES)


@router.get("/player")
async def player_page(request: Request):
    return _serve(request, "player.html")
