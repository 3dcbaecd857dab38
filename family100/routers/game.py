# family100/routers/game.py

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/api/status")
async def get_status(request: Request):
    """Returns seat occupancy and round progress. Never exposes answers."""
    coordinator = request.app.state.coordinator
    return {"status": "online", **coordinator.status()}
