from fastapi import APIRouter, WebSocket, WebSocketDisconnect
import logging

from family100.coordinator import QuizCoordinator

router = APIRouter()
logger = logging.getLogger(__name__)


# --- Main WebSocket Endpoint ---
@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    coordinator: QuizCoordinator = websocket.app.state.coordinator
    connection = await coordinator.connect(websocket)

    try:
        while not connection.closed:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break

            data = message.get("text")
            if data is None:
                data = (message.get("bytes") or b"").decode("utf-8", errors="replace")
            await coordinator.receive(connection, data)

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected for: {connection.id}")
    finally:
        await coordinator.disconnect(connection)
