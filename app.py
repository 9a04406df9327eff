from fastapi import Depends, FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from routers.calls import calls_router
from backend import RedisBackend, get_call_store
from relay import MalformedMessage, SignalingHub
from relay.hub import ConnectionSession
from relay.messages import ERROR
from constants import CORS_ORIGINS
import json
from logging_config import get_logger, setup_logging
import os

# Setup logging
log_level = os.getenv("LOG_LEVEL", "INFO")
log_file = os.getenv("LOG_FILE", None)
setup_logging(log_level=log_level, log_file=log_file)
logger = get_logger(__name__)

app = FastAPI(title="Call Signaling Relay")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(calls_router)

# Registry and room state for this process. In-memory only: every live call is
# dropped on restart, and each instance only relays between its own connections.
app.state.hub = SignalingHub()

logger.info("FastAPI application initialized")


async def send_error(websocket: WebSocket, message: str):
    await websocket.send_text(json.dumps({"event": ERROR, "data": {"message": message}}))


@app.get("/health")
async def health(store: RedisBackend = Depends(get_call_store)):
    hub: SignalingHub = app.state.hub
    return {
        "status": "ok",
        "redis": store.ping(),
        "connections": len(hub.registry),
        "rooms": len(hub.rooms),
    }


@app.websocket("/ws")
async def signaling_endpoint(websocket: WebSocket):
    """Signaling WebSocket.

    Every frame is a JSON object ``{"event": "<name>", "data": {...}}``.
    Client events: register-user, join-room, leave-room, offer, answer,
    ice-candidate, end-call.
    """
    hub: SignalingHub = websocket.app.state.hub
    session = ConnectionSession()
    await websocket.accept()
    logger.info(f"Client connected: {websocket.client}")

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000), frame.get("reason"))
            data = frame.get("text")
            if data is None:
                logger.warning(f"Rejected binary frame from {session.identity or websocket.client}")
                await send_error(websocket, "Message must be a JSON text frame")
                continue

            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                logger.warning(f"Rejected non-JSON frame from {session.identity or websocket.client}")
                await send_error(websocket, "Message must be valid JSON")
                continue

            try:
                envelopes = hub.dispatch(websocket, message, session)
            except MalformedMessage as e:
                logger.warning(f"Rejected message from {session.identity or websocket.client}: {e}")
                await send_error(websocket, str(e))
                continue

            await hub.deliver(envelopes)

    except WebSocketDisconnect:
        logger.info(f"Client disconnected: {session.identity or websocket.client}")
    except Exception as e:
        logger.error(f"WebSocket error for {session.identity or websocket.client}: {e}", exc_info=True)
        try:
            await websocket.close(code=1011)
        except RuntimeError as close_error:
            logger.debug(f"Error closing WebSocket: {close_error}")
    finally:
        envelopes = hub.disconnect(websocket)
        await hub.deliver(envelopes)
