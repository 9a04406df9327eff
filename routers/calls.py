from fastapi import APIRouter, Depends, HTTPException, Query, Request
from schemas.calls import (
    CallHistoryResponse,
    CallResponse,
    InitiateCallRequest,
    InitiateCallResponse,
    PresenceResponse,
    UpdateCallStatusRequest,
)
from backend import RedisBackend, get_call_store
from relay import SignalingHub
from constants import CALL_HISTORY_LIMIT
import redis
import uuid
from typing import Optional
from logging_config import get_logger

logger = get_logger(__name__)

calls_router = APIRouter(prefix="/api/call", tags=["calls"])


def get_hub(request: Request) -> SignalingHub:
    return request.app.state.hub


@calls_router.post("/initiate", status_code=201, response_model=InitiateCallResponse)
async def initiate_call(
    call: InitiateCallRequest,
    store: RedisBackend = Depends(get_call_store),
    hub: SignalingHub = Depends(get_hub),
):
    # Body: { "callerId", "callerName", "callerType", "receiverId", "receiverName", "receiverType" }
    # Response 201: { "success": true, "roomId": "...", "call": {...} }
    if not call.caller_id or not call.receiver_id or not call.caller_type or not call.receiver_type:
        logger.warning("Call initiation rejected: missing required fields")
        raise HTTPException(status_code=400, detail="Missing required fields")

    room_id = uuid.uuid4().hex
    logger.info(f"Call initiation from {call.caller_id} ({call.caller_type}) to {call.receiver_id} ({call.receiver_type}), room {room_id}")

    try:
        record = store.create_call(room_id, call.model_dump())
    except redis.RedisError as e:
        logger.error(f"Error initiating call: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Server error initiating call")

    # The room itself comes into being when the first participant joins it
    envelopes = hub.notifier.notify_incoming_call(
        call.receiver_id,
        room_id,
        call.caller_id,
        caller_name=call.caller_name,
        caller_type=call.caller_type,
    )
    await hub.deliver(envelopes)

    return InitiateCallResponse(room_id=room_id, call=record)


@calls_router.get("/history/{user_id}", response_model=CallHistoryResponse)
async def call_history(
    user_id: str,
    user_type: str = Query(..., alias="userType", description="'vendor', 'user', or 'admin'"),
    limit: Optional[int] = Query(None, ge=1, le=500),
    store: RedisBackend = Depends(get_call_store),
):
    logger.info(f"Call history request for {user_id} ({user_type})")
    try:
        calls = store.list_calls_for(user_id, user_type, limit or CALL_HISTORY_LIMIT)
    except redis.RedisError as e:
        logger.error(f"Error fetching call history: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Server error fetching call history")
    return CallHistoryResponse(calls=calls)


@calls_router.put("/{room_id}/status", response_model=CallResponse)
async def update_call_status(
    room_id: str,
    update: UpdateCallStatusRequest,
    store: RedisBackend = Depends(get_call_store),
):
    # Body: { "status": "started" | "ended" | ..., "duration": 42 }
    logger.info(f"Call status update for room {room_id}: {update.status}")
    try:
        record = store.update_call_status(room_id, update.status, update.duration)
    except redis.RedisError as e:
        logger.error(f"Error updating call status: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Server error updating call status")
    if record is None:
        logger.warning(f"Call status update failed: call {room_id} not found")
        raise HTTPException(status_code=404, detail="Call not found")
    return CallResponse(call=record)


@calls_router.get("/presence/{user_id}", response_model=PresenceResponse)
async def presence(user_id: str, hub: SignalingHub = Depends(get_hub)):
    """Whether the user currently has a live signaling connection."""
    return PresenceResponse(user_id=user_id, online=user_id in hub.registry)
