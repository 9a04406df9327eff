from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class CallModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class InitiateCallRequest(CallModel):
    caller_id: Optional[str] = Field(None, alias="callerId")
    caller_name: Optional[str] = Field(None, alias="callerName")
    caller_type: Optional[str] = Field(None, alias="callerType")
    receiver_id: Optional[str] = Field(None, alias="receiverId")
    receiver_name: Optional[str] = Field(None, alias="receiverName")
    receiver_type: Optional[str] = Field(None, alias="receiverType")

class CallRecord(BaseModel):
    room_id: str
    caller_id: str
    caller_name: Optional[str] = None
    caller_type: str
    receiver_id: str
    receiver_name: Optional[str] = None
    receiver_type: str
    status: str
    duration_seconds: int = 0
    started_at: Optional[str] = None
    ended_at: Optional[str] = None
    created_at: str

class InitiateCallResponse(CallModel):
    success: bool = True
    room_id: str = Field(..., alias="roomId")
    call: CallRecord

class CallHistoryResponse(BaseModel):
    success: bool = True
    calls: list[CallRecord]

class UpdateCallStatusRequest(BaseModel):
    status: str
    duration: Optional[int] = None

class CallResponse(BaseModel):
    success: bool = True
    call: CallRecord

class PresenceResponse(CallModel):
    user_id: str = Field(..., alias="userId")
    online: bool
