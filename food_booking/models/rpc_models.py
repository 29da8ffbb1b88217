from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Union

# --- Incoming Request Models ---

class MethodCall(BaseModel):
    id: Union[str, int]
    method: str
    params: Dict[str, Any] = Field(default_factory=dict)

class RpcRequest(BaseModel):
    calls: List[MethodCall]

# --- Outgoing Response Models ---

class ErrorDetail(BaseModel):
    kind: str
    message: str
    field: Optional[str] = None

class OkResult(BaseModel):
    callId: Union[str, int]
    ok: Any

class ErrResult(BaseModel):
    callId: Union[str, int]
    err: ErrorDetail

class RpcResponse(BaseModel):
    results: List[Union[OkResult, ErrResult]]
