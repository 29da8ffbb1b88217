from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import TypeAdapter, ValidationError
from typing import Any, Callable, Dict
from datetime import datetime

from food_booking.api.bookings import get_store
from food_booking.api.methods import ALL_METHODS
from food_booking.core.errors import BookingError, BookingNotFoundError, BookingValidationError
from food_booking.core.logger import logger
from food_booking.models.rpc_models import ErrorDetail, ErrResult, OkResult, RpcRequest, RpcResponse
from food_booking.services.booking_store import BookingStore

router = APIRouter()

_ADAPTERS = {str: TypeAdapter(str), int: TypeAdapter(int), datetime: TypeAdapter(datetime), dict: TypeAdapter(Dict[str, Any])}

def _param(params: Dict[str, Any], name: str, kind: type) -> Any:
    if name not in params:
        raise BookingValidationError(f"Missing parameter '{name}'", field=name)
    try:
        return _ADAPTERS[kind].validate_python(params[name])
    except ValidationError as e:
        raise BookingValidationError(f"Invalid parameter '{name}': {e.errors()[0]['msg']}", field=name)

def _dump_all(bookings):
    return [b.to_api() for b in bookings]

# Each handler takes (store, params) and returns a JSON-ready value
HANDLERS: Dict[str, Callable[[BookingStore, Dict[str, Any]], Any]] = {
    "getFoodBookings": lambda store, p: _dump_all(store.list()),
    "getFoodBooking": lambda store, p: store.get(_param(p, "id", str)).to_api(),
    "addFoodBooking": lambda store, p: store.add(_param(p, "payload", dict)).to_api(),
    "updateFoodBooking": lambda store, p: store.update(_param(p, "id", str), _param(p, "payload", dict)).to_api(),
    "deleteFoodBooking": lambda store, p: store.delete(_param(p, "id", str)).to_api(),
    "searchFoodBookings": lambda store, p: _dump_all(store.search(_param(p, "keyword", str))),
    "countFoodBookings": lambda store, p: store.count(),
    "getFoodBookingsPaginated": lambda store, p: _dump_all(
        store.paginate(_param(p, "page", int), _param(p, "pageSize", int))
    ),
    "getFoodBookingsByTimeRange": lambda store, p: _dump_all(
        store.by_time_range(_param(p, "startTime", datetime), _param(p, "endTime", datetime))
    ),
    "markFoodBookingAsDelivered": lambda store, p: store.mark_delivered(_param(p, "id", str)).to_api(),
}

def execute_call(store: BookingStore, method: str, params: Dict[str, Any]) -> Any:
    handler = HANDLERS.get(method)
    if handler is None:
        logger.warning(f"⚠️ Unknown method name: {method}")
        raise BookingNotFoundError(f"Unknown method '{method}'")
    return handler(store, params)

@router.get("/rpc/methods")
async def list_methods():
    return {"methods": ALL_METHODS}

@router.post("/rpc")
async def rpc(request: Request, store: BookingStore = Depends(get_store)):
    """
    Runs a batch of method calls. Each call gets its own tagged result,
    so one failing call never affects the others.
    """
    try:
        body = RpcRequest.model_validate(await request.json())
    except (ValidationError, ValueError) as e:
        logger.warning(f"⚠️ Malformed RPC request: {e}")
        return JSONResponse(
            status_code=400,
            content={"kind": "validation", "message": "Malformed RPC request", "field": None}
        )

    results = []
    for call in body.calls:
        logger.info(f"🔔 RPC call {call.id}: {call.method}")
        try:
            value = await run_in_threadpool(execute_call, store, call.method, call.params)
            results.append(OkResult(callId=call.id, ok=value))
        except BookingError as e:
            results.append(ErrResult(callId=call.id, err=ErrorDetail(**e.to_dict())))

    return RpcResponse(results=results).model_dump()
