from fastapi import APIRouter, Body, Depends, Request
from typing import Any, Dict, List, Optional
from datetime import datetime

from food_booking.core.config import settings
from food_booking.models.booking import FoodBooking
from food_booking.services.booking_store import BookingStore

router = APIRouter()

def get_store(request: Request) -> BookingStore:
    return request.app.state.booking_store

def _dump(bookings: List[FoodBooking]) -> List[Dict[str, Any]]:
    return [b.to_api() for b in bookings]

# Plain def: store calls (and snapshot writes) run in the threadpool.
# Fixed paths are registered before /{booking_id} so they are not shadowed

@router.get("/bookings")
def list_bookings(store: BookingStore = Depends(get_store)):
    return _dump(store.list())

@router.get("/bookings/count")
def count_bookings(store: BookingStore = Depends(get_store)):
    return {"count": store.count()}

@router.get("/bookings/search")
def search_bookings(keyword: str = "", store: BookingStore = Depends(get_store)):
    return _dump(store.search(keyword))

@router.get("/bookings/page")
def paginate_bookings(
    page: int = 1,
    page_size: Optional[int] = None,
    store: BookingStore = Depends(get_store)
):
    size = page_size if page_size is not None else settings.DEFAULT_PAGE_SIZE
    return _dump(store.paginate(page, size))

@router.get("/bookings/range")
def bookings_by_time_range(start: datetime, end: datetime, store: BookingStore = Depends(get_store)):
    return _dump(store.by_time_range(start, end))

@router.get("/bookings/{booking_id}")
def get_booking(booking_id: str, store: BookingStore = Depends(get_store)):
    return store.get(booking_id).to_api()

@router.post("/bookings", status_code=201)
def add_booking(payload: Optional[Dict[str, Any]] = Body(None), store: BookingStore = Depends(get_store)):
    # Raw dict on purpose: the store names the missing/invalid field
    return store.add(payload).to_api()

@router.put("/bookings/{booking_id}")
def update_booking(
    booking_id: str,
    payload: Optional[Dict[str, Any]] = Body(None),
    store: BookingStore = Depends(get_store)
):
    return store.update(booking_id, payload).to_api()

@router.delete("/bookings/{booking_id}")
def delete_booking(booking_id: str, store: BookingStore = Depends(get_store)):
    return store.delete(booking_id).to_api()

@router.post("/bookings/{booking_id}/delivered")
def mark_booking_delivered(booking_id: str, store: BookingStore = Depends(get_store)):
    return store.mark_delivered(booking_id).to_api()
