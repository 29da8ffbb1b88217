"""
The booking store: the only stateful component of the service.

Holds every FoodBooking in an insertion-ordered dict keyed by id and exposes
the CRUD, search, pagination, time-range and mark-delivered operations.
Failures are raised as BookingError subclasses; any unexpected fault is
wrapped into BookingInternalError so callers always get a tagged error.
"""
import functools
import math
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import ValidationError

from food_booking.core.config import Settings
from food_booking.core.errors import (
    BookingConflictError,
    BookingError,
    BookingInternalError,
    BookingNotFoundError,
    BookingValidationError,
)
from food_booking.core.logger import logger
from food_booking.core.snapshot import load_snapshot, save_snapshot
from food_booking.models.booking import FoodBooking, FoodBookingPayload

PayloadLike = Union[FoodBookingPayload, Dict[str, Any]]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _reported(action: str):
    """Re-raise BookingErrors untouched, wrap anything else as internal."""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            try:
                return func(self, *args, **kwargs)
            except BookingError:
                raise
            except Exception as e:
                logger.exception(f"🔥 Error {action}: {e}")
                raise BookingInternalError(f"Error {action}: {e}") from e
        return wrapper
    return decorator


def _coerce_quantity(value: Any) -> Optional[Union[int, float]]:
    """Numbers and numeric strings become a number; anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        try:
            number = int(value)
        except ValueError:
            try:
                number = float(value)
            except ValueError:
                return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


class BookingStore:
    def __init__(
        self,
        enforce_unique_names: bool = True,
        track_delivery: bool = False,
        snapshot_path: Optional[str] = None,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self.enforce_unique_names = enforce_unique_names
        self.track_delivery = track_delivery
        self.snapshot_path = snapshot_path or None
        self._clock = clock
        self._id_factory = id_factory
        self._lock = threading.RLock()
        self._bookings: Dict[str, FoodBooking] = {}

        if self.snapshot_path:
            for booking in load_snapshot(self.snapshot_path):
                self._bookings[booking.id] = booking

    @classmethod
    def from_settings(cls, settings: Settings) -> "BookingStore":
        return cls(
            enforce_unique_names=settings.ENFORCE_UNIQUE_FOOD_NAME,
            track_delivery=settings.TRACK_DELIVERY_STATUS,
            snapshot_path=settings.BOOKINGS_FILE,
        )

    # --- Queries ---

    @_reported("getting food bookings")
    def list(self) -> List[FoodBooking]:
        with self._lock:
            return [b.model_copy() for b in self._bookings.values()]

    @_reported("getting food booking")
    def get(self, booking_id: str) -> FoodBooking:
        with self._lock:
            booking = self._bookings.get(booking_id)
            if booking is None:
                logger.warning(f"🔍 Booking {booking_id} not found")
                raise BookingNotFoundError(f"A food booking with id={booking_id} not found")
            return booking.model_copy()

    @_reported("searching food bookings")
    def search(self, keyword: str) -> List[FoodBooking]:
        needle = (keyword or "").lower()
        with self._lock:
            return [
                b.model_copy() for b in self._bookings.values()
                if needle in b.food_name.lower() or needle in b.delivery_address.lower()
            ]

    @_reported("counting food bookings")
    def count(self) -> int:
        with self._lock:
            return len(self._bookings)

    @_reported("getting paginated food bookings")
    def paginate(self, page: int, page_size: int) -> List[FoodBooking]:
        if page < 1 or page_size < 1:
            return []
        start = (page - 1) * page_size
        with self._lock:
            values = list(self._bookings.values())
            return [b.model_copy() for b in values[start:start + page_size]]

    @_reported("getting food bookings by time range")
    def by_time_range(self, start: datetime, end: datetime) -> List[FoodBooking]:
        start, end = as_utc(start), as_utc(end)
        with self._lock:
            return [
                b.model_copy() for b in self._bookings.values()
                if start <= as_utc(b.created_at) <= end
            ]

    # --- Mutations ---

    @_reported("adding food booking")
    def add(self, payload: PayloadLike) -> FoodBooking:
        data = self._validate(payload)
        with self._lock:
            self._check_unique(data.food_name)
            booking = FoodBooking(
                id=self._id_factory(),
                food_name=data.food_name,
                quantity=data.quantity,
                delivery_address=data.delivery_address,
                created_at=self._clock(),
                updated_at=None,
                delivered=False if self.track_delivery else None,
            )
            self._commit(booking.id, booking)
            logger.info(f"🆕 Booking {booking.id} created: {booking.food_name} x{booking.quantity}")
            return booking.model_copy()

    @_reported("updating food booking")
    def update(self, booking_id: str, payload: PayloadLike) -> FoodBooking:
        data = self._validate(payload)
        with self._lock:
            self._check_unique(data.food_name, exclude_id=booking_id)
            current = self._bookings.get(booking_id)
            if current is None:
                logger.warning(f"🔍 Cannot update booking {booking_id}: not found")
                raise BookingNotFoundError(
                    f"Couldn't update a food booking with id={booking_id}. Food booking not found"
                )
            updated = current.model_copy(update={
                "food_name": data.food_name,
                "quantity": data.quantity,
                "delivery_address": data.delivery_address,
                "updated_at": self._next_stamp(current),
            })
            self._commit(booking_id, updated)
            logger.info(f"✏️ Booking {booking_id} updated")
            return updated.model_copy()

    @_reported("deleting food booking")
    def delete(self, booking_id: str) -> FoodBooking:
        with self._lock:
            current = self._bookings.get(booking_id)
            if current is None:
                logger.warning(f"🔍 Cannot delete booking {booking_id}: not found")
                raise BookingNotFoundError(
                    f"Couldn't delete a food booking with id={booking_id}. Food booking not found."
                )
            self._commit(booking_id, None)
            logger.info(f"🗑️ Booking {booking_id} deleted")
            return current.model_copy()

    @_reported("marking food booking as delivered")
    def mark_delivered(self, booking_id: str) -> FoodBooking:
        with self._lock:
            current = self._bookings.get(booking_id)
            if current is None:
                logger.warning(f"🔍 Cannot mark booking {booking_id} delivered: not found")
                raise BookingNotFoundError(
                    f"Couldn't mark food booking with id={booking_id} as delivered. Food booking not found"
                )
            changes = {"updated_at": self._next_stamp(current)}
            if self.track_delivery:
                changes["delivered"] = True
            updated = current.model_copy(update=changes)
            self._commit(booking_id, updated)
            logger.info(f"🚚 Booking {booking_id} marked as delivered")
            return updated.model_copy()

    # --- Helpers ---

    def _validate(self, payload: Optional[PayloadLike]) -> FoodBookingPayload:
        if payload is None:
            raise BookingValidationError("Invalid input. Please provide all required fields.")
        if not isinstance(payload, FoodBookingPayload):
            try:
                payload = FoodBookingPayload.model_validate(payload)
            except ValidationError as e:
                raise BookingValidationError(f"Invalid input: {e.errors()[0]['msg']}")

        for field, value in (("foodName", payload.food_name), ("deliveryAddress", payload.delivery_address)):
            if not isinstance(value, str) or not value.strip():
                raise BookingValidationError(
                    f"Invalid input. Please provide all required fields: '{field}' is missing or empty.",
                    field=field,
                )

        if payload.quantity is None:
            raise BookingValidationError(
                "Invalid input. Please provide all required fields: 'quantity' is missing.",
                field="quantity",
            )
        quantity = _coerce_quantity(payload.quantity)
        if quantity is None or quantity <= 0:
            raise BookingValidationError("Quantity must be a positive number.", field="quantity")

        return payload.model_copy(update={"quantity": quantity})

    def _check_unique(self, food_name: str, exclude_id: Optional[str] = None) -> None:
        if not self.enforce_unique_names:
            return
        wanted = food_name.lower()
        for booking in self._bookings.values():
            if booking.id != exclude_id and booking.food_name.lower() == wanted:
                logger.warning(f"⚠️ Duplicate food name rejected: '{food_name}'")
                raise BookingConflictError("Food name must be unique.", field="foodName")

    def _next_stamp(self, current: FoodBooking) -> datetime:
        # Never earlier than the record's previous stamp, even if the clock steps back
        previous = as_utc(current.updated_at or current.created_at)
        return max(as_utc(self._clock()), previous)

    def _commit(self, booking_id: str, booking: Optional[FoodBooking]) -> None:
        """Apply one change and persist it; roll back if persisting fails."""
        previous = self._bookings.get(booking_id)
        order = list(self._bookings)
        if booking is None:
            del self._bookings[booking_id]
        else:
            self._bookings[booking_id] = booking

        if not self.snapshot_path:
            return
        try:
            save_snapshot(self.snapshot_path, list(self._bookings.values()))
        except Exception:
            if previous is None:
                self._bookings.pop(booking_id, None)
            else:
                self._bookings[booking_id] = previous
                # Restore the original position of a deleted record
                self._bookings = {key: self._bookings[key] for key in order}
            raise
