import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from food_booking.core.errors import (
    BookingConflictError,
    BookingInternalError,
    BookingNotFoundError,
    BookingValidationError,
)
from food_booking.core.config import Settings
from food_booking.services.booking_store import BookingStore

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

class FakeClock:
    """Advances one minute per call unless told otherwise."""
    def __init__(self, start=T0, step=timedelta(minutes=1)):
        self.now = start
        self.step = step

    def __call__(self):
        current = self.now
        self.now = self.now + self.step
        return current

def pizza(**overrides):
    payload = {"foodName": "Pizza", "quantity": 2, "deliveryAddress": "1 Main St"}
    payload.update(overrides)
    return payload

@pytest.fixture
def store():
    return BookingStore(clock=FakeClock())

def test_add_returns_fresh_record(store):
    booking = store.add(pizza())

    assert booking.id
    assert booking.food_name == "Pizza"
    assert booking.quantity == 2
    assert booking.delivery_address == "1 Main St"
    assert booking.created_at == T0
    assert booking.updated_at is None
    assert booking.delivered is None

def test_add_then_get_returns_equal_record(store):
    added = store.add(pizza())
    assert store.get(added.id) == added

def test_ids_are_unique(store):
    ids = {store.add(pizza(foodName=f"Dish {i}")).id for i in range(20)}
    assert len(ids) == 20

@pytest.mark.parametrize("payload, field", [
    (pizza(foodName=""), "foodName"),
    (pizza(foodName="   "), "foodName"),
    (pizza(deliveryAddress=None), "deliveryAddress"),
    ({"foodName": "Pizza", "deliveryAddress": "1 Main St"}, "quantity"),
    (pizza(quantity=0), "quantity"),
    (pizza(quantity=-3), "quantity"),
    (pizza(quantity="lots"), "quantity"),
    (pizza(quantity=True), "quantity"),
    (pizza(quantity=float("nan")), "quantity"),
])
def test_add_rejects_invalid_payload(store, payload, field):
    with pytest.raises(BookingValidationError) as exc:
        store.add(payload)
    assert exc.value.field == field
    assert store.count() == 0

def test_add_rejects_missing_payload(store):
    with pytest.raises(BookingValidationError):
        store.add(None)

def test_add_accepts_numeric_string_quantity(store):
    assert store.add(pizza(quantity="3")).quantity == 3
    assert store.add(pizza(foodName="Soup", quantity=1.5)).quantity == 1.5

def test_duplicate_name_is_conflict_case_insensitive(store):
    store.add(pizza(foodName="Pizza"))
    with pytest.raises(BookingConflictError):
        store.add(pizza(foodName="pizza"))
    assert store.count() == 1

def test_duplicate_names_allowed_when_uniqueness_disabled():
    store = BookingStore(enforce_unique_names=False, clock=FakeClock())
    store.add(pizza())
    store.add(pizza(foodName="PIZZA"))
    assert store.count() == 2

def test_get_unknown_id_is_not_found(store):
    with pytest.raises(BookingNotFoundError) as exc:
        store.get("missing")
    assert "missing" in exc.value.message

def test_update_preserves_identity_and_stamps_updated_at(store):
    added = store.add(pizza())
    updated = store.update(added.id, pizza(foodName="Pasta", quantity=5, deliveryAddress="2 Side Rd"))

    assert updated.id == added.id
    assert updated.created_at == added.created_at
    assert updated.updated_at > added.created_at
    assert (updated.food_name, updated.quantity, updated.delivery_address) == ("Pasta", 5, "2 Side Rd")
    assert store.get(added.id) == updated

def test_update_may_keep_own_name(store):
    added = store.add(pizza())
    updated = store.update(added.id, pizza(foodName="PIZZA", quantity=4))
    assert updated.food_name == "PIZZA"

def test_update_conflicts_with_other_record(store):
    store.add(pizza())
    soup = store.add(pizza(foodName="Soup"))
    with pytest.raises(BookingConflictError):
        store.update(soup.id, pizza(foodName="pizza"))
    assert store.get(soup.id).food_name == "Soup"

def test_update_unknown_id_leaves_store_unchanged(store):
    added = store.add(pizza())
    before = store.list()
    with pytest.raises(BookingNotFoundError):
        store.update("unknown-id", pizza(foodName="Pasta"))
    assert store.list() == before
    assert store.get(added.id) == added

def test_update_validates_payload(store):
    added = store.add(pizza())
    with pytest.raises(BookingValidationError):
        store.update(added.id, pizza(quantity=0))
    assert store.get(added.id).quantity == 2

def test_updated_at_never_goes_backwards():
    clock = FakeClock(step=-timedelta(minutes=5))
    store = BookingStore(clock=clock)
    added = store.add(pizza())
    first = store.update(added.id, pizza(quantity=3))
    second = store.mark_delivered(added.id)

    assert first.updated_at >= added.created_at
    assert second.updated_at >= first.updated_at

def test_delete_returns_record_and_removes_it(store):
    added = store.add(pizza())
    removed = store.delete(added.id)

    assert removed == added
    with pytest.raises(BookingNotFoundError):
        store.get(added.id)
    with pytest.raises(BookingNotFoundError):
        store.delete(added.id)

def test_list_keeps_insertion_order(store):
    names = ["Zucchini", "Apple pie", "Mango"]
    for name in names:
        store.add(pizza(foodName=name))
    assert [b.food_name for b in store.list()] == names

def test_callers_get_copies(store):
    added = store.add(pizza())
    added.food_name = "Tampered"
    store.list()[0].quantity = 99
    fresh = store.get(added.id)
    assert fresh.food_name == "Pizza"
    assert fresh.quantity == 2

def test_search_matches_name_or_address_case_insensitively(store):
    store.add(pizza(foodName="Margherita Pizza", deliveryAddress="1 Main St"))
    store.add(pizza(foodName="Ramen", deliveryAddress="12 Pizza Lane"))
    store.add(pizza(foodName="Salad", deliveryAddress="3 Oak Ave"))

    assert {b.food_name for b in store.search("PIZZA")} == {"Margherita Pizza", "Ramen"}
    assert [b.food_name for b in store.search("oak")] == ["Salad"]
    assert store.search("sushi") == []
    assert len(store.search("")) == 3

def test_count_tracks_list(store):
    assert store.count() == 0 == len(store.list())
    first = store.add(pizza())
    store.add(pizza(foodName="Soup"))
    assert store.count() == 2 == len(store.list())
    store.delete(first.id)
    assert store.count() == 1 == len(store.list())

def test_paginate(store):
    for i in range(5):
        store.add(pizza(foodName=f"Dish {i}"))

    assert [b.food_name for b in store.paginate(1, 2)] == ["Dish 0", "Dish 1"]
    assert [b.food_name for b in store.paginate(3, 2)] == ["Dish 4"]
    assert store.paginate(4, 2) == []
    assert store.paginate(0, 2) == []
    assert store.paginate(1, 0) == []
    assert len(store.paginate(1, 100)) == 5

def test_by_time_range_is_inclusive(store):
    first = store.add(pizza(foodName="A"))   # T0
    second = store.add(pizza(foodName="B"))  # T0 + 1min
    store.add(pizza(foodName="C"))           # T0 + 2min

    found = store.by_time_range(first.created_at, second.created_at)
    assert [b.food_name for b in found] == ["A", "B"]
    assert store.by_time_range(T0 + timedelta(hours=1), T0 + timedelta(hours=2)) == []
    assert store.by_time_range(second.created_at, first.created_at) == []

def test_by_time_range_treats_naive_datetimes_as_utc(store):
    store.add(pizza())
    naive = T0.replace(tzinfo=None)
    assert len(store.by_time_range(naive, naive)) == 1

def test_mark_delivered_only_stamps_updated_at_by_default(store):
    added = store.add(pizza())
    delivered = store.mark_delivered(added.id)

    assert delivered.updated_at is not None
    assert delivered.delivered is None
    assert delivered.food_name == added.food_name

def test_mark_delivered_sets_flag_when_tracking():
    store = BookingStore(track_delivery=True, clock=FakeClock())
    added = store.add(pizza())
    assert added.delivered is False

    delivered = store.mark_delivered(added.id)
    assert delivered.delivered is True
    # A later edit keeps the delivery flag
    assert store.update(added.id, pizza(quantity=7)).delivered is True

def test_mark_delivered_unknown_id(store):
    with pytest.raises(BookingNotFoundError):
        store.mark_delivered("nope")

def test_unexpected_fault_is_reported_as_internal_error(store):
    store.add(pizza())
    with patch.object(store, "_bookings") as broken:
        broken.values.side_effect = RuntimeError("boom")
        with pytest.raises(BookingInternalError) as exc:
            store.list()
    assert exc.value.message == "Error getting food bookings: boom"

def test_from_settings_reads_flags():
    store = BookingStore.from_settings(
        Settings(ENFORCE_UNIQUE_FOOD_NAME=False, TRACK_DELIVERY_STATUS=True, BOOKINGS_FILE="")
    )

    assert store.enforce_unique_names is False
    assert store.track_delivery is True
    assert store.snapshot_path is None
    store.add(pizza())
    assert store.add(pizza(foodName="pizza")).delivered is False
