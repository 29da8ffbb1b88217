import json
import os
from typing import List

from food_booking.core.logger import logger
from food_booking.models.booking import FoodBooking

def load_snapshot(path: str) -> List[FoodBooking]:
    """
    Loads bookings from a JSON snapshot file, in stored order.
    A missing file is an empty store; a malformed one raises ValueError.
    """
    if not os.path.exists(path):
        logger.info(f"📂 No booking snapshot at '{path}', starting empty")
        return []

    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw = json.load(f)
        bookings = [FoodBooking.model_validate(item) for item in raw]
    except (json.JSONDecodeError, TypeError, ValueError) as e:
        logger.critical(f"❌ Cannot parse booking snapshot '{path}': {e}")
        raise ValueError(f"Invalid booking snapshot at {path}: {e}")

    logger.info(f"✅ Loaded {len(bookings)} bookings from '{path}'")
    return bookings

def save_snapshot(path: str, bookings: List[FoodBooking]) -> None:
    """
    Rewrites the snapshot file. Writes to a sibling temp file first so a
    crash mid-write leaves the previous snapshot intact.
    """
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)

    tmp_path = f"{path}.tmp"
    try:
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump([b.to_api() for b in bookings], f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)
    except Exception as e:
        logger.error(f"❌ Failed to write booking snapshot '{path}': {e}")
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
