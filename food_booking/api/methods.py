# Method descriptions served by GET /api/rpc/methods

PAYLOAD_SCHEMA = {
    "type": "object",
    "properties": {
        "foodName": {"type": "string", "description": "Name of the food being booked. Must be non-empty."},
        "quantity": {"type": "number", "description": "How many portions. Must be greater than zero."},
        "deliveryAddress": {"type": "string", "description": "Where the food is delivered. Must be non-empty."}
    },
    "required": ["foodName", "quantity", "deliveryAddress"]
}

ID_PARAM = {"type": "string", "description": "Identifier returned when the booking was added."}

def _method(name, kind, description, properties=None, required=None):
    return {
        "name": name,
        "kind": kind,
        "description": description,
        "parameters": {
            "type": "object",
            "properties": properties or {},
            "required": required or []
        }
    }

GET_FOOD_BOOKINGS = _method("getFoodBookings", "query", "List every food booking in insertion order.")

GET_FOOD_BOOKING = _method(
    "getFoodBooking", "query", "Get a single food booking by id.",
    {"id": ID_PARAM}, ["id"]
)

ADD_FOOD_BOOKING = _method(
    "addFoodBooking", "update", "Add a new food booking.",
    {"payload": PAYLOAD_SCHEMA}, ["payload"]
)

UPDATE_FOOD_BOOKING = _method(
    "updateFoodBooking", "update", "Replace the payload fields of an existing food booking.",
    {"id": ID_PARAM, "payload": PAYLOAD_SCHEMA}, ["id", "payload"]
)

DELETE_FOOD_BOOKING = _method(
    "deleteFoodBooking", "update", "Delete a food booking and return it.",
    {"id": ID_PARAM}, ["id"]
)

SEARCH_FOOD_BOOKINGS = _method(
    "searchFoodBookings", "query",
    "Case-insensitive substring search over food names and delivery addresses.",
    {"keyword": {"type": "string", "description": "Text to look for. Empty matches everything."}},
    ["keyword"]
)

COUNT_FOOD_BOOKINGS = _method("countFoodBookings", "query", "Count the food bookings.")

GET_FOOD_BOOKINGS_PAGINATED = _method(
    "getFoodBookingsPaginated", "query", "Get one page of food bookings (1-based pages).",
    {
        "page": {"type": "integer", "description": "Page number, starting at 1."},
        "pageSize": {"type": "integer", "description": "Number of bookings per page."}
    },
    ["page", "pageSize"]
)

GET_FOOD_BOOKINGS_BY_TIME_RANGE = _method(
    "getFoodBookingsByTimeRange", "query", "Get food bookings created within [startTime, endTime].",
    {
        "startTime": {"type": "string", "format": "date-time", "description": "Inclusive start (ISO 8601)."},
        "endTime": {"type": "string", "format": "date-time", "description": "Inclusive end (ISO 8601)."}
    },
    ["startTime", "endTime"]
)

MARK_FOOD_BOOKING_AS_DELIVERED = _method(
    "markFoodBookingAsDelivered", "update", "Mark a food booking as delivered.",
    {"id": ID_PARAM}, ["id"]
)

ALL_METHODS = [
    GET_FOOD_BOOKINGS,
    GET_FOOD_BOOKING,
    ADD_FOOD_BOOKING,
    UPDATE_FOOD_BOOKING,
    DELETE_FOOD_BOOKING,
    SEARCH_FOOD_BOOKINGS,
    COUNT_FOOD_BOOKINGS,
    GET_FOOD_BOOKINGS_PAGINATED,
    GET_FOOD_BOOKINGS_BY_TIME_RANGE,
    MARK_FOOD_BOOKING_AS_DELIVERED,
]
