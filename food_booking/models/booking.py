from typing import Any, Optional, Union
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

class FoodBookingPayload(BaseModel):
    """
    Caller-supplied part of a booking (create/update).
    Deliberately lenient: the store decides what is missing or invalid.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    food_name: Optional[Any] = Field(default=None, alias="foodName")
    quantity: Optional[Any] = None
    delivery_address: Optional[Any] = Field(default=None, alias="deliveryAddress")

class FoodBooking(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    food_name: str = Field(alias="foodName")
    quantity: Union[int, float]
    delivery_address: str = Field(alias="deliveryAddress")
    created_at: datetime = Field(alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    # Only populated when delivery tracking is enabled
    delivered: Optional[bool] = None

    def to_api(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
