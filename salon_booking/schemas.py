# salon_booking/schemas.py

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class AppointmentUpdate(BaseModel):
    """PATCH body. Every field is optional; range checks happen in the use case
    so the messages stay the same whichever surface calls it."""

    model_config = ConfigDict(populate_by_name=True)

    date_time: Optional[str] = Field(default=None, alias="dateTime")
    duration: Optional[int] = None
    stylist_id: Optional[str] = Field(default=None, alias="stylistId")
    service_ids: Optional[List[str]] = Field(default=None, alias="serviceIds")
    notes: Optional[str] = None
    reason: Optional[str] = None
    notify_client: Optional[bool] = Field(default=None, alias="notifyClient")

    def has_field(self, name: str) -> bool:
        # stylistId: null is a real request (unassign), so look at what was sent
        if name == "stylist_id":
            return "stylist_id" in self.model_fields_set
        return getattr(self, name) is not None


class AppointmentPublic(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    date_time: str = Field(alias="dateTime")
    duration: int
    confirmed_at: Optional[str] = Field(default=None, alias="confirmedAt")
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")
    user_id: str = Field(alias="userId")
    client_id: str = Field(alias="clientId")
    stylist_id: Optional[str] = Field(default=None, alias="stylistId")
    schedule_id: str = Field(alias="scheduleId")
    status_id: str = Field(alias="statusId")
    service_ids: List[str] = Field(alias="serviceIds")
    notes: Optional[str] = None
