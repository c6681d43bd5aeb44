# salon_booking/models.py

import uuid
from typing import Optional, List
from datetime import datetime

from sqlalchemy.types import JSON, DateTime
from sqlmodel import SQLModel, Field, Column


def new_id() -> str:
    return str(uuid.uuid4())


class User(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    role: str  # admin, client or stylist


class Stylist(SQLModel, table=True):
    # Same id as the stylist's User row so a token subject can act as the stylist.
    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    is_active: bool = True


class Service(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    duration: int  # minutes
    price: int  # cents


class AppointmentStatus(SQLModel, table=True):
    __tablename__ = "appointment_status"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str = Field(index=True, unique=True, max_length=50)
    description: Optional[str] = Field(default=None, max_length=200)
    kind: str = "active"  # active or terminal


class Appointment(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)

    # All instants are stored timezone-aware, in UTC.
    starts_at: datetime = Field(sa_column=Column(DateTime(timezone=True), index=True, nullable=False))
    # starts_at + duration, kept for overlap queries
    ends_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    duration: int

    user_id: str = Field(index=True)
    client_id: str = Field(index=True)
    schedule_id: str
    status_id: str = Field(foreign_key="appointment_status.id")
    stylist_id: Optional[str] = Field(default=None, index=True)
    service_ids: List[str] = Field(sa_column=Column(JSON))

    confirmed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True), nullable=True))
    notes: Optional[str] = None
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
