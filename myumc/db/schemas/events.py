import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional, List
from pydantic import BaseModel, ConfigDict, Field


class EventStatus(str, Enum):
    draft = "Draft"
    published = "Published"
    cancelled = "Cancelled"
    completed = "Completed"


class RecurrenceType(str, Enum):
    daily = "Daily"
    weekly = "Weekly"
    monthly = "Monthly"
    yearly = "Yearly"


class RegistrationStatus(str, Enum):
    pending = "Pending"
    confirmed = "Confirmed"
    cancelled = "Cancelled"
    wait_listed = "WaitListed"


# 0 = Monday .. 6 = Sunday
Weekday = Annotated[int, Field(ge=0, le=6)]


class ReminderType(str, Enum):
    email = "Email"
    sms = "SMS"
    push = "PushNotification"


class EventBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    location: Optional[str] = Field(default=None, max_length=500)
    virtual_meeting_url: Optional[str] = None
    is_virtual: bool = False
    is_recurring: bool = False
    recurrence_type: Optional[RecurrenceType] = None
    recurrence_interval: int = Field(default=1, ge=1)
    recurrence_days_of_week: Optional[List[Weekday]] = None
    recurrence_end_date: Optional[datetime] = None
    recurrence_occurrences: Optional[int] = Field(default=None, ge=1)
    max_attendees: int = Field(default=0, ge=0)
    registration_fee: Decimal = Field(default=Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    registration_deadline: Optional[datetime] = None
    requires_registration: bool = True
    status: EventStatus = EventStatus.draft


class EventCreate(EventBase):
    pass


class EventUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    location: Optional[str] = Field(default=None, max_length=500)
    virtual_meeting_url: Optional[str] = None
    is_virtual: Optional[bool] = None
    is_recurring: Optional[bool] = None
    recurrence_type: Optional[RecurrenceType] = None
    recurrence_interval: Optional[int] = Field(default=None, ge=1)
    recurrence_days_of_week: Optional[List[Weekday]] = None
    recurrence_end_date: Optional[datetime] = None
    recurrence_occurrences: Optional[int] = Field(default=None, ge=1)
    max_attendees: Optional[int] = Field(default=None, ge=0)
    registration_fee: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    registration_deadline: Optional[datetime] = None
    requires_registration: Optional[bool] = None
    status: Optional[EventStatus] = None


class Event(EventBase):
    id: uuid.UUID
    organization_id: Optional[uuid.UUID] = None
    organizer_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class EventRegistrationCreate(BaseModel):
    notes: Optional[str] = Field(default=None, max_length=1000)


class EventRegistration(BaseModel):
    id: uuid.UUID
    event_id: uuid.UUID
    user_id: uuid.UUID
    status: RegistrationStatus
    registered_at: datetime
    notes: Optional[str] = None
    payment_status: str
    payment_reference: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class EventReminderCreate(BaseModel):
    time_before_event: int = Field(gt=0, description="Minutes before the event starts")
    reminder_type: ReminderType = ReminderType.email
    message: Optional[str] = Field(default=None, max_length=1000)


class EventReminder(EventReminderCreate):
    id: uuid.UUID
    event_id: uuid.UUID
    sent: bool
    sent_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)
