import uuid
from sqlalchemy import (
    Column, String, DateTime, Boolean, Integer, Text, Numeric, ForeignKey, Index, UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship
from .base import Base, now_utc


class ChurchEvent(Base):
    __tablename__ = 'church_events'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id = Column(UUID(as_uuid=True), ForeignKey('organizations.id', ondelete='SET NULL'), nullable=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    location = Column(String(500), nullable=True)
    virtual_meeting_url = Column(String, nullable=True)
    is_virtual = Column(Boolean, nullable=False, default=False)
    is_recurring = Column(Boolean, nullable=False, default=False)
    # Daily|Weekly|Monthly|Yearly
    recurrence_type = Column(String(10), nullable=True)
    recurrence_interval = Column(Integer, nullable=False, default=1)
    recurrence_days_of_week = Column(JSONB, nullable=True)
    recurrence_end_date = Column(DateTime(timezone=True), nullable=True)
    recurrence_occurrences = Column(Integer, nullable=True)
    # 0 means unlimited
    max_attendees = Column(Integer, nullable=False, default=0)
    registration_fee = Column(Numeric(10, 2), nullable=False, default=0)
    registration_deadline = Column(DateTime(timezone=True), nullable=True)
    requires_registration = Column(Boolean, nullable=False, default=True)
    # Draft|Published|Cancelled|Completed
    status = Column(String(20), nullable=False, default='Draft')
    organizer_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    registrations = relationship(
        "EventRegistration", back_populates="event", cascade="all, delete-orphan",
        order_by="EventRegistration.registered_at",
    )
    reminders = relationship("EventReminder", back_populates="event", cascade="all, delete-orphan")

    __table_args__ = (
        Index('ix_church_events_organization_id_start_date', 'organization_id', 'start_date'),
    )


class EventRegistration(Base):
    __tablename__ = 'event_registrations'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(UUID(as_uuid=True), ForeignKey('church_events.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    # Pending|Confirmed|Cancelled|WaitListed
    status = Column(String(20), nullable=False, default='Pending')
    registered_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)
    notes = Column(String(1000), nullable=True)
    # NotRequired|Pending|Completed|Failed|Refunded
    payment_status = Column(String(20), nullable=False, default='NotRequired')
    payment_reference = Column(String(100), nullable=True)

    event = relationship("ChurchEvent", back_populates="registrations")

    __table_args__ = (
        UniqueConstraint('event_id', 'user_id', name='uq_event_registrations_event_user'),
    )


class EventReminder(Base):
    __tablename__ = 'event_reminders'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(UUID(as_uuid=True), ForeignKey('church_events.id', ondelete='CASCADE'), nullable=False, index=True)
    # minutes before the event start
    time_before_event = Column(Integer, nullable=False)
    # Email|SMS|PushNotification
    reminder_type = Column(String(20), nullable=False, default='Email')
    message = Column(String(1000), nullable=True)
    sent = Column(Boolean, nullable=False, default=False)
    sent_at = Column(DateTime(timezone=True), nullable=True)

    event = relationship("ChurchEvent", back_populates="reminders")
