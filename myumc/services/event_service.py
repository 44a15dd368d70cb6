"""
Event service: church events, registrations with wait-listing, reminders and
recurrence expansion.
"""
import logging
import uuid
from datetime import datetime, timedelta
from itertools import islice
from typing import Optional, List

from dateutil import rrule
from sqlalchemy.orm import Session

from myumc.db import models, schemas
from myumc.db.models import now_utc, ensure_aware
from myumc.db.repositories import common
from myumc.db.repositories import events as event_repo
from myumc.services.errors import NotFoundError, InvalidOperationError

logger = logging.getLogger(__name__)

_FREQUENCIES = {
    schemas.RecurrenceType.daily.value: rrule.DAILY,
    schemas.RecurrenceType.weekly.value: rrule.WEEKLY,
    schemas.RecurrenceType.monthly.value: rrule.MONTHLY,
    schemas.RecurrenceType.yearly.value: rrule.YEARLY,
}

_DATETIME_FIELDS = ("start_date", "end_date", "recurrence_end_date", "registration_deadline")
_ACTIVE_STATUSES = (
    schemas.RegistrationStatus.pending.value,
    schemas.RegistrationStatus.confirmed.value,
    schemas.RegistrationStatus.wait_listed.value,
)


class EventService:
    """Service class for event scheduling and registration."""

    def __init__(self, db: Session):
        self.db = db

    def get_event(self, event_id: uuid.UUID) -> models.ChurchEvent:
        event = event_repo.get_event(self.db, event_id)
        if event is None:
            raise NotFoundError(f"Event with ID {event_id} not found")
        return event

    def list_events(
        self,
        *,
        starting_after: Optional[datetime] = None,
        organization_id: Optional[uuid.UUID] = None,
        include_unpublished: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> List[models.ChurchEvent]:
        return event_repo.get_events(
            self.db,
            starting_after=ensure_aware(starting_after),
            organization_id=organization_id,
            include_unpublished=include_unpublished,
            skip=skip,
            limit=limit,
        )

    @staticmethod
    def _validate_window(event: models.ChurchEvent) -> None:
        if ensure_aware(event.end_date) < ensure_aware(event.start_date):
            raise InvalidOperationError("Event end_date must not be before start_date")
        if event.is_recurring and not event.recurrence_type:
            raise InvalidOperationError("Recurring events need a recurrence_type")

    def create_event(self, data: schemas.EventCreate, organizer_id: uuid.UUID, organization_id: Optional[uuid.UUID] = None) -> models.ChurchEvent:
        values = data.model_dump()
        for key in _DATETIME_FIELDS:
            values[key] = ensure_aware(values[key])
        values["status"] = data.status.value
        values["recurrence_type"] = data.recurrence_type.value if data.recurrence_type else None
        event = models.ChurchEvent(**values, organizer_id=organizer_id, organization_id=organization_id)
        self._validate_window(event)
        event = common.save(self.db, event)
        logger.info("Created event %s", event.id)
        return event

    def update_event(self, event_id: uuid.UUID, data: schemas.EventUpdate) -> models.ChurchEvent:
        event = self.get_event(event_id)
        changes = data.model_dump(exclude_unset=True)
        for key, value in changes.items():
            if key in _DATETIME_FIELDS:
                changes[key] = ensure_aware(value)
            elif key in ("status", "recurrence_type") and value is not None:
                changes[key] = getattr(value, "value", value)
        common.apply_changes(event, changes)
        try:
            self._validate_window(event)
        except InvalidOperationError:
            self.db.rollback()
            raise
        event = common.save(self.db, event)
        logger.info("Updated event %s", event_id)
        return event

    def delete_event(self, event_id: uuid.UUID) -> None:
        event = self.get_event(event_id)
        self.db.delete(event)
        self.db.commit()
        logger.info("Deleted event %s", event_id)

    # Registration

    def register(self, event_id: uuid.UUID, user_id: uuid.UUID, notes: Optional[str] = None) -> models.EventRegistration:
        """Register a user, wait-listing them when the event is full.

        A previously cancelled registration is reactivated rather than duplicated.
        """
        event = self.get_event(event_id)
        now = now_utc()
        if event.status != schemas.EventStatus.published.value:
            raise InvalidOperationError("Event is not open for registration")
        if not event.requires_registration:
            raise InvalidOperationError("Event does not require registration")
        deadline = ensure_aware(event.registration_deadline)
        if deadline is not None and now > deadline:
            raise InvalidOperationError("Registration deadline has passed")

        registration = event_repo.get_registration(self.db, event_id, user_id)
        if registration is not None and registration.status in _ACTIVE_STATUSES:
            raise InvalidOperationError("User is already registered for this event")

        full = event.max_attendees > 0 and event_repo.count_confirmed(self.db, event_id) >= event.max_attendees
        status = schemas.RegistrationStatus.wait_listed if full else schemas.RegistrationStatus.confirmed
        payment_status = "Pending" if (event.registration_fee or 0) > 0 else "NotRequired"

        if registration is None:
            registration = models.EventRegistration(event_id=event_id, user_id=user_id)
        registration.status = status.value
        registration.registered_at = now
        registration.notes = notes
        registration.payment_status = payment_status
        registration.payment_reference = None
        registration = common.save(self.db, registration)
        logger.info("Registered user %s for event %s as %s", user_id, event_id, registration.status)
        return registration

    def cancel_registration(self, event_id: uuid.UUID, user_id: uuid.UUID) -> Optional[models.EventRegistration]:
        """Cancel a registration; returns the wait-listed registration promoted into the freed seat, if any."""
        event = self.get_event(event_id)
        registration = event_repo.get_registration(self.db, event_id, user_id)
        if registration is None or registration.status not in _ACTIVE_STATUSES:
            raise NotFoundError("No active registration for this event")

        held_seat = registration.status != schemas.RegistrationStatus.wait_listed.value
        registration.status = schemas.RegistrationStatus.cancelled.value
        self.db.flush()

        promoted = None
        if held_seat and event.max_attendees > 0:
            promoted = event_repo.first_wait_listed(self.db, event_id)
            if promoted is not None:
                promoted.status = schemas.RegistrationStatus.confirmed.value
        self.db.commit()
        logger.info("Cancelled registration of user %s for event %s", user_id, event_id)
        if promoted is not None:
            self.db.refresh(promoted)
            logger.info("Promoted user %s from wait list for event %s", promoted.user_id, event_id)
        return promoted

    def list_registrations(self, event_id: uuid.UUID) -> List[models.EventRegistration]:
        self.get_event(event_id)
        return event_repo.get_registrations(self.db, event_id)

    # Reminders

    def add_reminder(self, event_id: uuid.UUID, data: schemas.EventReminderCreate) -> models.EventReminder:
        self.get_event(event_id)
        reminder = models.EventReminder(
            event_id=event_id,
            time_before_event=data.time_before_event,
            reminder_type=data.reminder_type.value,
            message=data.message,
            sent=False,
        )
        return common.save(self.db, reminder)

    def due_reminders(self, now: Optional[datetime] = None) -> List[models.EventReminder]:
        """Unsent reminders whose send time has arrived."""
        now = ensure_aware(now) or now_utc()
        due = []
        for reminder in event_repo.get_unsent_reminders(self.db):
            start = ensure_aware(reminder.event.start_date)
            if start - timedelta(minutes=reminder.time_before_event) <= now:
                due.append(reminder)
        return due

    def mark_reminder_sent(self, reminder_id: uuid.UUID) -> models.EventReminder:
        reminder = event_repo.get_reminder(self.db, reminder_id)
        if reminder is None:
            raise NotFoundError(f"Reminder with ID {reminder_id} not found")
        reminder.sent = True
        reminder.sent_at = now_utc()
        return common.save(self.db, reminder)

    # Recurrence

    @staticmethod
    def occurrences(event: models.ChurchEvent, limit: int = 10) -> List[datetime]:
        """Expand the event's recurrence rule into start datetimes."""
        start = ensure_aware(event.start_date)
        if not event.is_recurring or not event.recurrence_type:
            return [start]
        count = limit
        if event.recurrence_occurrences:
            count = min(limit, event.recurrence_occurrences)
        kwargs = {}
        if event.recurrence_type == schemas.RecurrenceType.weekly.value and event.recurrence_days_of_week:
            kwargs["byweekday"] = sorted(set(event.recurrence_days_of_week))
        rule = rrule.rrule(
            _FREQUENCIES[event.recurrence_type],
            dtstart=start,
            interval=event.recurrence_interval or 1,
            until=ensure_aware(event.recurrence_end_date),
            count=None if event.recurrence_end_date else count,
            **kwargs,
        )
        return list(islice(rule, count))
