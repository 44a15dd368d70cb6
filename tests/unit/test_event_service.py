from datetime import datetime, timedelta, UTC
from decimal import Decimal

import pytest

from myumc.db import schemas
from myumc.services.errors import InvalidOperationError, NotFoundError
from myumc.services.event_service import EventService


def _event(service, organizer, **overrides):
    start = datetime.now(UTC) + timedelta(days=7)
    data = {
        "title": "Youth Retreat",
        "start_date": start,
        "end_date": start + timedelta(hours=3),
        "status": schemas.EventStatus.published,
    }
    data.update(overrides)
    return service.create_event(schemas.EventCreate(**data), organizer.id)


class TestEventLifecycle:
    def test_end_before_start_rejected(self, db_session, user_factory):
        organizer = user_factory(role="ChurchLeader")
        start = datetime.now(UTC) + timedelta(days=1)
        with pytest.raises(InvalidOperationError):
            _event(EventService(db_session), organizer, start_date=start, end_date=start - timedelta(hours=1))

    def test_recurring_event_needs_type(self, db_session, user_factory):
        organizer = user_factory(role="ChurchLeader")
        with pytest.raises(InvalidOperationError, match="recurrence_type"):
            _event(EventService(db_session), organizer, is_recurring=True)

    def test_list_hides_drafts_unless_requested(self, db_session, user_factory):
        organizer = user_factory(role="ChurchLeader")
        service = EventService(db_session)
        _event(service, organizer, title="Published")
        _event(service, organizer, title="Draft", status=schemas.EventStatus.draft)
        assert [e.title for e in service.list_events()] == ["Published"]
        assert len(service.list_events(include_unpublished=True)) == 2

    def test_update_rejects_inverted_window(self, db_session, user_factory):
        organizer = user_factory(role="ChurchLeader")
        service = EventService(db_session)
        event = _event(service, organizer)
        with pytest.raises(InvalidOperationError):
            service.update_event(event.id, schemas.EventUpdate(end_date=event.start_date - timedelta(days=1)))
        db_session.expire_all()
        assert service.get_event(event.id).title == "Youth Retreat"

    def test_delete_missing_event(self, db_session):
        import uuid
        with pytest.raises(NotFoundError):
            EventService(db_session).delete_event(uuid.uuid4())


class TestRegistration:
    def test_full_event_wait_lists_and_promotes_on_cancel(self, db_session, user_factory):
        organizer = user_factory(role="ChurchLeader")
        first, second, third = user_factory(), user_factory(), user_factory()
        service = EventService(db_session)
        event = _event(service, organizer, max_attendees=2)

        assert service.register(event.id, first.id).status == "Confirmed"
        assert service.register(event.id, second.id).status == "Confirmed"
        assert service.register(event.id, third.id).status == "WaitListed"

        promoted = service.cancel_registration(event.id, first.id)
        assert promoted is not None
        assert promoted.user_id == third.id
        assert promoted.status == "Confirmed"

    def test_cancelling_wait_listed_promotes_nobody(self, db_session, user_factory):
        organizer = user_factory(role="ChurchLeader")
        first, second = user_factory(), user_factory()
        service = EventService(db_session)
        event = _event(service, organizer, max_attendees=1)
        service.register(event.id, first.id)
        service.register(event.id, second.id)
        assert service.cancel_registration(event.id, second.id) is None

    def test_duplicate_registration_rejected_but_cancelled_can_reregister(self, db_session, user_factory):
        organizer = user_factory(role="ChurchLeader")
        user = user_factory()
        service = EventService(db_session)
        event = _event(service, organizer)
        service.register(event.id, user.id)
        with pytest.raises(InvalidOperationError, match="already registered"):
            service.register(event.id, user.id)
        service.cancel_registration(event.id, user.id)
        again = service.register(event.id, user.id, notes="Bringing a friend")
        assert again.status == "Confirmed"
        assert again.notes == "Bringing a friend"
        assert len(service.list_registrations(event.id)) == 1

    def test_paid_event_marks_payment_pending(self, db_session, user_factory):
        organizer = user_factory(role="ChurchLeader")
        user = user_factory()
        service = EventService(db_session)
        paid = _event(service, organizer, registration_fee=Decimal("15.00"))
        free = _event(service, organizer, title="Free")
        assert service.register(paid.id, user.id).payment_status == "Pending"
        assert service.register(free.id, user.id).payment_status == "NotRequired"

    def test_registration_rules(self, db_session, user_factory):
        organizer = user_factory(role="ChurchLeader")
        user = user_factory()
        service = EventService(db_session)
        draft = _event(service, organizer, status=schemas.EventStatus.draft)
        walk_in = _event(service, organizer, requires_registration=False)
        closed = _event(service, organizer, registration_deadline=datetime.now(UTC) - timedelta(hours=1))
        with pytest.raises(InvalidOperationError, match="not open"):
            service.register(draft.id, user.id)
        with pytest.raises(InvalidOperationError, match="does not require"):
            service.register(walk_in.id, user.id)
        with pytest.raises(InvalidOperationError, match="deadline"):
            service.register(closed.id, user.id)

    def test_cancel_without_registration(self, db_session, user_factory):
        organizer = user_factory(role="ChurchLeader")
        service = EventService(db_session)
        event = _event(service, organizer)
        with pytest.raises(NotFoundError):
            service.cancel_registration(event.id, organizer.id)


class TestReminders:
    def test_due_reminders_window(self, db_session, user_factory):
        organizer = user_factory(role="ChurchLeader")
        service = EventService(db_session)
        event = _event(service, organizer)
        day_before = service.add_reminder(event.id, schemas.EventReminderCreate(time_before_event=24 * 60))
        hour_before = service.add_reminder(event.id, schemas.EventReminderCreate(time_before_event=60, reminder_type=schemas.ReminderType.sms))

        start = event.start_date.replace(tzinfo=UTC) if event.start_date.tzinfo is None else event.start_date
        now = start - timedelta(hours=2)
        assert [r.id for r in service.due_reminders(now)] == [day_before.id]

        service.mark_reminder_sent(day_before.id)
        later = start - timedelta(minutes=30)
        assert [r.id for r in service.due_reminders(later)] == [hour_before.id]
        # Unsent reminders stay due after the event starts
        assert [r.id for r in service.due_reminders(start + timedelta(minutes=1))] == [hour_before.id]
        service.mark_reminder_sent(hour_before.id)
        assert service.due_reminders(start + timedelta(minutes=1)) == []

    def test_mark_missing_reminder(self, db_session):
        import uuid
        with pytest.raises(NotFoundError):
            EventService(db_session).mark_reminder_sent(uuid.uuid4())


class TestOccurrences:
    def test_non_recurring_event_has_single_occurrence(self, db_session, user_factory):
        organizer = user_factory(role="ChurchLeader")
        event = _event(EventService(db_session), organizer)
        assert len(EventService.occurrences(event)) == 1

    def test_weekly_on_selected_days(self, db_session, user_factory):
        organizer = user_factory(role="ChurchLeader")
        # 2026-01-04 is a Sunday
        start = datetime(2026, 1, 4, 9, 0, tzinfo=UTC)
        event = _event(
            EventService(db_session),
            organizer,
            start_date=start,
            end_date=start + timedelta(hours=2),
            is_recurring=True,
            recurrence_type=schemas.RecurrenceType.weekly,
            recurrence_days_of_week=[2, 6],
        )
        dates = [d.date().isoformat() for d in EventService.occurrences(event, limit=4)]
        assert dates == ["2026-01-04", "2026-01-07", "2026-01-11", "2026-01-14"]

    def test_occurrence_count_and_end_date_limits(self, db_session, user_factory):
        organizer = user_factory(role="ChurchLeader")
        start = datetime(2026, 2, 1, 18, 0, tzinfo=UTC)
        service = EventService(db_session)
        counted = _event(
            service, organizer, start_date=start, end_date=start + timedelta(hours=1),
            is_recurring=True, recurrence_type=schemas.RecurrenceType.daily, recurrence_occurrences=3,
        )
        bounded = _event(
            service, organizer, start_date=start, end_date=start + timedelta(hours=1),
            is_recurring=True, recurrence_type=schemas.RecurrenceType.monthly, recurrence_interval=2,
            recurrence_end_date=datetime(2026, 9, 1, tzinfo=UTC),
        )
        assert len(EventService.occurrences(counted, limit=10)) == 3
        months = [d.month for d in EventService.occurrences(bounded, limit=10)]
        assert months == [2, 4, 6, 8]
