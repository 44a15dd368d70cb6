"""
Member service: member records, giving, membership history and event sign-up.
"""
import logging
import uuid
from typing import Optional, List

from sqlalchemy.orm import Session

from myumc.db import models, schemas
from myumc.db.models import now_utc, ensure_aware
from myumc.db.repositories import common
from myumc.db.repositories import events as event_repo
from myumc.db.repositories import members as member_repo
from myumc.db.repositories import users as user_repo
from myumc.services.errors import NotFoundError, InvalidOperationError, ConflictError
from myumc.utils.runtime import sanitize_for_log

logger = logging.getLogger(__name__)


class MemberService:
    """Service class for member operations."""

    def __init__(self, db: Session):
        self.db = db

    def get_member(self, member_id: uuid.UUID) -> models.Member:
        member = member_repo.get_member(self.db, member_id)
        if member is None:
            raise NotFoundError(f"Member {member_id} not found")
        return member

    def get_member_by_user(self, user_id: uuid.UUID) -> models.Member:
        member = member_repo.get_member_by_user(self.db, user_id)
        if member is None:
            raise NotFoundError(f"No member record for user {user_id}")
        return member

    def list_members(self, organization_id: Optional[uuid.UUID] = None, skip: int = 0, limit: int = 100) -> List[models.Member]:
        return member_repo.get_members(self.db, organization_id=organization_id, skip=skip, limit=limit)

    def create_member(self, data: schemas.MemberCreate, user_id: uuid.UUID) -> models.Member:
        """Enrol a user as an active member starting now."""
        user = user_repo.get_user(self.db, user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        if member_repo.get_member_by_user(self.db, user_id) is not None:
            raise ConflictError("User already has a member record")

        member = models.Member(
            user_id=user_id,
            organization_id=user.organization_id,
            address=data.address,
            date_of_birth=data.date_of_birth,
            emergency_contact=data.emergency_contact,
            emergency_contact_phone=data.emergency_contact_phone,
            member_since=now_utc(),
            status=schemas.MembershipStatus.active.value,
        )
        member = common.save(self.db, member)
        logger.info("Created member %s for user %s", member.id, user_id)
        return member

    def update_member(self, member_id: uuid.UUID, data: schemas.MemberUpdate) -> models.Member:
        member = self.get_member(member_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("status") is not None:
            changes["status"] = schemas.MembershipStatus(changes["status"]).value
        common.apply_changes(member, changes)
        member = common.save(self.db, member)
        logger.info("Updated member %s", member_id)
        return member

    def delete_member(self, member_id: uuid.UUID) -> None:
        member = self.get_member(member_id)
        member_repo.delete_member(self.db, member)
        logger.info("Deleted member %s", member_id)

    def add_giving_record(self, member_id: uuid.UUID, data: schemas.GivingRecordCreate) -> models.GivingRecord:
        self.get_member(member_id)
        record = models.GivingRecord(
            member_id=member_id,
            amount=data.amount,
            purpose=data.purpose,
            payment_method=data.payment_method.value,
            transaction_reference=data.transaction_reference,
            date=now_utc(),
        )
        record = common.save(self.db, record)
        logger.info(
            "Recorded %s giving of %s for member %s",
            record.payment_method, record.amount, member_id,
        )
        return record

    def list_giving_records(self, member_id: uuid.UUID) -> List[models.GivingRecord]:
        self.get_member(member_id)
        return member_repo.get_giving_records(self.db, member_id)

    def add_membership_history(self, member_id: uuid.UUID, data: schemas.MembershipHistoryCreate) -> models.MembershipHistory:
        self.get_member(member_id)
        start = ensure_aware(data.start_date)
        end = ensure_aware(data.end_date)
        if end is not None and end < start:
            raise InvalidOperationError("end_date must not be before start_date")
        history = models.MembershipHistory(
            member_id=member_id,
            previous_church=data.previous_church,
            reason=data.reason,
            start_date=start,
            end_date=end,
        )
        history = common.save(self.db, history)
        logger.info(
            "Added membership history for member %s (previous church: %s)",
            member_id, sanitize_for_log(data.previous_church),
        )
        return history

    def register_for_event(self, member_id: uuid.UUID, event_id: uuid.UUID) -> models.EventRegistration:
        """Confirm a seat for the member's user; a full event is rejected rather than wait-listed.

        A cancelled registration is reactivated in place.
        """
        member = self.get_member(member_id)
        event = event_repo.get_event(self.db, event_id)
        if event is None:
            raise NotFoundError(f"Event {event_id} not found")
        if event.status != schemas.EventStatus.published.value:
            raise InvalidOperationError("Event is not open for registration")
        registration = event_repo.get_registration(self.db, event_id, member.user_id)
        if registration is not None and registration.status != schemas.RegistrationStatus.cancelled.value:
            raise InvalidOperationError("Member is already registered for this event")
        if event.requires_registration and event.max_attendees > 0:
            if event_repo.count_confirmed(self.db, event_id) >= event.max_attendees:
                raise InvalidOperationError("Event is at full capacity")

        if registration is None:
            registration = models.EventRegistration(event_id=event_id, user_id=member.user_id)
        registration.status = schemas.RegistrationStatus.confirmed.value
        registration.registered_at = now_utc()
        registration = common.save(self.db, registration)
        logger.info("Registered member %s for event %s", member_id, event_id)
        return registration
