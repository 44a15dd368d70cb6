import uuid
from sqlalchemy import Column, String, DateTime, Date, Text, Numeric, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from .base import Base, now_utc


class Member(Base):
    __tablename__ = 'members'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True)
    organization_id = Column(UUID(as_uuid=True), ForeignKey('organizations.id', ondelete='SET NULL'), nullable=True, index=True)
    address = Column(String(500), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    member_since = Column(DateTime(timezone=True), nullable=False, default=now_utc)
    # Active|Inactive|Suspended|Transferred
    status = Column(String(20), nullable=False, default='Active')
    emergency_contact = Column(String(200), nullable=True)
    emergency_contact_phone = Column(String(32), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    user = relationship("User")
    giving_records = relationship(
        "GivingRecord", back_populates="member", cascade="all, delete-orphan", order_by="GivingRecord.date.desc()"
    )
    membership_history = relationship(
        "MembershipHistory", back_populates="member", cascade="all, delete-orphan"
    )


class GivingRecord(Base):
    __tablename__ = 'giving_records'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    member_id = Column(UUID(as_uuid=True), ForeignKey('members.id', ondelete='CASCADE'), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    purpose = Column(String(200), nullable=True)
    # EcoCash|OneMoney|Paynow|BankTransfer|Cash
    payment_method = Column(String(32), nullable=False)
    transaction_reference = Column(String(100), nullable=True)
    date = Column(DateTime(timezone=True), nullable=False, default=now_utc)

    member = relationship("Member", back_populates="giving_records")

    __table_args__ = (
        Index('ix_giving_records_member_id_date', 'member_id', 'date'),
    )


class MembershipHistory(Base):
    __tablename__ = 'membership_history'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    member_id = Column(UUID(as_uuid=True), ForeignKey('members.id', ondelete='CASCADE'), nullable=False, index=True)
    previous_church = Column(String(200), nullable=True)
    reason = Column(Text, nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=True)

    member = relationship("Member", back_populates="membership_history")
