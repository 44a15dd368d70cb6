import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field


class MembershipStatus(str, Enum):
    active = "Active"
    inactive = "Inactive"
    suspended = "Suspended"
    transferred = "Transferred"


class PaymentMethod(str, Enum):
    ecocash = "EcoCash"
    onemoney = "OneMoney"
    paynow = "Paynow"
    bank_transfer = "BankTransfer"
    cash = "Cash"


class MemberBase(BaseModel):
    address: Optional[str] = Field(default=None, max_length=500)
    date_of_birth: Optional[date] = None
    emergency_contact: Optional[str] = Field(default=None, max_length=200)
    emergency_contact_phone: Optional[str] = Field(default=None, max_length=32)


class MemberCreate(MemberBase):
    # Defaults to the caller; managers may enrol someone else
    user_id: Optional[uuid.UUID] = None


class MemberUpdate(MemberBase):
    status: Optional[MembershipStatus] = None


class Member(MemberBase):
    id: uuid.UUID
    user_id: uuid.UUID
    organization_id: Optional[uuid.UUID] = None
    member_since: datetime
    status: MembershipStatus
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class GivingRecordCreate(BaseModel):
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    purpose: Optional[str] = Field(default=None, max_length=200)
    payment_method: PaymentMethod
    transaction_reference: Optional[str] = Field(default=None, max_length=100)


class GivingRecord(GivingRecordCreate):
    id: uuid.UUID
    member_id: uuid.UUID
    date: datetime
    model_config = ConfigDict(from_attributes=True)


class MembershipHistoryCreate(BaseModel):
    previous_church: Optional[str] = Field(default=None, max_length=200)
    reason: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None


class MembershipHistory(MembershipHistoryCreate):
    id: uuid.UUID
    member_id: uuid.UUID
    model_config = ConfigDict(from_attributes=True)


class MemberDetail(Member):
    giving_records: List[GivingRecord] = []
    membership_history: List[MembershipHistory] = []
