import uuid
from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from .base import Base, now_utc


class User(Base):
    __tablename__ = 'users'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(256), nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone_number = Column(String(32), nullable=True)
    # Administrator|Developer|Guest|Member|ChurchLeader
    user_type = Column(String(32), nullable=False, default='Member')
    organization_id = Column(UUID(as_uuid=True), ForeignKey('organizations.id', ondelete='SET NULL'), nullable=True, index=True)
    profile_picture_url = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    preferred_language = Column(String(8), nullable=False, default='en')
    # 'local' (password hash) or 'cognito' (external_subject holds the pool sub)
    auth_provider = Column(String(32), nullable=False, default='local')
    external_subject = Column(String, nullable=True, index=True)
    refresh_token_id = Column(String(32), nullable=True, index=True)
    refresh_token_hash = Column(String, nullable=True)
    refresh_token_expires_at = Column(DateTime(timezone=True), nullable=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    organization = relationship("Organization", foreign_keys=[organization_id])

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
