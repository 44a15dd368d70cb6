"""
Published church content.

Sermons, blog posts and announcements share the ``content`` table and are
told apart by ``content_type`` (single-table inheritance).
"""
import uuid
from sqlalchemy import (
    Column, String, DateTime, Boolean, Integer, Float, Text, ForeignKey, Index,
    UniqueConstraint, CheckConstraint,
)
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship
from .base import Base, now_utc


CONTENT_TYPE_SERMON = 'sermon'
CONTENT_TYPE_BLOG_POST = 'blog_post'
CONTENT_TYPE_ANNOUNCEMENT = 'announcement'


class Content(Base):
    __tablename__ = 'content'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    content_type = Column(String(20), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(String(1000), nullable=True)
    author_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    organization_id = Column(UUID(as_uuid=True), ForeignKey('organizations.id', ondelete='SET NULL'), nullable=True, index=True)
    is_published = Column(Boolean, nullable=False, default=False)
    published_at = Column(DateTime(timezone=True), nullable=True)
    tags = Column(JSONB, nullable=False, default=list)
    # Sermons and blog posts count views; announcements leave it at zero
    views = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    comments = relationship("Comment", back_populates="content", cascade="all, delete-orphan")

    __mapper_args__ = {
        'polymorphic_on': content_type,
        'polymorphic_identity': 'content',
    }


class Sermon(Content):
    video_url = Column(String, nullable=True)
    audio_url = Column(String, nullable=True)
    transcript_url = Column(String, nullable=True)
    duration_seconds = Column(Integer, nullable=True)
    preacher_name = Column(String(200), nullable=True)
    sermon_date = Column(DateTime(timezone=True), nullable=True)
    scripture = Column(String(200), nullable=True)
    downloads = Column(Integer, nullable=True, default=0)
    rating = Column(Float, nullable=True, default=0.0)

    ratings = relationship("SermonRating", back_populates="sermon", cascade="all, delete-orphan")

    __mapper_args__ = {'polymorphic_identity': CONTENT_TYPE_SERMON}


class BlogPost(Content):
    body = Column(Text, nullable=True)
    featured_image_url = Column(String, nullable=True)
    read_time = Column(Integer, nullable=True)
    like_count = Column(Integer, nullable=True, default=0)

    likes = relationship("BlogPostLike", back_populates="blog_post", cascade="all, delete-orphan")

    __mapper_args__ = {'polymorphic_identity': CONTENT_TYPE_BLOG_POST}


class Announcement(Content):
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    # Low|Medium|High|Urgent
    priority = Column(String(10), nullable=True, default='Medium')
    # Numeric rank of priority so ordering happens in SQL
    priority_rank = Column(Integer, nullable=True, default=1)
    requires_acknowledgement = Column(Boolean, nullable=True, default=False)

    acknowledgements = relationship(
        "AnnouncementAcknowledgement", back_populates="announcement", cascade="all, delete-orphan"
    )

    __mapper_args__ = {'polymorphic_identity': CONTENT_TYPE_ANNOUNCEMENT}


class Comment(Base):
    __tablename__ = 'comments'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    content_id = Column(UUID(as_uuid=True), ForeignKey('content.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    text = Column(String(2000), nullable=False)
    parent_comment_id = Column(UUID(as_uuid=True), ForeignKey('comments.id', ondelete='CASCADE'), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    content = relationship("Content", back_populates="comments")

    __table_args__ = (
        Index('ix_comments_content_id_created_at', 'content_id', 'created_at'),
    )


class SermonRating(Base):
    __tablename__ = 'sermon_ratings'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    sermon_id = Column(UUID(as_uuid=True), ForeignKey('content.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    rating = Column(Integer, nullable=False)
    review = Column(String(1000), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    sermon = relationship("Sermon", back_populates="ratings")

    __table_args__ = (
        CheckConstraint('rating BETWEEN 1 AND 5', name='ck_sermon_ratings_rating_range'),
    )


class BlogPostLike(Base):
    __tablename__ = 'blog_post_likes'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    blog_post_id = Column(UUID(as_uuid=True), ForeignKey('content.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    blog_post = relationship("BlogPost", back_populates="likes")

    __table_args__ = (
        UniqueConstraint('blog_post_id', 'user_id', name='uq_blog_post_likes_post_user'),
    )


class AnnouncementAcknowledgement(Base):
    __tablename__ = 'announcement_acknowledgements'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    announcement_id = Column(UUID(as_uuid=True), ForeignKey('content.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    acknowledged_at = Column(DateTime(timezone=True), default=now_utc)

    announcement = relationship("Announcement", back_populates="acknowledgements")

    __table_args__ = (
        UniqueConstraint('announcement_id', 'user_id', name='uq_announcement_ack_announcement_user'),
    )
