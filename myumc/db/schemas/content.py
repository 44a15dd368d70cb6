import uuid
from datetime import datetime
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field


class AnnouncementPriority(str, Enum):
    low = "Low"
    medium = "Medium"
    high = "High"
    urgent = "Urgent"


PRIORITY_RANK = {
    AnnouncementPriority.low: 0,
    AnnouncementPriority.medium: 1,
    AnnouncementPriority.high: 2,
    AnnouncementPriority.urgent: 3,
}


class ContentBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    tags: List[str] = []
    is_published: bool = False


class ContentItem(ContentBase):
    id: uuid.UUID
    content_type: str
    author_id: Optional[uuid.UUID] = None
    organization_id: Optional[uuid.UUID] = None
    published_at: Optional[datetime] = None
    views: int = 0
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class SermonCreate(ContentBase):
    video_url: Optional[str] = None
    audio_url: Optional[str] = None
    transcript_url: Optional[str] = None
    duration_seconds: Optional[int] = Field(default=None, ge=0)
    preacher_name: Optional[str] = Field(default=None, max_length=200)
    sermon_date: datetime
    scripture: Optional[str] = Field(default=None, max_length=200)


class Sermon(ContentItem):
    video_url: Optional[str] = None
    audio_url: Optional[str] = None
    transcript_url: Optional[str] = None
    duration_seconds: Optional[int] = None
    preacher_name: Optional[str] = None
    sermon_date: Optional[datetime] = None
    scripture: Optional[str] = None
    downloads: int = 0
    rating: float = 0.0


class BlogPostCreate(ContentBase):
    body: str = Field(min_length=1)
    featured_image_url: Optional[str] = None
    read_time: Optional[int] = Field(default=None, ge=0)


class BlogPost(ContentItem):
    body: Optional[str] = None
    featured_image_url: Optional[str] = None
    read_time: Optional[int] = None
    like_count: int = 0


class AnnouncementCreate(ContentBase):
    start_date: datetime
    end_date: datetime
    priority: AnnouncementPriority = AnnouncementPriority.medium
    requires_acknowledgement: bool = False


class Announcement(ContentItem):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    priority: AnnouncementPriority = AnnouncementPriority.medium
    requires_acknowledgement: bool = False


class CommentCreate(BaseModel):
    text: str = Field(min_length=1, max_length=2000)
    parent_comment_id: Optional[uuid.UUID] = None


class Comment(CommentCreate):
    id: uuid.UUID
    content_id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class SermonRatingCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    review: Optional[str] = Field(default=None, max_length=1000)


class SermonRating(SermonRatingCreate):
    id: uuid.UUID
    sermon_id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class BlogPostLike(BaseModel):
    id: uuid.UUID
    blog_post_id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class AnnouncementAcknowledgement(BaseModel):
    id: uuid.UUID
    announcement_id: uuid.UUID
    user_id: uuid.UUID
    acknowledged_at: datetime
    model_config = ConfigDict(from_attributes=True)
