"""
Content service: sermons, blog posts, announcements and audience interactions.
"""
import logging
import uuid
from datetime import datetime
from typing import Optional, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from myumc.db import models, schemas
from myumc.db.models import now_utc, ensure_aware
from myumc.db.repositories import common
from myumc.db.repositories import content as content_repo
from myumc.services.errors import NotFoundError, InvalidOperationError

logger = logging.getLogger(__name__)


class ContentService:
    """Service class for publishing church content."""

    def __init__(self, db: Session):
        self.db = db

    # Creation

    def _stamp(self, item: models.Content, data: schemas.ContentBase, author_id: uuid.UUID, organization_id: Optional[uuid.UUID]):
        now = now_utc()
        item.title = data.title
        item.description = data.description
        item.tags = list(data.tags or [])
        item.is_published = data.is_published
        item.published_at = now if data.is_published else None
        item.author_id = author_id
        item.organization_id = organization_id
        item.created_at = now
        item.updated_at = now
        return item

    def create_sermon(self, data: schemas.SermonCreate, author_id: uuid.UUID, organization_id: Optional[uuid.UUID] = None) -> models.Sermon:
        sermon = models.Sermon(
            video_url=data.video_url,
            audio_url=data.audio_url,
            transcript_url=data.transcript_url,
            duration_seconds=data.duration_seconds,
            preacher_name=data.preacher_name,
            sermon_date=ensure_aware(data.sermon_date),
            scripture=data.scripture,
            views=0,
            downloads=0,
            rating=0.0,
        )
        sermon = common.save(self.db, self._stamp(sermon, data, author_id, organization_id))
        logger.info("Created sermon %s", sermon.id)
        return sermon

    def create_blog_post(self, data: schemas.BlogPostCreate, author_id: uuid.UUID, organization_id: Optional[uuid.UUID] = None) -> models.BlogPost:
        post = models.BlogPost(
            body=data.body,
            featured_image_url=data.featured_image_url,
            read_time=data.read_time,
            views=0,
            like_count=0,
        )
        post = common.save(self.db, self._stamp(post, data, author_id, organization_id))
        logger.info("Created blog post %s", post.id)
        return post

    def create_announcement(self, data: schemas.AnnouncementCreate, author_id: uuid.UUID, organization_id: Optional[uuid.UUID] = None) -> models.Announcement:
        start = ensure_aware(data.start_date)
        end = ensure_aware(data.end_date)
        if end < start:
            raise InvalidOperationError("Announcement end_date must not be before start_date")
        announcement = models.Announcement(
            start_date=start,
            end_date=end,
            priority=data.priority.value,
            priority_rank=schemas.PRIORITY_RANK[data.priority],
            requires_acknowledgement=data.requires_acknowledgement,
        )
        announcement = common.save(self.db, self._stamp(announcement, data, author_id, organization_id))
        logger.info("Created announcement %s", announcement.id)
        return announcement

    # Lookups

    def get_content(self, content_id: uuid.UUID) -> models.Content:
        item = content_repo.get_content(self.db, content_id)
        if item is None:
            raise NotFoundError(f"Content {content_id} not found")
        return item

    def get_sermon(self, sermon_id: uuid.UUID) -> models.Sermon:
        sermon = content_repo.get_sermon(self.db, sermon_id)
        if sermon is None:
            raise NotFoundError(f"Sermon with ID {sermon_id} not found")
        return sermon

    def get_blog_post(self, blog_post_id: uuid.UUID) -> models.BlogPost:
        post = content_repo.get_blog_post(self.db, blog_post_id)
        if post is None:
            raise NotFoundError(f"Blog post with ID {blog_post_id} not found")
        return post

    def get_announcement(self, announcement_id: uuid.UUID) -> models.Announcement:
        announcement = content_repo.get_announcement(self.db, announcement_id)
        if announcement is None:
            raise NotFoundError(f"Announcement with ID {announcement_id} not found")
        return announcement

    def get_active_announcements(self, now: Optional[datetime] = None, organization_id: Optional[uuid.UUID] = None) -> List[models.Announcement]:
        """Published announcements whose window contains `now`, most urgent first."""
        return content_repo.get_active_announcements(
            self.db, ensure_aware(now) or now_utc(), organization_id=organization_id
        )

    def get_latest_sermons(self, count: int, organization_id: Optional[uuid.UUID] = None) -> List[models.Sermon]:
        return content_repo.get_latest_sermons(self.db, count, organization_id=organization_id)

    def get_popular_blog_posts(self, count: int, organization_id: Optional[uuid.UUID] = None) -> List[models.BlogPost]:
        """Published posts ranked by views plus twice their likes."""
        return content_repo.get_popular_blog_posts(self.db, count, organization_id=organization_id)

    def list_comments(self, content_id: uuid.UUID) -> List[models.Comment]:
        self.get_content(content_id)
        return content_repo.get_comments(self.db, content_id)

    # Interactions

    def add_comment(self, content_id: uuid.UUID, user_id: uuid.UUID, data: schemas.CommentCreate) -> models.Comment:
        self.get_content(content_id)
        if data.parent_comment_id is not None:
            parent = content_repo.get_comment(self.db, data.parent_comment_id)
            if parent is None:
                raise NotFoundError(f"Comment with ID {data.parent_comment_id} not found")
            if parent.content_id != content_id:
                raise InvalidOperationError("Parent comment belongs to different content")
        now = now_utc()
        comment = models.Comment(
            content_id=content_id,
            user_id=user_id,
            text=data.text,
            parent_comment_id=data.parent_comment_id,
            created_at=now,
            updated_at=now,
        )
        comment = common.save(self.db, comment)
        logger.info("Added comment %s to content %s", comment.id, content_id)
        return comment

    def rate_sermon(self, sermon_id: uuid.UUID, user_id: uuid.UUID, data: schemas.SermonRatingCreate) -> models.SermonRating:
        sermon = self.get_sermon(sermon_id)
        prior = content_repo.count_sermon_ratings(self.db, sermon_id)
        if prior:
            sermon.rating = ((sermon.rating or 0.0) * prior + data.rating) / (prior + 1)
        else:
            sermon.rating = float(data.rating)
        rating = models.SermonRating(sermon_id=sermon_id, user_id=user_id, rating=data.rating, review=data.review)
        rating = common.save(self.db, rating)
        logger.info("Added rating %s to sermon %s", rating.id, sermon_id)
        return rating

    def like_blog_post(self, blog_post_id: uuid.UUID, user_id: uuid.UUID) -> models.BlogPostLike:
        post = self.get_blog_post(blog_post_id)
        if content_repo.get_blog_post_like(self.db, blog_post_id, user_id) is not None:
            raise InvalidOperationError(f"User {user_id} has already liked this post")
        post.like_count = (post.like_count or 0) + 1
        like = models.BlogPostLike(blog_post_id=blog_post_id, user_id=user_id)
        try:
            like = common.save(self.db, like)
        except IntegrityError:
            # concurrent like from the same user
            self.db.rollback()
            raise InvalidOperationError(f"User {user_id} has already liked this post")
        logger.info("Added like %s to blog post %s", like.id, blog_post_id)
        return like

    def acknowledge_announcement(self, announcement_id: uuid.UUID, user_id: uuid.UUID) -> models.AnnouncementAcknowledgement:
        announcement = self.get_announcement(announcement_id)
        if not announcement.requires_acknowledgement:
            raise InvalidOperationError("This announcement does not require acknowledgement")
        if content_repo.get_acknowledgement(self.db, announcement_id, user_id) is not None:
            raise InvalidOperationError(f"User {user_id} has already acknowledged this announcement")
        ack = models.AnnouncementAcknowledgement(
            announcement_id=announcement_id, user_id=user_id, acknowledged_at=now_utc()
        )
        try:
            ack = common.save(self.db, ack)
        except IntegrityError:
            self.db.rollback()
            raise InvalidOperationError(f"User {user_id} has already acknowledged this announcement")
        logger.info("Added acknowledgement %s to announcement %s", ack.id, announcement_id)
        return ack

    def record_view(self, content_id: uuid.UUID) -> models.Content:
        item = self.get_content(content_id)
        item.views = (item.views or 0) + 1
        return common.save(self.db, item)

    def record_download(self, sermon_id: uuid.UUID) -> models.Sermon:
        sermon = self.get_sermon(sermon_id)
        sermon.downloads = (sermon.downloads or 0) + 1
        return common.save(self.db, sermon)

    # Lifecycle

    def publish(self, content_id: uuid.UUID) -> models.Content:
        item = self.get_content(content_id)
        if item.is_published:
            raise InvalidOperationError("Content is already published")
        item.is_published = True
        item.published_at = now_utc()
        item = common.save(self.db, item)
        logger.info("Published %s %s", item.content_type, content_id)
        return item

    def delete_content(self, content_id: uuid.UUID) -> None:
        item = self.get_content(content_id)
        content_type = item.content_type
        content_repo.delete_content(self.db, item)
        logger.info("Deleted %s %s", content_type, content_id)
