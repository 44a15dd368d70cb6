"""
Content repository functions.

Queries over sermons, blog posts, announcements and their interactions.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from myumc.db import models


def get_content(db: Session, content_id: uuid.UUID):
    return db.query(models.Content).filter(models.Content.id == content_id).first()


def get_sermon(db: Session, sermon_id: uuid.UUID):
    return db.query(models.Sermon).filter(models.Sermon.id == sermon_id).first()


def get_blog_post(db: Session, blog_post_id: uuid.UUID):
    return db.query(models.BlogPost).filter(models.BlogPost.id == blog_post_id).first()


def get_announcement(db: Session, announcement_id: uuid.UUID):
    return db.query(models.Announcement).filter(models.Announcement.id == announcement_id).first()


def get_comment(db: Session, comment_id: uuid.UUID):
    return db.query(models.Comment).filter(models.Comment.id == comment_id).first()


def get_comments(db: Session, content_id: uuid.UUID):
    return (
        db.query(models.Comment)
        .filter(models.Comment.content_id == content_id)
        .order_by(models.Comment.created_at)
        .all()
    )


def count_sermon_ratings(db: Session, sermon_id: uuid.UUID) -> int:
    return db.query(func.count(models.SermonRating.id)).filter(models.SermonRating.sermon_id == sermon_id).scalar() or 0


def get_blog_post_like(db: Session, blog_post_id: uuid.UUID, user_id: uuid.UUID):
    return (
        db.query(models.BlogPostLike)
        .filter(models.BlogPostLike.blog_post_id == blog_post_id, models.BlogPostLike.user_id == user_id)
        .first()
    )


def get_acknowledgement(db: Session, announcement_id: uuid.UUID, user_id: uuid.UUID):
    return (
        db.query(models.AnnouncementAcknowledgement)
        .filter(
            models.AnnouncementAcknowledgement.announcement_id == announcement_id,
            models.AnnouncementAcknowledgement.user_id == user_id,
        )
        .first()
    )


def get_latest_sermons(db: Session, count: int, organization_id: Optional[uuid.UUID] = None):
    query = db.query(models.Sermon).filter(models.Sermon.is_published.is_(True))
    if organization_id:
        query = query.filter(models.Sermon.organization_id == organization_id)
    return query.order_by(models.Sermon.sermon_date.desc()).limit(count).all()


def get_popular_blog_posts(db: Session, count: int, organization_id: Optional[uuid.UUID] = None):
    score = models.BlogPost.views + func.coalesce(models.BlogPost.like_count, 0) * 2
    query = db.query(models.BlogPost).filter(models.BlogPost.is_published.is_(True))
    if organization_id:
        query = query.filter(models.BlogPost.organization_id == organization_id)
    return query.order_by(score.desc()).limit(count).all()


def get_active_announcements(db: Session, now: datetime, organization_id: Optional[uuid.UUID] = None):
    query = db.query(models.Announcement).filter(
        models.Announcement.is_published.is_(True),
        models.Announcement.start_date <= now,
        models.Announcement.end_date >= now,
    )
    if organization_id:
        query = query.filter(models.Announcement.organization_id == organization_id)
    return query.order_by(
        models.Announcement.priority_rank.desc(),
        models.Announcement.created_at.desc(),
    ).all()


def delete_content(db: Session, content: models.Content):
    db.delete(content)
    db.commit()
