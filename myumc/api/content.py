"""
Content API endpoints.

Sermons, blog posts and announcements. Anyone may read published content;
unpublished items are only visible to managers. Interactions require a
signed-in user.
"""
from typing import Optional, List
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from myumc.api.deps import get_current_user_context, get_optional_user_context, get_organization_scope
from myumc.api.permissions import can_view_content, require_manager
from myumc.audit import AuditAction, log
from myumc.db import schemas
from myumc.db.database import get_db
from myumc.services.content_service import ContentService

router = APIRouter(prefix="/api/content", tags=["content"])


def _visible(item, current_user):
    # Drafts are hidden rather than forbidden
    if not can_view_content(item, current_user):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Content not found")
    return item


def _audit_create(db: Session, user, item):
    log(
        db,
        action=AuditAction.CONTENT_CREATE,
        target_type=item.content_type,
        target_id=item.id,
        actor_user_id=user.id,
        organization_id=item.organization_id,
        metadata={"title": item.title, "is_published": bool(item.is_published)},
    )


# Sermons

@router.post("/sermons", response_model=schemas.Sermon, status_code=status.HTTP_201_CREATED)
def create_sermon(
    payload: schemas.SermonCreate,
    db: Session = Depends(get_db),
    user_context=Depends(require_manager),
):
    user, _ctx = user_context
    sermon = ContentService(db).create_sermon(payload, user.id, user.organization_id)
    _audit_create(db, user, sermon)
    return sermon


@router.get("/sermons/latest", response_model=List[schemas.Sermon])
def latest_sermons(
    count: int = Query(default=5, ge=1, le=100),
    organization_id: Optional[uuid.UUID] = Depends(get_organization_scope),
    db: Session = Depends(get_db),
):
    return ContentService(db).get_latest_sermons(count, organization_id=organization_id)


@router.get("/sermons/{sermon_id}", response_model=schemas.Sermon)
def get_sermon(
    sermon_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_optional_user_context),
):
    _user, current_user = user_context
    return _visible(ContentService(db).get_sermon(sermon_id), current_user)


@router.post("/sermons/{sermon_id}/ratings", response_model=schemas.SermonRating, status_code=status.HTTP_201_CREATED)
def rate_sermon(
    sermon_id: uuid.UUID,
    payload: schemas.SermonRatingCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, current_user = user_context
    service = ContentService(db)
    _visible(service.get_sermon(sermon_id), current_user)
    return service.rate_sermon(sermon_id, user.id, payload)


@router.post("/sermons/{sermon_id}/downloads", response_model=schemas.Sermon)
def record_sermon_download(
    sermon_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_optional_user_context),
):
    _user, current_user = user_context
    service = ContentService(db)
    _visible(service.get_sermon(sermon_id), current_user)
    return service.record_download(sermon_id)


# Blog posts

@router.post("/blog-posts", response_model=schemas.BlogPost, status_code=status.HTTP_201_CREATED)
def create_blog_post(
    payload: schemas.BlogPostCreate,
    db: Session = Depends(get_db),
    user_context=Depends(require_manager),
):
    user, _ctx = user_context
    post = ContentService(db).create_blog_post(payload, user.id, user.organization_id)
    _audit_create(db, user, post)
    return post


@router.get("/blog-posts/popular", response_model=List[schemas.BlogPost])
def popular_blog_posts(
    count: int = Query(default=5, ge=1, le=100),
    organization_id: Optional[uuid.UUID] = Depends(get_organization_scope),
    db: Session = Depends(get_db),
):
    return ContentService(db).get_popular_blog_posts(count, organization_id=organization_id)


@router.get("/blog-posts/{blog_post_id}", response_model=schemas.BlogPost)
def get_blog_post(
    blog_post_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_optional_user_context),
):
    _user, current_user = user_context
    return _visible(ContentService(db).get_blog_post(blog_post_id), current_user)


@router.post("/blog-posts/{blog_post_id}/likes", response_model=schemas.BlogPostLike, status_code=status.HTTP_201_CREATED)
def like_blog_post(
    blog_post_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, current_user = user_context
    service = ContentService(db)
    _visible(service.get_blog_post(blog_post_id), current_user)
    return service.like_blog_post(blog_post_id, user.id)


# Announcements

@router.post("/announcements", response_model=schemas.Announcement, status_code=status.HTTP_201_CREATED)
def create_announcement(
    payload: schemas.AnnouncementCreate,
    db: Session = Depends(get_db),
    user_context=Depends(require_manager),
):
    user, _ctx = user_context
    announcement = ContentService(db).create_announcement(payload, user.id, user.organization_id)
    _audit_create(db, user, announcement)
    return announcement


@router.get("/announcements/active", response_model=List[schemas.Announcement])
def active_announcements(
    organization_id: Optional[uuid.UUID] = Depends(get_organization_scope),
    db: Session = Depends(get_db),
):
    return ContentService(db).get_active_announcements(organization_id=organization_id)


@router.get("/announcements/{announcement_id}", response_model=schemas.Announcement)
def get_announcement(
    announcement_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_optional_user_context),
):
    _user, current_user = user_context
    return _visible(ContentService(db).get_announcement(announcement_id), current_user)


@router.post(
    "/announcements/{announcement_id}/acknowledgements",
    response_model=schemas.AnnouncementAcknowledgement,
    status_code=status.HTTP_201_CREATED,
)
def acknowledge_announcement(
    announcement_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, current_user = user_context
    service = ContentService(db)
    _visible(service.get_announcement(announcement_id), current_user)
    return service.acknowledge_announcement(announcement_id, user.id)


# Any content item

@router.get("/{content_id}/comments", response_model=List[schemas.Comment])
def list_comments(
    content_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_optional_user_context),
):
    _user, current_user = user_context
    service = ContentService(db)
    _visible(service.get_content(content_id), current_user)
    return service.list_comments(content_id)


@router.post("/{content_id}/comments", response_model=schemas.Comment, status_code=status.HTTP_201_CREATED)
def add_comment(
    content_id: uuid.UUID,
    payload: schemas.CommentCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, current_user = user_context
    service = ContentService(db)
    _visible(service.get_content(content_id), current_user)
    return service.add_comment(content_id, user.id, payload)


@router.post("/{content_id}/views", response_model=schemas.ContentItem)
def record_view(
    content_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_optional_user_context),
):
    _user, current_user = user_context
    service = ContentService(db)
    _visible(service.get_content(content_id), current_user)
    return service.record_view(content_id)


@router.post("/{content_id}/publish", response_model=schemas.ContentItem)
def publish_content(
    content_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(require_manager),
):
    user, _ctx = user_context
    item = ContentService(db).publish(content_id)
    log(
        db,
        action=AuditAction.CONTENT_PUBLISH,
        target_type=item.content_type,
        target_id=item.id,
        actor_user_id=user.id,
        organization_id=item.organization_id,
    )
    return item


@router.delete("/{content_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_content(
    content_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(require_manager),
):
    user, _ctx = user_context
    service = ContentService(db)
    item = service.get_content(content_id)
    content_type, organization_id = item.content_type, item.organization_id
    service.delete_content(content_id)
    log(
        db,
        action=AuditAction.CONTENT_DELETE,
        target_type=content_type,
        target_id=content_id,
        actor_user_id=user.id,
        organization_id=organization_id,
    )
