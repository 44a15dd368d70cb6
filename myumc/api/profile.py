"""
Profile picture upload.

Validates the upload, optimizes it, stores it on S3 and records the CDN URL
on the caller's profile.
"""
import logging
import os
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from myumc.api.deps import get_current_user_context
from myumc.audit import AuditAction, AuditStatus, log
from myumc.db.database import get_db
from myumc.db.models import now_utc
from myumc.db.repositories import users as user_repo
from myumc.services.image_optimization import ImageOptimizationService
from myumc.services.profile_storage import ProfileStorageService, StorageError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile", tags=["profile"])

MAX_UPLOAD_BYTES = 5 * 1024 * 1024
ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png"}


def get_profile_storage() -> ProfileStorageService:
    return ProfileStorageService()


def get_image_optimizer() -> ImageOptimizationService:
    return ImageOptimizationService()


@router.post("/upload-picture")
def upload_profile_picture(
    file: Optional[UploadFile] = File(default=None),
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
    storage: ProfileStorageService = Depends(get_profile_storage),
    optimizer: ImageOptimizationService = Depends(get_image_optimizer),
):
    user, _ctx = user_context
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded.")
    # One byte past the limit is enough to tell an oversize upload
    data = file.file.read(MAX_UPLOAD_BYTES + 1)
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded.")
    if len(data) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File size must be less than 5MB.")
    ext = os.path.splitext(file.filename or "")[1].lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only .jpg, .jpeg, and .png files are allowed.",
        )

    optimized = optimizer.optimize(data, output_format="PNG" if ext == ".png" else "JPEG")
    file_name = f"{user.id}-{now_utc():%Y%m%d%H%M%S}{ext}"
    try:
        url = storage.upload_profile_picture(optimized, file_name)
    except StorageError as exc:
        log(
            db,
            action=AuditAction.PROFILE_PICTURE_UPDATE,
            status=AuditStatus.FAILURE,
            target_type="user",
            target_id=user.id,
            actor_user_id=user.id,
            organization_id=user.organization_id,
            metadata={"file_name": file_name, "error": str(exc)},
        )
        raise

    user_repo.update_user(db, user, profile_picture_url=url)
    log(
        db,
        action=AuditAction.PROFILE_PICTURE_UPDATE,
        target_type="user",
        target_id=user.id,
        actor_user_id=user.id,
        organization_id=user.organization_id,
        metadata={"file_name": file_name, "bytes": len(optimized)},
    )
    logger.info("Updated profile picture for user %s", user.id)
    return {"url": url}
