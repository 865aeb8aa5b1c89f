"""Announcement board and reply API routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from .. import models, schemas
from ..auth import get_current_user, require_admin
from ..database import get_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/announcements", tags=["announcements"])


def _serialize_reply(reply: models.Reply) -> schemas.ReplyRead:
    return schemas.ReplyRead(
        id=reply.id,
        announcement_id=reply.announcement_id,
        content=reply.content,
        timestamp=reply.timestamp,
        username=reply.author.username if reply.author else None,
    )


def _serialize_announcement(announcement: models.Announcement) -> schemas.AnnouncementRead:
    replies = sorted(announcement.replies, key=lambda reply: (reply.timestamp, reply.id))
    return schemas.AnnouncementRead(
        id=announcement.id,
        title=announcement.title,
        content=announcement.content,
        timestamp=announcement.timestamp,
        user_id=announcement.user_id,
        author=announcement.author.username if announcement.author else None,
        replies=[_serialize_reply(reply) for reply in replies],
    )


def _get_own_announcement(
    session: Session, announcement_id: int, user: models.User
) -> models.Announcement:
    announcement = session.exec(
        select(models.Announcement).where(
            models.Announcement.id == announcement_id,
            models.Announcement.user_id == user.id,
        )
    ).first()
    if announcement is None:
        logger.warning(
            "Announcement %s not found for user %s", announcement_id, user.username
        )
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Announcement not found"
        )
    return announcement


@router.get("", response_model=list[schemas.AnnouncementRead])
def list_announcements(
    session: Session = Depends(get_session),
    _current_user: models.User = Depends(get_current_user),
):
    announcements = session.exec(
        select(models.Announcement)
        .options(
            selectinload(models.Announcement.author),
            selectinload(models.Announcement.replies).selectinload(models.Reply.author),
        )
        .order_by(models.Announcement.timestamp.desc(), models.Announcement.id.desc())
    ).all()
    return [_serialize_announcement(announcement) for announcement in announcements]


@router.post("", response_model=schemas.AnnouncementRead, status_code=status.HTTP_201_CREATED)
def create_announcement(
    payload: schemas.AnnouncementCreate,
    session: Session = Depends(get_session),
    current_user: models.User = Depends(require_admin),
):
    announcement = models.Announcement(
        title=payload.title, content=payload.content, user_id=current_user.id
    )
    session.add(announcement)
    session.commit()
    session.refresh(announcement)
    logger.info("Announcement %s posted by %s", announcement.id, current_user.username)
    return _serialize_announcement(announcement)


@router.put("/{announcement_id}", response_model=schemas.AnnouncementRead)
def update_announcement(
    announcement_id: schemas.RowId,
    payload: schemas.AnnouncementUpdate,
    session: Session = Depends(get_session),
    current_user: models.User = Depends(get_current_user),
):
    announcement = _get_own_announcement(session, announcement_id, current_user)
    updates = payload.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in updates.items():
        setattr(announcement, field, value)
    if updates:
        session.add(announcement)
        session.commit()
        session.refresh(announcement)
    return _serialize_announcement(announcement)


@router.delete("/{announcement_id}", response_model=schemas.AnnouncementRead)
def delete_announcement(
    announcement_id: schemas.RowId,
    session: Session = Depends(get_session),
    current_user: models.User = Depends(get_current_user),
):
    announcement = _get_own_announcement(session, announcement_id, current_user)
    deleted = _serialize_announcement(announcement)
    for reply in list(announcement.replies):
        session.delete(reply)
    session.delete(announcement)
    session.commit()
    logger.info("Announcement %s deleted by %s", announcement_id, current_user.username)
    return deleted


@router.post(
    "/{announcement_id}/replies",
    response_model=schemas.ReplyRead,
    status_code=status.HTTP_201_CREATED,
)
def add_reply(
    announcement_id: schemas.RowId,
    payload: schemas.ReplyCreate,
    session: Session = Depends(get_session),
    current_user: models.User = Depends(get_current_user),
):
    announcement = session.get(models.Announcement, announcement_id)
    if announcement is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Announcement not found"
        )
    reply = models.Reply(
        announcement_id=announcement_id, user_id=current_user.id, content=payload.content
    )
    session.add(reply)
    session.commit()
    session.refresh(reply)
    return _serialize_reply(reply)
