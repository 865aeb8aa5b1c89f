"""Login and account API routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from .. import models, schemas
from ..auth import authenticate_user, create_user_token, get_current_user, get_settings
from ..config import Settings
from ..database import get_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


@router.post("/auth/login", response_model=schemas.Token)
def login(
    user_in: schemas.UserLogin,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    user = authenticate_user(session, user_in.username, user_in.password)
    if not user:
        logger.warning("Failed login for %s", user_in.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    token = create_user_token(settings, user)
    logger.info("User %s logged in", user.username)
    return schemas.Token(
        access_token=token,
        user=schemas.UserPublic(username=user.username, role=user.role),
    )


@router.get("/users/me", response_model=schemas.UserRead)
def read_current_user(current_user: models.User = Depends(get_current_user)):
    return current_user
