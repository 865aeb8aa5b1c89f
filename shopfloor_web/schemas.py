"""Pydantic/SQLModel schemas for the web API."""

from __future__ import annotations

import datetime as dt
from typing import Annotated, List, Optional

from fastapi import Path
from pydantic import StrictBool, StrictInt, StrictStr
from sqlmodel import Field, SQLModel

from shopfloor.alerts import BarrelCategory, StockStatus

# Largest value an SQLite INTEGER column can hold.
MAX_DB_INT = 2**63 - 1

# Row id path parameter; larger values are rejected before reaching SQLite.
RowId = Annotated[int, Path(le=MAX_DB_INT)]


class UserLogin(SQLModel):
    username: str
    password: str


class UserPublic(SQLModel):
    username: str
    role: str


class UserRead(UserPublic):
    id: int
    created_at: dt.datetime


class Token(SQLModel):
    access_token: str
    token_type: str = "bearer"
    user: UserPublic


class BarrelUnitRead(SQLModel):
    id: int
    type_id: int
    filled: bool


class BarrelUnitUpdate(SQLModel):
    filled: StrictBool


class BarrelCountUpdate(SQLModel):
    action: StrictStr


class BarrelThresholdUpdate(SQLModel):
    # Negative values are rejected by the registry itself.
    threshold: StrictInt = Field(le=MAX_DB_INT)


class AlertRead(SQLModel):
    type_id: int
    type: str
    category: BarrelCategory
    filled_count: int
    threshold: int
    message: str


class BarrelTypeRead(SQLModel):
    id: int
    type: str
    color: str
    threshold: int
    category: BarrelCategory
    filled_count: int = 0
    units: List[BarrelUnitRead] = Field(default_factory=list)
    alert: Optional[AlertRead] = None


class InventoryItemBase(SQLModel):
    name: str
    description: Optional[str] = None
    quantity: StrictInt = Field(ge=0, le=MAX_DB_INT)
    threshold: StrictInt = Field(ge=0, le=MAX_DB_INT)


class InventoryItemCreate(InventoryItemBase):
    pass


class InventoryItemUpdate(SQLModel):
    name: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[StrictInt] = Field(default=None, ge=0, le=MAX_DB_INT)
    threshold: Optional[StrictInt] = Field(default=None, ge=0, le=MAX_DB_INT)


class InventoryItemRead(InventoryItemBase):
    id: int
    status: StockStatus


class AnnouncementCreate(SQLModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)


class AnnouncementUpdate(SQLModel):
    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = Field(default=None, min_length=1)


class ReplyCreate(SQLModel):
    content: str = Field(min_length=1)


class ReplyRead(SQLModel):
    id: int
    announcement_id: int
    content: str
    timestamp: dt.datetime
    username: Optional[str] = None


class AnnouncementRead(SQLModel):
    id: int
    title: str
    content: str
    timestamp: dt.datetime
    user_id: int
    author: Optional[str] = None
    replies: List[ReplyRead] = Field(default_factory=list)


class SuccessResponse(SQLModel):
    success: bool = True
