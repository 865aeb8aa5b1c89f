"""Database models for the web API."""

import datetime as dt
from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel

from shopfloor.alerts import BarrelCategory


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class User(SQLModel, table=True):
    """Shop account allowed to use the dashboard."""

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, unique=True)
    hashed_password: str
    role: str = Field(default="user")
    created_at: dt.datetime = Field(default_factory=_utcnow)

    announcements: List["Announcement"] = Relationship(back_populates="author")


class InventoryItem(SQLModel, table=True):
    """Stocked tooling or consumable with a reorder threshold."""

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    description: Optional[str] = Field(default=None)
    quantity: int = Field(default=0, ge=0)
    threshold: int = Field(default=0, ge=0)


class BarrelType(SQLModel, table=True):
    """Consumable category tracked as a row of barrels."""

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, unique=True)
    color: str
    threshold: int = Field(default=2, ge=0)
    category: BarrelCategory = Field(default=BarrelCategory.DEPLETING)

    units: List["BarrelUnit"] = Relationship(back_populates="barrel_type")


class BarrelUnit(SQLModel, table=True):
    """One physical barrel, either filled or empty."""

    id: Optional[int] = Field(default=None, primary_key=True)
    type_id: int = Field(foreign_key="barreltype.id", index=True)
    filled: bool = Field(default=False)

    barrel_type: Optional["BarrelType"] = Relationship(back_populates="units")


class Announcement(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    content: str
    timestamp: dt.datetime = Field(default_factory=_utcnow, index=True)
    user_id: int = Field(foreign_key="user.id", index=True)

    author: Optional["User"] = Relationship(back_populates="announcements")
    replies: List["Reply"] = Relationship(back_populates="announcement")


class Reply(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    announcement_id: int = Field(foreign_key="announcement.id", index=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    content: str
    timestamp: dt.datetime = Field(default_factory=_utcnow)

    announcement: Optional["Announcement"] = Relationship(back_populates="replies")
    author: Optional["User"] = Relationship()
