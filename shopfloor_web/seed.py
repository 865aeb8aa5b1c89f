"""First-run data for a fresh shop database."""

from __future__ import annotations

import logging

from sqlalchemy import func
from sqlmodel import Session, select

from shopfloor import shop_config

from . import auth, models
from .config import Settings

logger = logging.getLogger(__name__)


def _is_empty(session: Session, model) -> bool:
    return session.exec(select(func.count()).select_from(model)).one() == 0


def seed_inventory(session: Session) -> int:
    if not _is_empty(session, models.InventoryItem):
        return 0
    for name, description, quantity, threshold in shop_config.DEFAULT_INVENTORY:
        session.add(
            models.InventoryItem(
                name=name, description=description, quantity=quantity, threshold=threshold
            )
        )
    session.flush()
    logger.info("Inventory initialised with %s items", len(shop_config.DEFAULT_INVENTORY))
    return len(shop_config.DEFAULT_INVENTORY)


def seed_barrels(session: Session) -> int:
    """Create the barrel catalogue and its empty units when missing."""

    if not _is_empty(session, models.BarrelType):
        return 0
    created = []
    for name, color, threshold, category in shop_config.DEFAULT_BARREL_TYPES:
        barrel_type = models.BarrelType(
            name=name, color=color, threshold=threshold, category=category
        )
        session.add(barrel_type)
        created.append(barrel_type)
    session.flush()

    units = 0
    if _is_empty(session, models.BarrelUnit):
        for barrel_type in created:
            for _ in range(shop_config.initial_unit_count(barrel_type.name)):
                session.add(models.BarrelUnit(type_id=barrel_type.id, filled=False))
                units += 1
        session.flush()
    logger.info("Barrel catalogue initialised with %s types and %s units", len(created), units)
    return len(created)


def seed_users(session: Session, settings: Settings) -> int:
    added = 0
    for username, password, role in (
        (settings.admin_username, settings.admin_password, auth.ADMIN_ROLE),
        (settings.user_username, settings.user_password, auth.USER_ROLE),
    ):
        existing = session.exec(
            select(models.User).where(models.User.username == username)
        ).first()
        if existing:
            continue
        session.add(
            models.User(
                username=username,
                hashed_password=auth.get_password_hash(password),
                role=role,
            )
        )
        added += 1
    if added:
        session.flush()
        logger.info("Created %s default accounts", added)
    return added


def seed_all(session: Session, settings: Settings) -> None:
    seed_users(session, settings)
    seed_inventory(session)
    seed_barrels(session)
