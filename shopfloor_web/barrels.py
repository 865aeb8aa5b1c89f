"""Barrel type registry and barrel unit store backed by the shop database."""

from __future__ import annotations

import enum
import logging
from collections import defaultdict
from contextlib import contextmanager
from typing import Iterator, Sequence

from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from shopfloor import alerts

from .errors import InvalidArgument, NotFound, StorageFailure
from .models import BarrelType, BarrelUnit

logger = logging.getLogger(__name__)

COUNT_ACTIONS = ("increment", "decrement")

# Removes the newest unit of a type in one statement so concurrent
# decrements never pick the same row.
_DELETE_NEWEST_UNIT = text(
    "DELETE FROM barrelunit WHERE id = ("
    "SELECT MAX(id) FROM barrelunit WHERE type_id = :type_id"
    ")"
)


class RemovalOutcome(str, enum.Enum):
    REMOVED = "removed"
    NOT_FOUND = "not_found"


@contextmanager
def _storage_errors(session: Session, action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Storage failure while trying to %s", action)
        raise StorageFailure(f"Failed to {action}") from exc


class BarrelRegistry:
    """Read access to the barrel type catalogue plus threshold edits."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_types(self) -> list[BarrelType]:
        with _storage_errors(self.session, "list barrel types"):
            return list(self.session.exec(select(BarrelType).order_by(BarrelType.id)).all())

    def get_type(self, type_id: int) -> BarrelType:
        with _storage_errors(self.session, "load barrel type"):
            barrel_type = self.session.get(BarrelType, type_id)
        if barrel_type is None:
            raise NotFound(f"Barrel type {type_id} not found")
        return barrel_type

    def set_threshold(self, type_id: int, threshold: int) -> BarrelType:
        barrel_type = self.get_type(type_id)
        if threshold < 0:
            raise InvalidArgument("Threshold must be zero or greater")
        with _storage_errors(self.session, "update barrel threshold"):
            previous = barrel_type.threshold
            barrel_type.threshold = threshold
            self.session.add(barrel_type)
            self.session.commit()
            self.session.refresh(barrel_type)
        logger.info(
            "Threshold for %s changed from %s to %s", barrel_type.name, previous, threshold
        )
        return barrel_type


class BarrelStore:
    """Individual barrel units grouped by type."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.registry = BarrelRegistry(session)

    def list_units(self, type_id: int) -> list[BarrelUnit]:
        self.registry.get_type(type_id)
        with _storage_errors(self.session, "list barrel units"):
            return list(
                self.session.exec(
                    select(BarrelUnit)
                    .where(BarrelUnit.type_id == type_id)
                    .order_by(BarrelUnit.id)
                ).all()
            )

    def units_by_type(self) -> dict[int, list[BarrelUnit]]:
        """Return every unit grouped by ``type_id`` in creation order."""

        grouped: dict[int, list[BarrelUnit]] = defaultdict(list)
        with _storage_errors(self.session, "list barrel units"):
            for unit in self.session.exec(select(BarrelUnit).order_by(BarrelUnit.id)).all():
                grouped[unit.type_id].append(unit)
        return grouped

    def count_units(self, type_id: int) -> int:
        with _storage_errors(self.session, "count barrel units"):
            return int(
                self.session.exec(
                    select(func.count(BarrelUnit.id)).where(BarrelUnit.type_id == type_id)
                ).one()
            )

    def get_unit(self, unit_id: int) -> BarrelUnit:
        with _storage_errors(self.session, "load barrel unit"):
            unit = self.session.get(BarrelUnit, unit_id)
        if unit is None:
            raise NotFound(f"Barrel {unit_id} not found")
        return unit

    def add_unit(self, type_id: int) -> BarrelUnit:
        barrel_type = self.registry.get_type(type_id)
        with _storage_errors(self.session, "add barrel"):
            unit = BarrelUnit(type_id=type_id, filled=False)
            self.session.add(unit)
            self.session.commit()
            self.session.refresh(unit)
        logger.info("Added %s barrel %s", barrel_type.name, unit.id)
        return unit

    def remove_one_unit(self, type_id: int) -> RemovalOutcome:
        """Remove the most recently created unit of ``type_id``.

        A type without units is left untouched and reported as
        :attr:`RemovalOutcome.NOT_FOUND`; callers treat that as success.
        """

        barrel_type = self.registry.get_type(type_id)
        with _storage_errors(self.session, "remove barrel"):
            result = self.session.exec(_DELETE_NEWEST_UNIT.bindparams(type_id=type_id))
            removed = result.rowcount
            self.session.commit()
        if not removed:
            logger.info("No %s barrels left to remove", barrel_type.name)
            return RemovalOutcome.NOT_FOUND
        logger.info("Removed newest %s barrel", barrel_type.name)
        return RemovalOutcome.REMOVED

    def delete_unit(self, unit_id: int) -> None:
        unit = self.get_unit(unit_id)
        with _storage_errors(self.session, "delete barrel"):
            self.session.delete(unit)
            self.session.commit()
        logger.info("Deleted barrel %s", unit_id)

    def set_filled(self, unit_id: int, filled: bool) -> BarrelUnit:
        unit = self.get_unit(unit_id)
        with _storage_errors(self.session, "update barrel"):
            unit.filled = bool(filled)
            self.session.add(unit)
            self.session.commit()
            self.session.refresh(unit)
        logger.info("Barrel %s marked %s", unit_id, "filled" if unit.filled else "empty")
        return unit

    def apply_count(self, type_id: int, action: str) -> None:
        """Add or remove one unit depending on ``action``."""

        if action not in COUNT_ACTIONS:
            raise InvalidArgument(
                f"Action must be one of {', '.join(COUNT_ACTIONS)}, got {action!r}"
            )
        if action == "increment":
            self.add_unit(type_id)
        else:
            self.remove_one_unit(type_id)


def evaluate_all(
    types: Sequence[BarrelType], units: dict[int, list[BarrelUnit]]
) -> list[alerts.Alert]:
    """Return the active alerts for ``types`` in catalogue order."""

    active = []
    for barrel_type in types:
        alert = alerts.evaluate(barrel_type, units.get(barrel_type.id, []))
        if alert is not None:
            active.append(alert)
    return active
