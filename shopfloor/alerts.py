"""Alert rules for barrel consumables and inventory stock levels.

The helpers in this module are pure: they take plain values (or any object
exposing the expected attributes) and never touch storage.  Both the web API
and the dashboard rely on the same rules so an alert shown to the operator is
always the one the server would report.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol


class BarrelCategory(str, enum.Enum):
    """Direction in which a barrel type becomes alert-worthy."""

    ACCUMULATING = "accumulating"
    DEPLETING = "depleting"


class StockStatus(str, enum.Enum):
    OK = "ok"
    GETTING_LOW = "getting_low"
    LOW = "low"


# Items at or below ``threshold * GETTING_LOW_FACTOR`` are flagged early.
GETTING_LOW_FACTOR = 1.5


class _TypeLike(Protocol):
    id: Optional[int]
    name: str
    threshold: int
    category: BarrelCategory


class _UnitLike(Protocol):
    filled: bool


@dataclass(frozen=True)
class Alert:
    """Single active alert for one barrel type."""

    type_id: Optional[int]
    type: str
    category: BarrelCategory
    filled_count: int
    threshold: int
    message: str


def filled_count(units: Iterable[_UnitLike]) -> int:
    """Return how many of ``units`` are currently filled."""

    return sum(1 for unit in units if unit.filled)


def alert_message(name: str, category: BarrelCategory) -> str:
    if category is BarrelCategory.ACCUMULATING:
        return f"{name} barrels need emptying"
    return f"Low {name} level - needs refill"


def evaluate(barrel_type: _TypeLike, units: Iterable[_UnitLike]) -> Optional[Alert]:
    """Return the alert for ``barrel_type`` or ``None`` when it is within limits.

    Accumulating types (chips, vacuum) alert once ``filled >= threshold``
    because full containers have to be emptied.  Depleting types (coolant,
    oil) alert while ``filled <= threshold`` because stock must be refilled.
    A depleting type without any units therefore always alerts.
    """

    category = BarrelCategory(barrel_type.category)
    count = filled_count(units)
    if category is BarrelCategory.ACCUMULATING:
        triggered = count >= barrel_type.threshold
    else:
        triggered = count <= barrel_type.threshold
    if not triggered:
        return None
    return Alert(
        type_id=barrel_type.id,
        type=barrel_type.name,
        category=category,
        filled_count=count,
        threshold=barrel_type.threshold,
        message=alert_message(barrel_type.name, category),
    )


def stock_status(quantity: int, threshold: int) -> StockStatus:
    """Classify an inventory line by comparing ``quantity`` with ``threshold``."""

    if quantity <= threshold:
        return StockStatus.LOW
    if quantity <= threshold * GETTING_LOW_FACTOR:
        return StockStatus.GETTING_LOW
    return StockStatus.OK
