import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from shopfloor.alerts import (
    BarrelCategory,
    StockStatus,
    evaluate,
    filled_count,
    stock_status,
)


def _type(name, threshold, category, type_id=1):
    return SimpleNamespace(id=type_id, name=name, threshold=threshold, category=category)


def _units(filled, empty=0):
    return [SimpleNamespace(filled=True)] * filled + [SimpleNamespace(filled=False)] * empty


@pytest.mark.parametrize("threshold", [0, 1, 2, 5])
def test_accumulating_alerts_at_or_above_threshold(threshold):
    chips = _type("Chips", threshold, BarrelCategory.ACCUMULATING)
    for filled in range(0, 8):
        alert = evaluate(chips, _units(filled, empty=2))
        assert (alert is not None) == (filled >= threshold)


@pytest.mark.parametrize("threshold", [0, 1, 2, 5])
def test_depleting_alerts_at_or_below_threshold(threshold):
    oil = _type("Oil", threshold, BarrelCategory.DEPLETING)
    for filled in range(0, 8):
        alert = evaluate(oil, _units(filled, empty=1))
        assert (alert is not None) == (filled <= threshold)


def test_depleting_type_without_units_always_alerts():
    coolant = _type("Coolant", 0, BarrelCategory.DEPLETING)
    alert = evaluate(coolant, [])
    assert alert is not None
    assert alert.filled_count == 0


def test_coolant_scenario():
    coolant = _type("Coolant", 2, BarrelCategory.DEPLETING, type_id=3)
    alert = evaluate(coolant, _units(1, empty=3))
    assert alert is not None
    assert alert.message == "Low Coolant level - needs refill"
    assert alert.type_id == 3
    assert alert.category is BarrelCategory.DEPLETING

    assert evaluate(coolant, _units(3, empty=1)) is None


def test_chips_scenario():
    chips = _type("Chips", 2, BarrelCategory.ACCUMULATING)
    alert = evaluate(chips, _units(2, empty=1))
    assert alert is not None
    assert alert.message == "Chips barrels need emptying"
    assert alert.filled_count == 2
    assert alert.threshold == 2

    assert evaluate(chips, _units(1, empty=2)) is None


def test_category_accepts_stored_string_value():
    vacuum = _type("Vacuum", 1, "accumulating")
    assert evaluate(vacuum, _units(1)).category is BarrelCategory.ACCUMULATING


def test_filled_count_ignores_empty_units():
    assert filled_count(_units(3, empty=4)) == 3
    assert filled_count([]) == 0


@pytest.mark.parametrize(
    "quantity, threshold, expected",
    [
        (5, 5, StockStatus.LOW),
        (0, 0, StockStatus.LOW),
        (7, 5, StockStatus.GETTING_LOW),
        (8, 5, StockStatus.OK),
        (30, 20, StockStatus.GETTING_LOW),
        (31, 20, StockStatus.OK),
    ],
)
def test_stock_status(quantity, threshold, expected):
    assert stock_status(quantity, threshold) is expected
