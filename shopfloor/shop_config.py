"""Default catalogue used to populate a fresh shop database.

Adjust the values here to match the consumables and stock used on the shop
floor.  They are only applied when the corresponding tables are empty.
"""

from __future__ import annotations

from .alerts import BarrelCategory

# Barrel types --------------------------------------------------------------

# ``(name, color, threshold, category)`` for every consumable tracked in
# barrels.  Chips and vacuum sludge pile up and must be emptied; coolant and
# oil are used up and must be refilled.
DEFAULT_BARREL_TYPES: tuple[tuple[str, str, int, BarrelCategory], ...] = (
    ("Chips", "#8B4513", 2, BarrelCategory.ACCUMULATING),
    ("Vacuum", "#4A4A4A", 1, BarrelCategory.ACCUMULATING),
    ("Coolant", "#4169E1", 2, BarrelCategory.DEPLETING),
    ("Oil", "#8B0000", 2, BarrelCategory.DEPLETING),
)

# Number of empty units created per type on first start.
DEFAULT_UNIT_COUNT = 3
INITIAL_UNIT_COUNTS: dict[str, int] = {
    "Vacuum": 2,
    "Coolant": 4,
}

# Inventory -----------------------------------------------------------------

# ``(name, description, quantity, threshold)``
DEFAULT_INVENTORY: tuple[tuple[str, str, int, int], ...] = (
    ("Cutting Oil", "Standard cutting oil for machining", 50, 20),
    ('End Mills 1/4"', "1/4 inch carbide end mills", 30, 10),
    ("Drill Bits Set", "Standard drill bit set", 15, 5),
    ("Coolant", "Machine coolant", 100, 25),
    ("Inserts", "Carbide cutting inserts", 200, 50),
)


def initial_unit_count(type_name: str) -> int:
    return INITIAL_UNIT_COUNTS.get(type_name, DEFAULT_UNIT_COUNT)
