from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict


class UnitType(str, Enum):
    TWO_ROOM = "2-room"
    THREE_ROOM = "3-room"

    @classmethod
    def parse(cls, value) -> "UnitType":
        """Normalise legacy spellings ("2-Room", "2Room", "2 room") to the canonical type."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace(" ", "").replace("-", "").replace("_", "")
        for member in cls:
            if member.value.replace("-", "") == key:
                return member
        raise ValueError(f"Unknown unit type: {value!r}. Use '2-room' or '3-room'.")


@dataclass
class UnitInventory:
    total: int
    available: int


@dataclass
class Project:
    name: str
    neighbourhood: str
    manager_id: str
    opening_date: date
    closing_date: date
    visibility: bool = True
    inventory: Dict[UnitType, UnitInventory] = field(default_factory=dict)

    def available(self, unit_type: UnitType) -> int:
        inv = self.inventory.get(UnitType.parse(unit_type))
        return inv.available if inv else 0

    def total(self, unit_type: UnitType) -> int:
        inv = self.inventory.get(UnitType.parse(unit_type))
        return inv.total if inv else 0

    def is_clashing(self, other_start: date, other_end: date) -> bool:
        """True if the inclusive period [other_start, other_end] overlaps this project's."""
        return not (other_end < self.opening_date or self.closing_date < other_start)


def make_inventory(two_room_units: int, three_room_units: int) -> Dict[UnitType, UnitInventory]:
    """Fresh inventory with every unit available."""
    return {
        UnitType.TWO_ROOM: UnitInventory(total=two_room_units, available=two_room_units),
        UnitType.THREE_ROOM: UnitInventory(total=three_room_units, available=three_room_units),
    }
