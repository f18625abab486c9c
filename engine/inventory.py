"""Room inventory: per-project, per-unit-type available/total counters.

``try_reserve`` and ``release`` are the only two places that change an
``available`` count. Each (project, unit type) counter has its own re-entrant
lock; callers that need a check-then-act across several steps hold
``lock(project, unit_type)`` around the whole sequence.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Tuple

from models.project import Project, UnitInventory, UnitType
from engine.errors import InventoryOverflow

logger = logging.getLogger(__name__)


class RoomInventoryManager:
    def __init__(self):
        self._counters: Dict[Tuple[str, UnitType], UnitInventory] = {}
        self._locks: Dict[Tuple[str, UnitType], threading.RLock] = {}
        self._registry_lock = threading.Lock()

    def register(self, project: Project) -> None:
        """Take over the counters of a project. Raises ValueError on out-of-bounds counts."""
        with self._registry_lock:
            for unit_type in UnitType:
                inv = project.inventory.setdefault(unit_type, UnitInventory(total=0, available=0))
                if inv.total < 0 or not 0 <= inv.available <= inv.total:
                    raise ValueError(
                        f"{project.name}: {unit_type.value} inventory out of bounds "
                        f"(available={inv.available}, total={inv.total})"
                    )
                key = (project.name, unit_type)
                self._counters[key] = inv
                self._locks.setdefault(key, threading.RLock())

    def unregister(self, project_name: str) -> None:
        with self._registry_lock:
            for unit_type in UnitType:
                self._counters.pop((project_name, unit_type), None)
                self._locks.pop((project_name, unit_type), None)

    def _key(self, project_name: str, unit_type) -> Tuple[str, UnitType]:
        key = (project_name, UnitType.parse(unit_type))
        if key not in self._counters:
            raise KeyError(f"No inventory registered for {project_name} / {key[1].value}")
        return key

    @contextmanager
    def lock(self, project_name: str, unit_type) -> Iterator[None]:
        """Hold the counter's lock for the duration of a multi-step transition."""
        key = self._key(project_name, unit_type)
        with self._locks[key]:
            yield

    def available(self, project_name: str, unit_type) -> int:
        return self._counters[self._key(project_name, unit_type)].available

    def total(self, project_name: str, unit_type) -> int:
        return self._counters[self._key(project_name, unit_type)].total

    def try_reserve(self, project_name: str, unit_type) -> bool:
        """Atomically decrement available if positive. Returns False when nothing is left."""
        key = self._key(project_name, unit_type)
        with self._locks[key]:
            inv = self._counters[key]
            if inv.available <= 0:
                return False
            inv.available -= 1
            logger.info("Reserved %s in %s (%d/%d left)", key[1].value, project_name,
                        inv.available, inv.total)
            return True

    def release(self, project_name: str, unit_type) -> None:
        """Atomically return one unit. Never lets available exceed total."""
        key = self._key(project_name, unit_type)
        with self._locks[key]:
            inv = self._counters[key]
            if inv.available >= inv.total:
                logger.critical("Inventory overflow on %s / %s (available=%d, total=%d)",
                                project_name, key[1].value, inv.available, inv.total)
                raise InventoryOverflow(
                    f"Release would exceed total for {project_name} / {key[1].value}"
                )
            inv.available += 1
            logger.info("Released %s in %s (%d/%d left)", key[1].value, project_name,
                        inv.available, inv.total)
