"""Project catalog: project identity, visibility and ownership rules."""

import logging
import threading
from datetime import date
from typing import Callable, Dict, List, Optional

from models.project import Project, make_inventory
from engine.errors import DuplicateProject, NoSuchProject, NotAuthorized, PeriodClash

logger = logging.getLogger(__name__)


class ProjectCatalog:
    def __init__(self):
        self._projects: Dict[str, Project] = {}
        self._lock = threading.RLock()

    def get(self, name: str) -> Project:
        project = self._projects.get(name)
        if project is None:
            raise NoSuchProject(f"Project '{name}' does not exist")
        return project

    def all_projects(self) -> List[Project]:
        return list(self._projects.values())

    def visible_projects(self) -> List[Project]:
        return [p for p in self._projects.values() if p.visibility]

    def projects_for_manager(self, manager_id: str) -> List[Project]:
        return [p for p in self._projects.values() if p.manager_id == manager_id]

    def _find_clash(
        self,
        manager_id: str,
        opening: date,
        closing: date,
        skip_name: Optional[str] = None,
    ) -> Optional[Project]:
        for project in self.projects_for_manager(manager_id):
            if project.name == skip_name:
                continue
            if project.is_clashing(opening, closing):
                return project
        return None

    def add(self, project: Project) -> None:
        """Insert a stored project as-is. Overlap is only logged, never rejected, on load."""
        with self._lock:
            if project.name in self._projects:
                raise DuplicateProject(f"Project '{project.name}' already exists")
            clash = self._find_clash(project.manager_id, project.opening_date, project.closing_date)
            if clash is not None:
                logger.warning("Loaded project %s overlaps %s for manager %s",
                               project.name, clash.name, project.manager_id)
            self._projects[project.name] = project

    def create(
        self,
        manager_id: str,
        name: str,
        neighbourhood: str,
        opening_date: date,
        closing_date: date,
        two_room_units: int,
        three_room_units: int,
        visibility: bool = True,
        on_publish: Optional[Callable[[Project], None]] = None,
    ) -> Project:
        """Create a project with every unit available.

        ``on_publish`` runs under the catalog lock before the project can be looked up;
        if it raises, nothing is added.
        """
        if closing_date < opening_date:
            raise ValueError(f"Closing date {closing_date} is before opening date {opening_date}")
        if two_room_units < 0 or three_room_units < 0:
            raise ValueError("Unit counts cannot be negative")

        with self._lock:
            if name in self._projects:
                raise DuplicateProject(f"Project '{name}' already exists")
            clash = self._find_clash(manager_id, opening_date, closing_date)
            if clash is not None:
                raise PeriodClash(
                    f"Application period clashes with {clash.name} "
                    f"({clash.opening_date} to {clash.closing_date})"
                )
            project = Project(
                name=name,
                neighbourhood=neighbourhood,
                manager_id=manager_id,
                opening_date=opening_date,
                closing_date=closing_date,
                visibility=visibility,
                inventory=make_inventory(two_room_units, three_room_units),
            )
            if on_publish is not None:
                on_publish(project)
            self._projects[name] = project
            logger.info("Project %s created by %s", name, manager_id)
            return project

    def require_owner(self, manager_id: str, name: str) -> Project:
        project = self.get(name)
        if project.manager_id != manager_id:
            raise NotAuthorized(f"Manager {manager_id} does not own project '{name}'")
        return project

    def edit(
        self,
        manager_id: str,
        name: str,
        neighbourhood: Optional[str] = None,
        opening_date: Optional[date] = None,
        closing_date: Optional[date] = None,
    ) -> Project:
        """Update the owner-editable fields; None keeps the current value."""
        with self._lock:
            project = self.require_owner(manager_id, name)
            opening = opening_date or project.opening_date
            closing = closing_date or project.closing_date
            if closing < opening:
                raise ValueError(f"Closing date {closing} is before opening date {opening}")
            if opening_date is not None or closing_date is not None:
                clash = self._find_clash(manager_id, opening, closing, skip_name=name)
                if clash is not None:
                    raise PeriodClash(f"New application period clashes with {clash.name}")
            if neighbourhood is not None:
                project.neighbourhood = neighbourhood
            project.opening_date = opening
            project.closing_date = closing
            return project

    def set_visibility(self, manager_id: str, name: str, visibility: bool) -> Project:
        with self._lock:
            project = self.require_owner(manager_id, name)
            project.visibility = visibility
            return project

    def remove(self, manager_id: str, name: str) -> Project:
        with self._lock:
            project = self.require_owner(manager_id, name)
            del self._projects[name]
            logger.info("Project %s deleted by %s", name, manager_id)
            return project
