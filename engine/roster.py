"""Officer assignment registry: per-project pending and approved officer rosters."""

import logging
import threading
from typing import Dict, List, Optional

from models.officer import AssignmentState, OfficerAssignment
from engine.errors import InvalidTransition, RosterFull
from config.defaults import MAX_OFFICERS_PER_PROJECT

logger = logging.getLogger(__name__)


class OfficerAssignmentRegistry:
    def __init__(self, rule_config: Optional[dict] = None):
        cfg = rule_config or {}
        self.max_officers = cfg.get("max_officers_per_project", MAX_OFFICERS_PER_PROJECT)
        # project name -> officer id -> assignment
        self._assignments: Dict[str, Dict[str, OfficerAssignment]] = {}
        self.lock = threading.RLock()

    def state(self, officer_id: str, project_name: str) -> Optional[AssignmentState]:
        assignment = self._assignments.get(project_name, {}).get(officer_id)
        return assignment.state if assignment else None

    def is_approved(self, officer_id: str, project_name: str) -> bool:
        return self.state(officer_id, project_name) == AssignmentState.APPROVED

    def _filter(self, project_name: str, state: AssignmentState) -> List[str]:
        with self.lock:
            return [
                a.officer_id for a in self._assignments.get(project_name, {}).values()
                if a.state == state
            ]

    def approved_officers(self, project_name: str) -> List[str]:
        return self._filter(project_name, AssignmentState.APPROVED)

    def pending_officers(self, project_name: str) -> List[str]:
        return self._filter(project_name, AssignmentState.PENDING)

    def approved_count(self, project_name: str) -> int:
        return len(self.approved_officers(project_name))

    def assignments_for_officer(self, officer_id: str) -> List[OfficerAssignment]:
        with self.lock:
            return [
                roster[officer_id]
                for roster in self._assignments.values()
                if officer_id in roster
            ]

    def all_assignments(self) -> List[OfficerAssignment]:
        with self.lock:
            return [a for roster in self._assignments.values() for a in roster.values()]

    def request_assignment(self, officer_id: str, project_name: str) -> OfficerAssignment:
        with self.lock:
            roster = self._assignments.setdefault(project_name, {})
            existing = roster.get(officer_id)
            if existing is not None:
                raise InvalidTransition(
                    f"Officer {officer_id} is already {existing.state.value.lower()} "
                    f"for project {project_name}"
                )
            assignment = OfficerAssignment(project_name=project_name, officer_id=officer_id)
            roster[officer_id] = assignment
            logger.info("Officer %s requested assignment to %s", officer_id, project_name)
            return assignment

    def decide(self, officer_id: str, project_name: str, approve: bool) -> Optional[OfficerAssignment]:
        """Approve or reject a pending registration. Returns the assignment, or None when rejected."""
        with self.lock:
            roster = self._assignments.get(project_name, {})
            assignment = roster.get(officer_id)
            if assignment is None or assignment.state != AssignmentState.PENDING:
                raise InvalidTransition(
                    f"Officer {officer_id} has no pending registration for project {project_name}"
                )
            if not approve:
                del roster[officer_id]
                logger.info("Officer %s registration for %s rejected", officer_id, project_name)
                return None
            if self.approved_count(project_name) >= self.max_officers:
                raise RosterFull(
                    f"Project {project_name} already has {self.max_officers} approved officers"
                )
            assignment.state = AssignmentState.APPROVED
            logger.info("Officer %s approved for %s", officer_id, project_name)
            return assignment

    def restore(self, assignment: OfficerAssignment) -> None:
        with self.lock:
            roster = self._assignments.setdefault(assignment.project_name, {})
            if (assignment.state == AssignmentState.APPROVED
                    and assignment.officer_id not in roster
                    and self.approved_count(assignment.project_name) >= self.max_officers):
                raise RosterFull(
                    f"Stored roster for {assignment.project_name} exceeds {self.max_officers} officers"
                )
            roster[assignment.officer_id] = assignment

    def drop_project(self, project_name: str) -> None:
        with self.lock:
            self._assignments.pop(project_name, None)
