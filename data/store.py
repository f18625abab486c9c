"""Record store interface consumed by the allocation core, plus an in-memory implementation."""

import copy
from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Union

from models.applicant import ApplicantProfile
from models.application import ApplicationRecord
from models.officer import OfficerAssignment
from models.project import Project

Record = Union[Project, ApplicantProfile, ApplicationRecord, OfficerAssignment]


@dataclass
class Snapshot:
    """Full in-memory state of the allocation core."""
    projects: List[Project] = field(default_factory=list)
    applicants: List[ApplicantProfile] = field(default_factory=list)
    applications: List[ApplicationRecord] = field(default_factory=list)
    assignments: List[OfficerAssignment] = field(default_factory=list)


class RecordStore:
    """Durable storage for the core. Subclasses decide the format."""

    def load_projects(self) -> List[Project]:
        raise NotImplementedError

    def load_applicants(self) -> List[ApplicantProfile]:
        raise NotImplementedError

    def load_applications(self) -> List[ApplicationRecord]:
        raise NotImplementedError

    def load_assignments(self) -> List[OfficerAssignment]:
        raise NotImplementedError

    def persist(self, record: Record) -> None:
        raise NotImplementedError

    def delete_project(self, project_name: str) -> None:
        """Remove a project together with its roster and every application record naming it."""
        raise NotImplementedError

    def delete_assignment(self, officer_id: str, project_name: str) -> None:
        raise NotImplementedError

    def load_snapshot(self) -> Snapshot:
        return Snapshot(
            projects=self.load_projects(),
            applicants=self.load_applicants(),
            applications=self.load_applications(),
            assignments=self.load_assignments(),
        )


class InMemoryRecordStore(RecordStore):
    """Keeps deep copies of every persisted record, keyed by identity."""

    def __init__(self, snapshot: Snapshot = None):
        self.projects: Dict[str, Project] = {}
        self.applicants: Dict[str, ApplicantProfile] = {}
        self.applications: Dict[str, ApplicationRecord] = {}
        self.history: List[ApplicationRecord] = []
        self.assignments: Dict[Tuple[str, str], OfficerAssignment] = {}
        if snapshot is not None:
            for record in (snapshot.projects + snapshot.applicants
                           + snapshot.applications + snapshot.assignments):
                self.persist(record)

    def load_projects(self) -> List[Project]:
        return copy.deepcopy(list(self.projects.values()))

    def load_applicants(self) -> List[ApplicantProfile]:
        return copy.deepcopy(list(self.applicants.values()))

    def load_applications(self) -> List[ApplicationRecord]:
        return copy.deepcopy(self.history + list(self.applications.values()))

    def load_assignments(self) -> List[OfficerAssignment]:
        return copy.deepcopy(list(self.assignments.values()))

    def persist(self, record: Record) -> None:
        record = copy.deepcopy(record)
        if isinstance(record, Project):
            self.projects[record.name] = record
        elif isinstance(record, ApplicantProfile):
            self.applicants[record.applicant_id] = record
        elif isinstance(record, ApplicationRecord):
            previous = self.applications.get(record.applicant_id)
            if previous is not None and previous.project_name != record.project_name:
                self.history.append(previous)
            elif previous is not None and not previous.is_active and record.is_active:
                self.history.append(previous)
            self.applications[record.applicant_id] = record
        elif isinstance(record, OfficerAssignment):
            self.assignments[(record.project_name, record.officer_id)] = record
        else:
            raise TypeError(f"Cannot persist {type(record).__name__}")

    def delete_project(self, project_name: str) -> None:
        self.projects.pop(project_name, None)
        for key in [k for k in self.assignments if k[0] == project_name]:
            del self.assignments[key]
        self.history = [r for r in self.history if r.project_name != project_name]
        for applicant_id in [a for a, r in self.applications.items() if r.project_name == project_name]:
            del self.applications[applicant_id]

    def delete_assignment(self, officer_id: str, project_name: str) -> None:
        self.assignments.pop((project_name, officer_id), None)
