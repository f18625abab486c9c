"""Inbound API of the allocation core.

Every operation returns a ``Result``; engine errors are turned into
``Result.failure`` and never escape. ``InventoryOverflow`` is the one
exception that does escape: it means the counters are already corrupt.
"""

import copy
import logging
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Union

import pandas as pd

from models.applicant import ApplicantProfile
from models.application import ApplicationRecord, ApplicationStatus
from models.audit import AuditEntry
from models.officer import AssignmentState
from models.project import Project, UnitType
from models.result import ErrorKind, Result
from engine.catalog import ProjectCatalog
from engine.eligibility import eligible_unit_types, filter_eligible_projects
from engine.errors import (
    AllocationError, InvalidTransition, NotAuthorized, NotEligible, PeriodClash, PersistenceFailed,
)
from engine.inventory import RoomInventoryManager
from engine.ledger import ApplicationLedger
from engine.reporting import applications_by_status, booking_report, inventory_summary
from engine.roster import OfficerAssignmentRegistry
from engine.state_machine import AllocationStateMachine
from data.store import RecordStore, Snapshot

logger = logging.getLogger(__name__)


class AllocationService:
    def __init__(self, rule_config: Optional[dict] = None, store: Optional[RecordStore] = None):
        self.rule_config = rule_config or {}
        self.store = store
        self.catalog = ProjectCatalog()
        self.ledger = ApplicationLedger()
        self.inventory = RoomInventoryManager()
        self.roster = OfficerAssignmentRegistry(self.rule_config)
        self.machine = AllocationStateMachine(
            self.catalog, self.ledger, self.inventory, self.roster, self.rule_config,
        )
        self.profiles: Dict[str, ApplicantProfile] = {}

    # --- Construction & serialization ---

    @classmethod
    def from_snapshot(
        cls,
        snapshot: Snapshot,
        rule_config: Optional[dict] = None,
        store: Optional[RecordStore] = None,
    ) -> "AllocationService":
        """Build the core from stored records. Raises ValueError on inconsistent data."""
        service = cls(rule_config, store)
        snapshot = copy.deepcopy(snapshot)
        for profile in snapshot.applicants:
            service.profiles[profile.applicant_id] = profile
        try:
            for project in snapshot.projects:
                service.catalog.add(project)
                service.inventory.register(project)
            for record in snapshot.applications:
                service.catalog.get(record.project_name)
                service.ledger.restore(record)
            for assignment in snapshot.assignments:
                service.catalog.get(assignment.project_name)
                service.roster.restore(assignment)
        except AllocationError as exc:
            raise ValueError(f"Inconsistent snapshot: {exc.message}") from exc

        for project in service.catalog.all_projects():
            for unit_type in UnitType:
                booked = service.ledger.booked_count(project.name, unit_type)
                if project.available(unit_type) + booked != project.total(unit_type):
                    logger.warning(
                        "%s / %s: available (%d) + booked (%d) != total (%d)",
                        project.name, unit_type.value, project.available(unit_type),
                        booked, project.total(unit_type),
                    )
        logger.info("Loaded %d projects, %d applicants, %d applications, %d officer assignments",
                    len(snapshot.projects), len(snapshot.applicants),
                    len(snapshot.applications), len(snapshot.assignments))
        return service

    @classmethod
    def from_store(cls, store: RecordStore, rule_config: Optional[dict] = None) -> "AllocationService":
        return cls.from_snapshot(store.load_snapshot(), rule_config, store)

    def snapshot(self) -> Snapshot:
        """Deep copy of the full state, current and historical records included."""
        with self.ledger.lock, self.roster.lock:
            return copy.deepcopy(Snapshot(
                projects=self.catalog.all_projects(),
                applicants=list(self.profiles.values()),
                applications=self.ledger.records(include_history=True),
                assignments=self.roster.all_assignments(),
            ))

    def _store_call(self, method: str, *args) -> None:
        """Forward one write to the record store. A failure leaves memory ahead of the store."""
        if self.store is None:
            return
        try:
            getattr(self.store, method)(*args)
        except Exception as exc:
            logger.error("Record store %s failed, in-memory state is no longer saved: %s", method, exc)
            raise PersistenceFailed(f"Change applied but not saved ({method}): {exc}") from exc

    def _persist(self, *records) -> None:
        for record in records:
            self._store_call("persist", record)

    def _run(
        self,
        action: str,
        fn: Callable,
        value_error_kind: ErrorKind = ErrorKind.INVALID_TRANSITION,
    ) -> Result:
        try:
            value = fn()
        except AllocationError as exc:
            logger.warning("%s rejected (%s): %s", action, exc.kind.value, exc.message)
            return Result.failure(exc.kind, exc.message)
        except ValueError as exc:
            logger.warning("%s rejected: %s", action, exc)
            return Result.failure(value_error_kind, str(exc))
        return Result.success(value)

    @property
    def audit_log(self) -> List[AuditEntry]:
        return self.machine.audit_log

    def _audit(self, action: str, actor_id: Optional[str], subject_id: str,
               project_name: Optional[str], field_changed: str, old_value, new_value) -> None:
        self.machine.audit_log.append(AuditEntry(
            timestamp=datetime.now(),
            action=action,
            actor_id=actor_id,
            subject_id=subject_id,
            project_name=project_name,
            field_changed=field_changed,
            old_value=str(old_value),
            new_value=str(new_value),
        ))

    # --- Applicants ---

    def register_applicant(self, profile: ApplicantProfile) -> Result:
        def op():
            if profile.age < 0:
                raise ValueError(f"Invalid age {profile.age} for {profile.applicant_id}")
            self.profiles[profile.applicant_id] = copy.deepcopy(profile)
            self._persist(profile)
            return profile.applicant_id
        return self._run("register_applicant", op)

    def _profile(self, applicant: Union[str, ApplicantProfile]) -> ApplicantProfile:
        if isinstance(applicant, ApplicantProfile):
            return applicant
        profile = self.profiles.get(applicant)
        if profile is None:
            raise NotEligible(f"Unknown applicant {applicant}")
        return profile

    def list_eligible_projects(
        self,
        applicant: Union[str, ApplicantProfile],
        neighbourhood: Optional[str] = None,
    ) -> Result:
        """Visible projects the applicant could apply to now; empty while an application is active."""
        def op():
            profile = self._profile(applicant)
            if self.ledger.has_active(profile.applicant_id):
                return []
            projects = [
                p for p in filter_eligible_projects(
                    profile.age, profile.marital_status, self.catalog.visible_projects(),
                    neighbourhood, self.rule_config,
                )
                if self.machine.officer_clash(profile.applicant_id, p) is None
            ]
            return copy.deepcopy(sorted(projects, key=lambda p: p.name))
        return self._run("list_eligible_projects", op)

    def eligible_unit_types(self, applicant_id: str, project_name: str) -> Result:
        def op():
            profile = self._profile(applicant_id)
            project = self.catalog.get(project_name)
            return eligible_unit_types(profile.age, profile.marital_status, project, self.rule_config)
        return self._run("eligible_unit_types", op)

    def apply(self, applicant_id: str, project_name: str, unit_type) -> Result:
        def op():
            profile = self._profile(applicant_id)
            record = self.machine.apply(profile, project_name, unit_type)
            self._persist(record)
            return copy.deepcopy(record)
        return self._run("apply", op, value_error_kind=ErrorKind.NOT_ELIGIBLE)

    def application_status(self, applicant_id: str) -> ApplicationStatus:
        record = self.ledger.current_application(applicant_id)
        return record.status if record else ApplicationStatus.NONE

    def current_application(self, applicant_id: str) -> Optional[ApplicationRecord]:
        return copy.deepcopy(self.ledger.current_application(applicant_id))

    def applications(
        self,
        project_name: Optional[str] = None,
        status: Optional[ApplicationStatus] = None,
    ) -> List[ApplicationRecord]:
        records = self.ledger.records()
        return copy.deepcopy([
            r for r in records
            if (project_name is None or r.project_name == project_name)
            and (status is None or r.status == status)
        ])

    def request_booking(self, applicant_id: str) -> Result:
        def op():
            record = self.machine.request_book(applicant_id)
            self._persist(record)
            return copy.deepcopy(record)
        return self._run("request_booking", op)

    def request_withdrawal(self, applicant_id: str) -> Result:
        def op():
            record = self.machine.request_withdraw(applicant_id)
            self._persist(record)
            return copy.deepcopy(record)
        return self._run("request_withdrawal", op)

    # --- Managers: applications ---

    def manager_decide_application(self, applicant_id: str, accept: bool, manager_id: Optional[str] = None) -> Result:
        def op():
            if accept:
                record = self.machine.manager_accept(applicant_id, manager_id)
            else:
                record = self.machine.manager_reject(applicant_id, manager_id)
            self._persist(record)
            return copy.deepcopy(record)
        return self._run("manager_decide_application", op)

    def manager_decide_withdrawal(self, applicant_id: str, accept: bool, manager_id: Optional[str] = None) -> Result:
        def op():
            if accept:
                record = self.machine.manager_accept_withdraw(applicant_id, manager_id)
                self._persist(record, self.catalog.get(record.project_name))
            else:
                record = self.machine.manager_reject_withdraw(applicant_id, manager_id)
                self._persist(record)
            return copy.deepcopy(record)
        return self._run("manager_decide_withdrawal", op)

    # --- Officers ---

    def officer_confirm_booking(self, applicant_id: str, officer_id: Optional[str] = None) -> Result:
        def op():
            record = self.machine.officer_confirm_book(applicant_id, officer_id)
            self._persist(record, self.catalog.get(record.project_name))
            return copy.deepcopy(record)
        return self._run("officer_confirm_booking", op)

    def request_officer_assignment(self, officer_id: str, project_name: str) -> Result:
        def op():
            with self.ledger.lock, self.roster.lock:
                project = self.catalog.get(project_name)
                record = self.ledger.current_application(officer_id)
                if record is not None and record.is_active and record.project_name == project_name:
                    raise InvalidTransition(
                        f"Officer {officer_id} has an active application for {project_name}"
                    )
                for assignment in self.roster.assignments_for_officer(officer_id):
                    if assignment.project_name == project_name:
                        continue
                    other = self.catalog.get(assignment.project_name)
                    if project.is_clashing(other.opening_date, other.closing_date):
                        raise PeriodClash(
                            f"{project_name} overlaps {other.name}, already "
                            f"{assignment.state.value.lower()} for officer {officer_id}"
                        )
                assignment = self.roster.request_assignment(officer_id, project_name)
            self._audit("request_assignment", officer_id, officer_id, project_name,
                        "assignment", "", assignment.state.value)
            self._persist(assignment)
            return copy.deepcopy(assignment)
        return self._run("request_officer_assignment", op)

    def manager_decide_officer_assignment(
        self,
        officer_id: str,
        project_name: str,
        accept: bool,
        manager_id: Optional[str] = None,
    ) -> Result:
        def op():
            if manager_id is not None:
                self.catalog.require_owner(manager_id, project_name)
            assignment = self.roster.decide(officer_id, project_name, accept)
            new_state = assignment.state.value if assignment else "Rejected"
            self._audit("decide_assignment", manager_id, officer_id, project_name,
                        "assignment", AssignmentState.PENDING.value, new_state)
            if assignment is not None:
                self._persist(assignment)
            else:
                self._store_call("delete_assignment", officer_id, project_name)
            return copy.deepcopy(assignment)
        return self._run("manager_decide_officer_assignment", op)

    def approved_officers(self, project_name: str) -> List[str]:
        return self.roster.approved_officers(project_name)

    def pending_officers(self, project_name: str) -> List[str]:
        return self.roster.pending_officers(project_name)

    def generate_receipt(self, applicant_id: str, officer_id: Optional[str] = None) -> Result:
        """Booking receipt for a Booked applicant."""
        def op():
            record = self.ledger.require(applicant_id)
            if record.status != ApplicationStatus.BOOKED:
                raise InvalidTransition(f"Applicant {applicant_id} has not booked a unit")
            if officer_id is not None and not self.roster.is_approved(officer_id, record.project_name):
                raise NotAuthorized(
                    f"Officer {officer_id} is not approved for project {record.project_name}"
                )
            project = self.catalog.get(record.project_name)
            profile = self.profiles.get(applicant_id)
            return {
                "applicant_id": applicant_id,
                "name": profile.name if profile else "",
                "age": profile.age if profile else None,
                "marital_status": profile.marital_status.value if profile else "",
                "project": project.name,
                "neighbourhood": project.neighbourhood,
                "unit_type": record.unit_type.value,
                "issued_by": officer_id,
            }
        return self._run("generate_receipt", op)

    # --- Managers: projects ---

    def create_project(
        self,
        manager_id: str,
        name: str,
        neighbourhood: str,
        opening_date: date,
        closing_date: date,
        two_room_units: int,
        three_room_units: int,
        visibility: bool = True,
    ) -> Result:
        def op():
            project = self.catalog.create(
                manager_id, name, neighbourhood, opening_date, closing_date,
                two_room_units, three_room_units, visibility,
                on_publish=self.inventory.register,
            )
            self._audit("create_project", manager_id, name, name, "project", "",
                        f"2-room={two_room_units}, 3-room={three_room_units}")
            self._persist(project)
            return copy.deepcopy(project)
        return self._run("create_project", op)

    def edit_project(
        self,
        manager_id: str,
        name: str,
        neighbourhood: Optional[str] = None,
        opening_date: Optional[date] = None,
        closing_date: Optional[date] = None,
    ) -> Result:
        def op():
            before = copy.deepcopy(self.catalog.require_owner(manager_id, name))
            project = self.catalog.edit(manager_id, name, neighbourhood, opening_date, closing_date)
            self._audit("edit_project", manager_id, name, name, "details",
                        f"{before.neighbourhood}, {before.opening_date} to {before.closing_date}",
                        f"{project.neighbourhood}, {project.opening_date} to {project.closing_date}")
            self._persist(project)
            return copy.deepcopy(project)
        return self._run("edit_project", op)

    def toggle_visibility(self, manager_id: str, name: str) -> Result:
        def op():
            current = self.catalog.require_owner(manager_id, name).visibility
            project = self.catalog.set_visibility(manager_id, name, not current)
            self._audit("toggle_visibility", manager_id, name, name, "visibility",
                        current, project.visibility)
            self._persist(project)
            return copy.deepcopy(project)
        return self._run("toggle_visibility", op)

    def delete_project(self, manager_id: str, name: str) -> Result:
        def op():
            with self.ledger.lock, self.roster.lock:
                self.catalog.require_owner(manager_id, name)
                active = [r for r in self.ledger.for_project(name) if r.is_active]
                if active:
                    raise InvalidTransition(
                        f"Project {name} still has {len(active)} active application(s)"
                    )
                if self.roster.approved_officers(name):
                    raise InvalidTransition(f"Project {name} still has approved officers")
                self.catalog.remove(manager_id, name)
                self.inventory.unregister(name)
                self.roster.drop_project(name)
                closed = self.ledger.drop_project(name)
            self._audit("delete_project", manager_id, name, name, "project", name,
                        f"{len(closed)} closed application(s) removed")
            self._store_call("delete_project", name)
            return name
        return self._run("delete_project", op)

    def project(self, name: str) -> Result:
        return self._run("project", lambda: copy.deepcopy(self.catalog.get(name)))

    def projects(self, manager_id: Optional[str] = None) -> List[Project]:
        if manager_id is None:
            return copy.deepcopy(self.catalog.all_projects())
        return copy.deepcopy(self.catalog.projects_for_manager(manager_id))

    # --- Reporting ---

    def booking_report(self, project_name: Optional[str] = None, filter_key: str = "all") -> Result:
        def op():
            records = self.ledger.records()
            if project_name is not None:
                self.catalog.get(project_name)
                records = [r for r in records if r.project_name == project_name]
            projects = {p.name: p for p in self.catalog.all_projects()}
            return booking_report(records, self.profiles, projects, filter_key)
        return self._run("booking_report", op)

    def inventory_summary(self) -> pd.DataFrame:
        return inventory_summary(self.catalog.all_projects(), self.ledger.records())

    def applications_by_status(self, project_name: Optional[str] = None) -> Dict[str, int]:
        return applications_by_status(self.ledger.records(), project_name)
