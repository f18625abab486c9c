"""Allocation state machine: the core business engine.

Transitions (initial state is "no application"):

    (none)      --apply-->             Pending
    Pending     --manager_accept-->    Successful   (needs a unit available, none taken yet)
    Pending     --manager_reject-->    Unsuccessful
    Successful  --request_book-->      Successful   (booking_requested flag)
    Successful  --officer_confirm-->   Booked       (takes one unit)
    Successful/Booked --request_withdraw--> same    (withdrawal_pending flag)
    flagged     --accept_withdraw-->   Withdrawn    (Booked gives its unit back)
    flagged     --reject_withdraw-->   same status, flag cleared

Every guard is checked before anything is written, so a rejected call leaves
the ledger and inventory untouched. The ledger lock is held for the whole
transition; the counter lock is held whenever inventory is read or written.
"""

import logging
from datetime import datetime
from typing import List, Optional

from models.applicant import ApplicantProfile
from models.application import ApplicationRecord, ApplicationStatus
from models.audit import AuditEntry
from models.project import Project, UnitType
from engine.catalog import ProjectCatalog
from engine.eligibility import allowed_unit_types
from engine.errors import (
    AlreadyApplied, AlreadyWithdrawing, InvalidTransition, NoUnitsLeft, NotAuthorized, NotEligible,
)
from engine.explainer import explain_eligibility
from engine.inventory import RoomInventoryManager
from engine.ledger import ApplicationLedger
from engine.roster import OfficerAssignmentRegistry

logger = logging.getLogger(__name__)


class AllocationStateMachine:
    def __init__(
        self,
        catalog: ProjectCatalog,
        ledger: ApplicationLedger,
        inventory: RoomInventoryManager,
        roster: OfficerAssignmentRegistry,
        rule_config: Optional[dict] = None,
    ):
        self.catalog = catalog
        self.ledger = ledger
        self.inventory = inventory
        self.roster = roster
        self.rule_config = rule_config or {}
        self.audit_log: List[AuditEntry] = []

    # --- Helpers ---

    def _audit(
        self,
        action: str,
        actor_id: Optional[str],
        record: ApplicationRecord,
        field_changed: str,
        old_value,
        new_value,
        rationale: str = "",
    ) -> None:
        self.audit_log.append(AuditEntry(
            timestamp=datetime.now(),
            action=action,
            actor_id=actor_id,
            subject_id=record.applicant_id,
            project_name=record.project_name,
            field_changed=field_changed,
            old_value=str(old_value),
            new_value=str(new_value),
            rationale=rationale,
        ))

    def _check_manager(self, manager_id: Optional[str], project_name: str) -> None:
        if manager_id is None:
            return
        if self.catalog.get(project_name).manager_id != manager_id:
            raise NotAuthorized(f"Manager {manager_id} does not own project '{project_name}'")

    @staticmethod
    def _require_status(record: ApplicationRecord, *allowed: ApplicationStatus) -> None:
        if record.status not in allowed:
            wanted = " or ".join(s.value for s in allowed)
            raise InvalidTransition(
                f"Application of {record.applicant_id} is {record.status.value}, expected {wanted}"
            )

    def officer_clash(self, applicant_id: str, project: Project) -> Optional[Project]:
        """The project handled by this applicant as an officer that rules out applying to ``project``."""
        for assignment in self.roster.assignments_for_officer(applicant_id):
            handled = self.catalog.get(assignment.project_name)
            if handled.name == project.name or project.is_clashing(handled.opening_date, handled.closing_date):
                return handled
        return None

    def _check_officer_clash(self, applicant_id: str, project: Project) -> None:
        handled = self.officer_clash(applicant_id, project)
        if handled is not None:
            raise NotEligible(
                f"Officer {applicant_id} handles {handled.name}, whose application "
                f"period overlaps {project.name}"
            )

    # --- Transitions ---

    def apply(self, profile: ApplicantProfile, project_name: str, unit_type) -> ApplicationRecord:
        unit_type = UnitType.parse(unit_type)
        with self.ledger.lock:
            current = self.ledger.current_application(profile.applicant_id)
            if current is not None and current.is_active:
                raise AlreadyApplied(
                    f"Applicant {profile.applicant_id} already has a {current.status.value} "
                    f"application for {current.project_name}"
                )

            project = self.catalog.get(project_name)
            if not project.visibility:
                raise NotEligible(f"Project '{project_name}' is not open for applications")
            if unit_type not in allowed_unit_types(profile.age, profile.marital_status, self.rule_config):
                steps = explain_eligibility(profile, project, unit_type, self.rule_config)
                raise NotEligible("; ".join(steps[1:]))
            self._check_officer_clash(profile.applicant_id, project)

            with self.inventory.lock(project_name, unit_type):
                if self.inventory.available(project_name, unit_type) <= 0:
                    raise NoUnitsLeft(f"No {unit_type.value} units left in {project_name}")
                record = self.ledger.begin_application(profile.applicant_id, project_name, unit_type)

            self._audit("apply", profile.applicant_id, record, "status",
                        ApplicationStatus.NONE.value, record.status.value)
            logger.info("%s applied for %s in %s", profile.applicant_id, unit_type.value, project_name)
            return record

    def manager_accept(self, applicant_id: str, manager_id: Optional[str] = None) -> ApplicationRecord:
        with self.ledger.lock:
            record = self.ledger.require(applicant_id)
            self._require_status(record, ApplicationStatus.PENDING)
            self._check_manager(manager_id, record.project_name)
            with self.inventory.lock(record.project_name, record.unit_type):
                if self.inventory.available(record.project_name, record.unit_type) <= 0:
                    raise NoUnitsLeft(
                        f"No {record.unit_type.value} units left in {record.project_name}"
                    )
                record.status = ApplicationStatus.SUCCESSFUL
            self._audit("accept", manager_id, record, "status",
                        ApplicationStatus.PENDING.value, record.status.value)
            logger.info("Application of %s accepted", applicant_id)
            return record

    def manager_reject(self, applicant_id: str, manager_id: Optional[str] = None) -> ApplicationRecord:
        with self.ledger.lock:
            record = self.ledger.require(applicant_id)
            self._require_status(record, ApplicationStatus.PENDING)
            self._check_manager(manager_id, record.project_name)
            record.status = ApplicationStatus.UNSUCCESSFUL
            self._audit("reject", manager_id, record, "status",
                        ApplicationStatus.PENDING.value, record.status.value)
            logger.info("Application of %s rejected", applicant_id)
            return record

    def request_book(self, applicant_id: str) -> ApplicationRecord:
        with self.ledger.lock:
            record = self.ledger.require(applicant_id)
            self._require_status(record, ApplicationStatus.SUCCESSFUL)
            if record.withdrawal_pending:
                raise InvalidTransition(f"Applicant {applicant_id} has a withdrawal pending")
            if not record.booking_requested:
                record.booking_requested = True
                self._audit("request_book", applicant_id, record, "booking_requested", False, True)
                logger.info("%s requested booking, awaiting officer", applicant_id)
            return record

    def officer_confirm_book(self, applicant_id: str, officer_id: Optional[str] = None) -> ApplicationRecord:
        with self.ledger.lock:
            record = self.ledger.require(applicant_id)
            self._require_status(record, ApplicationStatus.SUCCESSFUL)
            if record.withdrawal_pending:
                raise InvalidTransition(f"Applicant {applicant_id} has a withdrawal pending")
            if officer_id is not None and not self.roster.is_approved(officer_id, record.project_name):
                raise NotAuthorized(
                    f"Officer {officer_id} is not approved for project {record.project_name}"
                )
            with self.inventory.lock(record.project_name, record.unit_type):
                if not self.inventory.try_reserve(record.project_name, record.unit_type):
                    raise NoUnitsLeft(
                        f"No {record.unit_type.value} units left in {record.project_name}"
                    )
                record.status = ApplicationStatus.BOOKED
                record.booking_requested = False
            self._audit("book", officer_id, record, "status",
                        ApplicationStatus.SUCCESSFUL.value, record.status.value)
            logger.info("%s booked a %s unit in %s", applicant_id,
                        record.unit_type.value, record.project_name)
            return record

    def request_withdraw(self, applicant_id: str) -> ApplicationRecord:
        with self.ledger.lock:
            record = self.ledger.require(applicant_id)
            self._require_status(record, ApplicationStatus.SUCCESSFUL, ApplicationStatus.BOOKED)
            if record.withdrawal_pending:
                raise AlreadyWithdrawing(
                    f"Applicant {applicant_id} already has a withdrawal awaiting decision"
                )
            record.withdrawal_pending = True
            self._audit("request_withdraw", applicant_id, record, "withdrawal_pending", False, True)
            logger.info("%s requested withdrawal from %s", applicant_id, record.project_name)
            return record

    def _require_withdrawal(self, applicant_id: str) -> ApplicationRecord:
        record = self.ledger.require(applicant_id)
        if not record.withdrawal_pending:
            raise InvalidTransition(f"Applicant {applicant_id} has no withdrawal pending")
        return record

    def manager_accept_withdraw(self, applicant_id: str, manager_id: Optional[str] = None) -> ApplicationRecord:
        with self.ledger.lock:
            record = self._require_withdrawal(applicant_id)
            self._check_manager(manager_id, record.project_name)
            old_status = record.status
            if old_status == ApplicationStatus.BOOKED:
                with self.inventory.lock(record.project_name, record.unit_type):
                    self.inventory.release(record.project_name, record.unit_type)
                    record.status = ApplicationStatus.WITHDRAWN
            else:
                record.status = ApplicationStatus.WITHDRAWN
            record.withdrawal_pending = False
            record.booking_requested = False
            self._audit("accept_withdraw", manager_id, record, "status",
                        old_status.value, record.status.value)
            logger.info("Withdrawal of %s from %s accepted", applicant_id, record.project_name)
            return record

    def manager_reject_withdraw(self, applicant_id: str, manager_id: Optional[str] = None) -> ApplicationRecord:
        with self.ledger.lock:
            record = self._require_withdrawal(applicant_id)
            self._check_manager(manager_id, record.project_name)
            record.withdrawal_pending = False
            self._audit("reject_withdraw", manager_id, record, "withdrawal_pending", True, False)
            logger.info("Withdrawal of %s from %s rejected", applicant_id, record.project_name)
            return record
