"""Application ledger: one current record per applicant, terminal records kept as history."""

import logging
import threading
from typing import Dict, List, Optional

from models.application import ApplicationRecord, ApplicationStatus
from models.project import UnitType
from engine.errors import AlreadyApplied, NoSuchApplication

logger = logging.getLogger(__name__)


class ApplicationLedger:
    def __init__(self):
        self._current: Dict[str, ApplicationRecord] = {}
        self._history: List[ApplicationRecord] = []
        # Held by the state machine for the full length of each transition
        self.lock = threading.RLock()

    def current_application(self, applicant_id: str) -> Optional[ApplicationRecord]:
        return self._current.get(applicant_id)

    def require(self, applicant_id: str) -> ApplicationRecord:
        record = self._current.get(applicant_id)
        if record is None:
            raise NoSuchApplication(f"No application found for applicant {applicant_id}")
        return record

    def has_active(self, applicant_id: str) -> bool:
        record = self._current.get(applicant_id)
        return record is not None and record.is_active

    def begin_application(self, applicant_id: str, project_name: str, unit_type) -> ApplicationRecord:
        """Create a Pending record. Fails if the applicant already holds an active one."""
        with self.lock:
            existing = self._current.get(applicant_id)
            if existing is not None and existing.is_active:
                raise AlreadyApplied(
                    f"Applicant {applicant_id} already has a {existing.status.value} "
                    f"application for {existing.project_name}"
                )
            record = ApplicationRecord(
                applicant_id=applicant_id,
                project_name=project_name,
                unit_type=UnitType.parse(unit_type),
                status=ApplicationStatus.PENDING,
            )
            if existing is not None:
                self._history.append(existing)
            self._current[applicant_id] = record
            return record

    def restore(self, record: ApplicationRecord) -> None:
        """Load a stored record, keeping the single-active-application invariant."""
        with self.lock:
            existing = self._current.get(record.applicant_id)
            if existing is None:
                self._current[record.applicant_id] = record
            elif not record.is_active:
                if existing.is_active:
                    self._history.append(record)
                else:
                    self._history.append(existing)
                    self._current[record.applicant_id] = record
            elif existing.is_active:
                raise AlreadyApplied(
                    f"Applicant {record.applicant_id} has more than one active application"
                )
            else:
                self._history.append(existing)
                self._current[record.applicant_id] = record

    def drop_project(self, project_name: str) -> List[ApplicationRecord]:
        """Remove every current and historical record for a deleted project.

        Callers must make sure none of them is active. An applicant whose current
        record goes falls back to their latest remaining history record, the same
        record ``restore`` would make current on reload.
        """
        with self.lock:
            dropped = [r for r in self._history if r.project_name == project_name]
            self._history = [r for r in self._history if r.project_name != project_name]
            for applicant_id, record in list(self._current.items()):
                if record.project_name != project_name:
                    continue
                dropped.append(record)
                del self._current[applicant_id]
                earlier = [r for r in self._history if r.applicant_id == applicant_id]
                if earlier:
                    self._history.remove(earlier[-1])
                    self._current[applicant_id] = earlier[-1]
            if dropped:
                logger.info("Dropped %d closed application(s) for deleted project %s",
                            len(dropped), project_name)
            return dropped

    # --- Derived views ---

    def records(self, include_history: bool = False) -> List[ApplicationRecord]:
        current = list(self._current.values())
        return self._history + current if include_history else current

    def for_project(self, project_name: str, status: Optional[ApplicationStatus] = None) -> List[ApplicationRecord]:
        return [
            r for r in self._current.values()
            if r.project_name == project_name and (status is None or r.status == status)
        ]

    def withdrawal_requests(self, project_name: Optional[str] = None) -> List[ApplicationRecord]:
        return [
            r for r in self._current.values()
            if r.withdrawal_pending and (project_name is None or r.project_name == project_name)
        ]

    def booked_count(self, project_name: str, unit_type) -> int:
        unit_type = UnitType.parse(unit_type)
        return sum(
            1 for r in self._current.values()
            if r.project_name == project_name
            and r.unit_type == unit_type
            and r.status == ApplicationStatus.BOOKED
        )
