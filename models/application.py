from dataclasses import dataclass
from enum import Enum

from models.project import UnitType


class ApplicationStatus(str, Enum):
    NONE = "None"
    PENDING = "Pending"
    SUCCESSFUL = "Successful"
    UNSUCCESSFUL = "Unsuccessful"
    BOOKED = "Booked"
    WITHDRAWN = "Withdrawn"

    @classmethod
    def parse(cls, value) -> "ApplicationStatus":
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        raise ValueError(f"Unknown application status: {value!r}")


ACTIVE_STATUSES = frozenset({
    ApplicationStatus.PENDING,
    ApplicationStatus.SUCCESSFUL,
    ApplicationStatus.BOOKED,
})


@dataclass
class ApplicationRecord:
    applicant_id: str
    project_name: str
    unit_type: UnitType
    status: ApplicationStatus = ApplicationStatus.PENDING
    withdrawal_pending: bool = False    # Manager decision awaited; only on Successful/Booked
    booking_requested: bool = False     # Officer confirmation awaited; only on Successful

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES
