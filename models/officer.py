from dataclasses import dataclass
from enum import Enum


class AssignmentState(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"


@dataclass
class OfficerAssignment:
    project_name: str
    officer_id: str
    state: AssignmentState = AssignmentState.PENDING
