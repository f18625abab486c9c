from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class AuditEntry:
    timestamp: datetime
    action: str              # "apply", "accept", "reject", "book", "withdraw", "assign", "create_project", ...
    actor_id: Optional[str]
    subject_id: str          # applicant, officer or project the action applies to
    project_name: Optional[str]
    field_changed: str
    old_value: str
    new_value: str
    rationale: str = ""
