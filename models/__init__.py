from models.project import Project, UnitInventory, UnitType, make_inventory
from models.applicant import ApplicantProfile, MaritalStatus
from models.application import ACTIVE_STATUSES, ApplicationRecord, ApplicationStatus
from models.officer import AssignmentState, OfficerAssignment
from models.audit import AuditEntry
from models.result import ErrorKind, Result
