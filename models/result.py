from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    NOT_ELIGIBLE = "NotEligible"
    ALREADY_APPLIED = "AlreadyApplied"
    INVALID_TRANSITION = "InvalidTransition"
    NO_UNITS_LEFT = "NoUnitsLeft"
    ROSTER_FULL = "RosterFull"
    ALREADY_WITHDRAWING = "AlreadyWithdrawing"
    NO_SUCH_APPLICATION = "NoSuchApplication"
    NO_SUCH_PROJECT = "NoSuchProject"
    DUPLICATE_PROJECT = "DuplicateProject"
    PERIOD_CLASH = "PeriodClash"
    NOT_AUTHORIZED = "NotAuthorized"
    PERSISTENCE_FAILED = "PersistenceFailed"


@dataclass
class Result:
    """Outcome of an inbound operation: a value on success, one error kind on failure."""
    ok: bool
    value: Any = None
    error: Optional[ErrorKind] = None
    message: str = ""

    @classmethod
    def success(cls, value: Any = None, message: str = "") -> "Result":
        return cls(ok=True, value=value, message=message)

    @classmethod
    def failure(cls, error: ErrorKind, message: str = "") -> "Result":
        return cls(ok=False, error=error, message=message)

    def __bool__(self) -> bool:
        return self.ok
