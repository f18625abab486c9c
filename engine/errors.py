"""Typed errors raised by the allocation engine."""

from models.result import ErrorKind


class AllocationError(Exception):
    """A rejected operation. State is left exactly as it was before the call."""
    kind: ErrorKind = ErrorKind.INVALID_TRANSITION

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind.value)
        self.message = message or self.kind.value


class NotEligible(AllocationError):
    kind = ErrorKind.NOT_ELIGIBLE


class AlreadyApplied(AllocationError):
    kind = ErrorKind.ALREADY_APPLIED


class InvalidTransition(AllocationError):
    kind = ErrorKind.INVALID_TRANSITION


class NoUnitsLeft(AllocationError):
    kind = ErrorKind.NO_UNITS_LEFT


class RosterFull(AllocationError):
    kind = ErrorKind.ROSTER_FULL


class AlreadyWithdrawing(AllocationError):
    kind = ErrorKind.ALREADY_WITHDRAWING


class NoSuchApplication(AllocationError):
    kind = ErrorKind.NO_SUCH_APPLICATION


class NoSuchProject(AllocationError):
    kind = ErrorKind.NO_SUCH_PROJECT


class DuplicateProject(AllocationError):
    kind = ErrorKind.DUPLICATE_PROJECT


class PeriodClash(AllocationError):
    kind = ErrorKind.PERIOD_CLASH


class NotAuthorized(AllocationError):
    kind = ErrorKind.NOT_AUTHORIZED


class PersistenceFailed(AllocationError):
    """The record store refused a write. The in-memory change has already been made."""
    kind = ErrorKind.PERSISTENCE_FAILED


class InventoryOverflow(RuntimeError):
    """A release would push available above total. Internal-consistency bug, never a user error."""
