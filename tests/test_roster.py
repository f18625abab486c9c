"""Tests for the officer assignment registry."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from models.officer import AssignmentState, OfficerAssignment
from engine.errors import InvalidTransition, RosterFull
from engine.roster import OfficerAssignmentRegistry


def make_full_roster(project="Acacia Breeze", size=10):
    registry = OfficerAssignmentRegistry()
    for i in range(size):
        registry.restore(OfficerAssignment(project, f"T{i}", AssignmentState.APPROVED))
    return registry


class TestRequestAssignment:
    def test_request_is_pending(self):
        registry = OfficerAssignmentRegistry()
        assignment = registry.request_assignment("T1", "Acacia Breeze")
        assert assignment.state == AssignmentState.PENDING
        assert registry.pending_officers("Acacia Breeze") == ["T1"]

    def test_repeat_request_rejected(self):
        registry = OfficerAssignmentRegistry()
        registry.request_assignment("T1", "Acacia Breeze")
        with pytest.raises(InvalidTransition):
            registry.request_assignment("T1", "Acacia Breeze")

    def test_request_after_approval_rejected(self):
        registry = OfficerAssignmentRegistry()
        registry.request_assignment("T1", "Acacia Breeze")
        registry.decide("T1", "Acacia Breeze", True)
        with pytest.raises(InvalidTransition):
            registry.request_assignment("T1", "Acacia Breeze")


class TestDecide:
    def test_eleventh_officer_roster_full(self):
        registry = make_full_roster()
        registry.request_assignment("T10", "Acacia Breeze")
        with pytest.raises(RosterFull):
            registry.decide("T10", "Acacia Breeze", True)
        assert registry.approved_count("Acacia Breeze") == 10
        assert registry.state("T10", "Acacia Breeze") == AssignmentState.PENDING

    def test_reject_removes_registration(self):
        registry = OfficerAssignmentRegistry()
        registry.request_assignment("T1", "Acacia Breeze")
        assert registry.decide("T1", "Acacia Breeze", False) is None
        assert registry.state("T1", "Acacia Breeze") is None

    def test_decide_without_request(self):
        with pytest.raises(InvalidTransition):
            OfficerAssignmentRegistry().decide("T1", "Acacia Breeze", True)

    def test_configurable_limit(self):
        registry = OfficerAssignmentRegistry({"max_officers_per_project": 1})
        registry.request_assignment("T1", "Acacia Breeze")
        registry.request_assignment("T2", "Acacia Breeze")
        registry.decide("T1", "Acacia Breeze", True)
        with pytest.raises(RosterFull):
            registry.decide("T2", "Acacia Breeze", True)


class TestRestore:
    def test_stored_roster_over_limit(self):
        registry = make_full_roster()
        with pytest.raises(RosterFull):
            registry.restore(OfficerAssignment("Acacia Breeze", "T99", AssignmentState.APPROVED))

    def test_drop_project(self):
        registry = make_full_roster(size=2)
        registry.drop_project("Acacia Breeze")
        assert registry.approved_officers("Acacia Breeze") == []
        assert registry.assignments_for_officer("T0") == []
