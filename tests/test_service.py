"""Tests for the allocation service facade."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import date

import pytest

from models.applicant import ApplicantProfile, MaritalStatus
from models.application import ApplicationRecord, ApplicationStatus
from models.officer import AssignmentState, OfficerAssignment
from models.project import Project, UnitInventory, UnitType, make_inventory
from models.result import ErrorKind
from engine.service import AllocationService
from data.store import InMemoryRecordStore, Snapshot


def make_snapshot():
    return Snapshot(
        projects=[
            Project("Acacia Breeze", "Yishun", "M001", date(2026, 2, 15), date(2026, 3, 20),
                    True, make_inventory(2, 3)),
            Project("Boon Lay Glades", "Boon Lay", "M001", date(2026, 4, 1), date(2026, 5, 15),
                    True, make_inventory(10, 6)),
            Project("Tengah Grove", "Tengah", "M002", date(2026, 3, 1), date(2026, 3, 31),
                    True, make_inventory(5, 0)),
        ],
        applicants=[
            ApplicantProfile("S1", 36, MaritalStatus.SINGLE, "Alice"),
            ApplicantProfile("S2", 30, MaritalStatus.SINGLE, "Bob"),
            ApplicantProfile("M1", 30, MaritalStatus.MARRIED, "Carol"),
            ApplicantProfile("T1", 40, MaritalStatus.MARRIED, "Officer Tan"),
        ],
        assignments=[OfficerAssignment("Acacia Breeze", "T1", AssignmentState.APPROVED)],
    )


def make_service():
    store = InMemoryRecordStore(make_snapshot())
    return AllocationService.from_store(store), store


def book(service, applicant_id="S1", project="Acacia Breeze", unit="2-room"):
    assert service.apply(applicant_id, project, unit).ok
    assert service.manager_decide_application(applicant_id, True, "M001").ok
    return service.officer_confirm_booking(applicant_id, "T1")


class TestApplicantFlow:
    def test_full_booking_persists(self):
        service, store = make_service()
        result = book(service)
        assert result.ok
        assert result.value.status == ApplicationStatus.BOOKED
        assert store.applications["S1"].status == ApplicationStatus.BOOKED
        assert store.projects["Acacia Breeze"].available(UnitType.TWO_ROOM) == 1

    def test_failures_carry_error_kind(self):
        service, _ = make_service()
        assert service.apply("S2", "Acacia Breeze", "2-room").error == ErrorKind.NOT_ELIGIBLE
        assert service.apply("S1", "Nowhere", "2-room").error == ErrorKind.NO_SUCH_PROJECT
        assert service.apply("S1", "Acacia Breeze", "4-room").error == ErrorKind.NOT_ELIGIBLE
        assert service.apply("S404", "Acacia Breeze", "2-room").error == ErrorKind.NOT_ELIGIBLE
        assert service.request_booking("S1").error == ErrorKind.NO_SUCH_APPLICATION

    def test_status_none_without_record(self):
        service, _ = make_service()
        assert service.application_status("S1") == ApplicationStatus.NONE

    def test_eligible_projects_hidden_while_active(self):
        service, _ = make_service()
        names = [p.name for p in service.list_eligible_projects("S1").value]
        assert names == ["Acacia Breeze", "Boon Lay Glades", "Tengah Grove"]
        service.apply("S1", "Acacia Breeze", "2-room")
        assert service.list_eligible_projects("S1").value == []

    def test_eligible_projects_by_neighbourhood(self):
        service, _ = make_service()
        names = [p.name for p in service.list_eligible_projects("M1", "Tengah").value]
        assert names == ["Tengah Grove"]

    def test_returned_records_are_copies(self):
        service, _ = make_service()
        record = service.apply("S1", "Acacia Breeze", "2-room").value
        record.status = ApplicationStatus.BOOKED
        assert service.application_status("S1") == ApplicationStatus.PENDING


class TestWithdrawal:
    def test_withdraw_booked_returns_unit(self):
        service, store = make_service()
        book(service)
        assert service.request_withdrawal("S1").ok
        assert service.request_withdrawal("S1").error == ErrorKind.ALREADY_WITHDRAWING
        assert service.manager_decide_withdrawal("S1", True, "M001").ok
        assert service.application_status("S1") == ApplicationStatus.WITHDRAWN
        assert store.projects["Acacia Breeze"].available(UnitType.TWO_ROOM) == 2

    def test_reapply_keeps_history(self):
        service, store = make_service()
        service.apply("S1", "Acacia Breeze", "2-room")
        service.manager_decide_application("S1", False)
        assert service.apply("S1", "Boon Lay Glades", "2-room").ok
        assert len(service.snapshot().applications) == 2
        assert len(store.load_applications()) == 2


class TestAuthorization:
    def test_other_manager_cannot_decide(self):
        service, _ = make_service()
        service.apply("S1", "Acacia Breeze", "2-room")
        result = service.manager_decide_application("S1", True, "M002")
        assert result.error == ErrorKind.NOT_AUTHORIZED
        assert service.application_status("S1") == ApplicationStatus.PENDING

    def test_unapproved_officer_cannot_book(self):
        service, _ = make_service()
        service.apply("S1", "Acacia Breeze", "2-room")
        service.manager_decide_application("S1", True)
        result = service.officer_confirm_booking("S1", "T9")
        assert result.error == ErrorKind.NOT_AUTHORIZED
        assert service.inventory.available("Acacia Breeze", "2-room") == 2


class TestOfficers:
    def test_register_and_approve(self):
        service, store = make_service()
        assert service.request_officer_assignment("T2", "Boon Lay Glades").ok
        assert service.pending_officers("Boon Lay Glades") == ["T2"]
        assert service.manager_decide_officer_assignment("T2", "Boon Lay Glades", True, "M001").ok
        assert service.approved_officers("Boon Lay Glades") == ["T2"]
        assert store.assignments[("Boon Lay Glades", "T2")].state == AssignmentState.APPROVED

    def test_officer_not_offered_overlapping_projects(self):
        service, _ = make_service()
        names = [p.name for p in service.list_eligible_projects("T1").value]
        assert names == ["Boon Lay Glades"]
        for name in ("Acacia Breeze", "Tengah Grove"):
            assert service.apply("T1", name, "2-room").error == ErrorKind.NOT_ELIGIBLE

    def test_overlapping_registration_clashes(self):
        service, _ = make_service()
        result = service.request_officer_assignment("T1", "Tengah Grove")
        assert result.error == ErrorKind.PERIOD_CLASH

    def test_cannot_register_where_applied(self):
        service, _ = make_service()
        service.apply("M1", "Boon Lay Glades", "3-room")
        result = service.request_officer_assignment("M1", "Boon Lay Glades")
        assert result.error == ErrorKind.INVALID_TRANSITION

    def test_officer_cannot_apply_to_own_project(self):
        service, _ = make_service()
        assert service.apply("T1", "Acacia Breeze", "3-room").error == ErrorKind.NOT_ELIGIBLE

    def test_rejected_registration_removed_from_store(self):
        service, store = make_service()
        service.request_officer_assignment("T2", "Boon Lay Glades")
        assert service.manager_decide_officer_assignment("T2", "Boon Lay Glades", False, "M001").ok
        assert ("Boon Lay Glades", "T2") not in store.assignments

    def test_receipt(self):
        service, _ = make_service()
        assert service.generate_receipt("S1").error == ErrorKind.NO_SUCH_APPLICATION
        book(service)
        receipt = service.generate_receipt("S1", "T1").value
        assert receipt["name"] == "Alice"
        assert receipt["unit_type"] == "2-room"
        assert receipt["neighbourhood"] == "Yishun"


class TestProjects:
    def test_create_and_apply(self):
        service, store = make_service()
        result = service.create_project("M003", "Kallang Vista", "Kallang",
                                        date(2026, 6, 1), date(2026, 7, 15), 1, 1)
        assert result.ok
        assert "Kallang Vista" in store.projects
        assert service.apply("M1", "Kallang Vista", "3-room").ok

    def test_create_clash(self):
        service, _ = make_service()
        result = service.create_project("M001", "New", "Yishun", date(2026, 3, 1), date(2026, 3, 5), 1, 1)
        assert result.error == ErrorKind.PERIOD_CLASH

    def test_create_invalid_dates(self):
        service, _ = make_service()
        result = service.create_project("M001", "New", "Yishun", date(2027, 3, 5), date(2027, 3, 1), 1, 1)
        assert result.error == ErrorKind.INVALID_TRANSITION

    def test_toggle_visibility(self):
        service, _ = make_service()
        assert service.toggle_visibility("M001", "Acacia Breeze").value.visibility is False
        assert service.apply("S1", "Acacia Breeze", "2-room").error == ErrorKind.NOT_ELIGIBLE
        assert service.toggle_visibility("M002", "Acacia Breeze").error == ErrorKind.NOT_AUTHORIZED

    def test_edit_project(self):
        service, store = make_service()
        assert service.edit_project("M002", "Tengah Grove", neighbourhood="Tengah North").ok
        assert store.projects["Tengah Grove"].neighbourhood == "Tengah North"

    def test_delete_refused_with_active_application(self):
        service, _ = make_service()
        service.apply("M1", "Boon Lay Glades", "2-room")
        assert service.delete_project("M001", "Boon Lay Glades").error == ErrorKind.INVALID_TRANSITION

    def test_delete_refused_with_approved_officer(self):
        service, _ = make_service()
        assert service.delete_project("M001", "Acacia Breeze").error == ErrorKind.INVALID_TRANSITION

    def test_delete(self):
        service, store = make_service()
        assert service.delete_project("M002", "Tengah Grove").ok
        assert service.project("Tengah Grove").error == ErrorKind.NO_SUCH_PROJECT
        assert "Tengah Grove" not in store.projects

    def test_delete_after_rejected_application_reloads(self):
        service, store = make_service()
        service.apply("S1", "Tengah Grove", "2-room")
        service.manager_decide_application("S1", False, "M002")
        assert service.delete_project("M002", "Tengah Grove").ok
        assert service.application_status("S1") == ApplicationStatus.NONE

        from_snapshot = AllocationService.from_snapshot(service.snapshot())
        from_store = AllocationService.from_store(store)
        for reloaded in (from_snapshot, from_store):
            assert reloaded.project("Tengah Grove").error == ErrorKind.NO_SUCH_PROJECT
            assert reloaded.application_status("S1") == ApplicationStatus.NONE

    def test_delete_keeps_records_for_other_projects(self):
        service, store = make_service()
        service.apply("S1", "Boon Lay Glades", "2-room")
        service.manager_decide_application("S1", False, "M001")
        service.apply("S1", "Tengah Grove", "2-room")
        service.manager_decide_application("S1", False, "M002")
        assert service.delete_project("M002", "Tengah Grove").ok

        record = service.current_application("S1")
        assert record.project_name == "Boon Lay Glades"
        assert record.status == ApplicationStatus.UNSUCCESSFUL
        reloaded = AllocationService.from_store(store)
        assert reloaded.current_application("S1").project_name == "Boon Lay Glades"
        assert len(reloaded.snapshot().applications) == 1


class TestSnapshot:
    def test_round_trip_through_store(self):
        service, store = make_service()
        book(service)
        reloaded = AllocationService.from_store(store)
        assert reloaded.application_status("S1") == ApplicationStatus.BOOKED
        assert reloaded.inventory.available("Acacia Breeze", "2-room") == 1

    def test_two_active_records_rejected(self):
        snapshot = make_snapshot()
        snapshot.applications = [
            ApplicationRecord("S1", "Acacia Breeze", UnitType.TWO_ROOM, ApplicationStatus.PENDING),
            ApplicationRecord("S1", "Boon Lay Glades", UnitType.TWO_ROOM, ApplicationStatus.PENDING),
        ]
        with pytest.raises(ValueError):
            AllocationService.from_snapshot(snapshot)

    def test_out_of_bounds_inventory_rejected(self):
        snapshot = make_snapshot()
        snapshot.projects[0].inventory[UnitType.TWO_ROOM] = UnitInventory(total=1, available=2)
        with pytest.raises(ValueError):
            AllocationService.from_snapshot(snapshot)

    def test_application_for_unknown_project_rejected(self):
        snapshot = make_snapshot()
        snapshot.applications = [
            ApplicationRecord("S1", "Nowhere", UnitType.TWO_ROOM, ApplicationStatus.PENDING),
        ]
        with pytest.raises(ValueError):
            AllocationService.from_snapshot(snapshot)

    def test_snapshot_is_detached(self):
        service, _ = make_service()
        snapshot = service.snapshot()
        snapshot.projects[0].inventory[UnitType.TWO_ROOM].available = 0
        assert service.inventory.available(snapshot.projects[0].name, "2-room") == 2


class TestReports:
    def test_booking_report_filters(self):
        service, _ = make_service()
        book(service, "S1")
        book(service, "M1", unit="3-room")
        assert len(service.booking_report().value) == 2
        married = service.booking_report("Acacia Breeze", "married").value
        assert married["Applicant ID"].tolist() == ["M1"]
        assert service.booking_report(filter_key="flat2room").value["Name"].tolist() == ["Alice"]
        assert service.booking_report(filter_key="everyone").error == ErrorKind.INVALID_TRANSITION

    def test_inventory_summary(self):
        service, _ = make_service()
        book(service)
        summary = service.inventory_summary()
        row = summary[(summary["Project"] == "Acacia Breeze") & (summary["Unit Type"] == "2-room")].iloc[0]
        assert (row["Total"], row["Available"], row["Booked"]) == (2, 1, 1)

    def test_applications_by_status(self):
        service, _ = make_service()
        service.apply("S1", "Acacia Breeze", "2-room")
        counts = service.applications_by_status()
        assert counts["Pending"] == 1
        assert "None" not in counts


class FlakyStore(InMemoryRecordStore):
    """Accepts the initial load, then fails every write while ``broken`` is set."""

    def __init__(self, snapshot=None):
        self.broken = False
        super().__init__(snapshot)

    def persist(self, record):
        if self.broken:
            raise OSError("disk full")
        super().persist(record)

    def delete_project(self, project_name):
        if self.broken:
            raise OSError("disk full")
        super().delete_project(project_name)


class TestStoreFailures:
    def make_service(self):
        store = FlakyStore(make_snapshot())
        return AllocationService.from_store(store), store

    def test_write_failure_is_a_result(self):
        service, store = self.make_service()
        store.broken = True
        result = service.apply("S1", "Acacia Breeze", "2-room")
        assert not result.ok
        assert result.error == ErrorKind.PERSISTENCE_FAILED
        assert "disk full" in result.message
        assert "S1" not in store.applications

    def test_memory_stays_ahead_of_store(self):
        service, store = self.make_service()
        store.broken = True
        service.apply("S1", "Acacia Breeze", "2-room")
        assert service.application_status("S1") == ApplicationStatus.PENDING
        store.broken = False
        assert service.manager_decide_application("S1", True, "M001").ok
        assert store.applications["S1"].status == ApplicationStatus.SUCCESSFUL

    def test_delete_failure_is_a_result(self):
        service, store = self.make_service()
        store.broken = True
        result = service.delete_project("M002", "Tengah Grove")
        assert result.error == ErrorKind.PERSISTENCE_FAILED
        assert "Tengah Grove" in store.projects
