"""Tests for the application ledger."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from models.application import ApplicationRecord, ApplicationStatus
from models.project import UnitType
from engine.errors import AlreadyApplied, NoSuchApplication
from engine.ledger import ApplicationLedger


def make_record(applicant="S1", project="Acacia Breeze", unit="2-room", status=ApplicationStatus.PENDING):
    return ApplicationRecord(applicant, project, UnitType.parse(unit), status)


class TestBeginApplication:
    def test_creates_pending_record(self):
        ledger = ApplicationLedger()
        record = ledger.begin_application("S1", "Acacia Breeze", "2-Room")
        assert record.status == ApplicationStatus.PENDING
        assert record.unit_type == UnitType.TWO_ROOM
        assert ledger.has_active("S1")

    def test_second_active_rejected(self):
        ledger = ApplicationLedger()
        ledger.begin_application("S1", "Acacia Breeze", "2-room")
        with pytest.raises(AlreadyApplied):
            ledger.begin_application("S1", "Tengah Grove", "2-room")

    def test_terminal_record_moves_to_history(self):
        ledger = ApplicationLedger()
        ledger.begin_application("S1", "Acacia Breeze", "2-room").status = ApplicationStatus.UNSUCCESSFUL
        ledger.begin_application("S1", "Tengah Grove", "2-room")
        assert ledger.current_application("S1").project_name == "Tengah Grove"
        assert len(ledger.records(include_history=True)) == 2
        assert len(ledger.records()) == 1

    def test_require_missing(self):
        with pytest.raises(NoSuchApplication):
            ApplicationLedger().require("S404")


class TestRestore:
    def test_two_active_records_rejected(self):
        ledger = ApplicationLedger()
        ledger.restore(make_record())
        with pytest.raises(AlreadyApplied):
            ledger.restore(make_record(project="Tengah Grove"))

    def test_active_record_wins_over_terminal(self):
        ledger = ApplicationLedger()
        ledger.restore(make_record(status=ApplicationStatus.BOOKED))
        ledger.restore(make_record(project="Old", status=ApplicationStatus.WITHDRAWN))
        assert ledger.current_application("S1").status == ApplicationStatus.BOOKED
        assert len(ledger.records(include_history=True)) == 2


class TestViews:
    def test_booked_count_and_withdrawals(self):
        ledger = ApplicationLedger()
        ledger.restore(make_record("S1", status=ApplicationStatus.BOOKED))
        ledger.restore(make_record("S2", status=ApplicationStatus.BOOKED))
        ledger.restore(make_record("S3", unit="3-room", status=ApplicationStatus.SUCCESSFUL))
        ledger.current_application("S3").withdrawal_pending = True

        assert ledger.booked_count("Acacia Breeze", UnitType.TWO_ROOM) == 2
        assert ledger.booked_count("Acacia Breeze", UnitType.THREE_ROOM) == 0
        assert [r.applicant_id for r in ledger.withdrawal_requests()] == ["S3"]
        assert len(ledger.for_project("Acacia Breeze", ApplicationStatus.BOOKED)) == 2


class TestDropProject:
    def test_removes_current_and_history(self):
        ledger = ApplicationLedger()
        ledger.restore(make_record("S1", status=ApplicationStatus.UNSUCCESSFUL))
        ledger.restore(make_record("S2", status=ApplicationStatus.WITHDRAWN))
        ledger.restore(make_record("S2", project="Tengah Grove", status=ApplicationStatus.PENDING))

        dropped = ledger.drop_project("Acacia Breeze")
        assert sorted(r.applicant_id for r in dropped) == ["S1", "S2"]
        assert ledger.current_application("S1") is None
        assert ledger.current_application("S2").project_name == "Tengah Grove"
        assert all(r.project_name != "Acacia Breeze" for r in ledger.records(include_history=True))

    def test_falls_back_to_latest_history(self):
        ledger = ApplicationLedger()
        ledger.restore(make_record("S1", project="Old", status=ApplicationStatus.UNSUCCESSFUL))
        ledger.restore(make_record("S1", project="Older", status=ApplicationStatus.WITHDRAWN))
        ledger.restore(make_record("S1", status=ApplicationStatus.UNSUCCESSFUL))

        ledger.drop_project("Acacia Breeze")
        assert ledger.current_application("S1").project_name == "Older"
        assert len(ledger.records(include_history=True)) == 2
