"""Tabular views over the ledger and catalog for managers and the dashboard."""

from typing import Dict, List, Optional

import pandas as pd

from models.applicant import ApplicantProfile, MaritalStatus
from models.application import ApplicationRecord, ApplicationStatus
from models.project import Project, UnitType
from config.defaults import REPORT_FILTERS

REPORT_COLUMNS = ["Project", "Neighbourhood", "Unit Type", "Applicant ID", "Name", "Age", "Marital Status"]


def _matches(filter_key: str, profile: Optional[ApplicantProfile], record: ApplicationRecord) -> bool:
    married = profile is not None and profile.marital_status == MaritalStatus.MARRIED
    if filter_key == "all":
        return True
    if filter_key == "married":
        return married
    if filter_key == "unmarried":
        return not married
    if filter_key == "flat2room":
        return record.unit_type == UnitType.TWO_ROOM
    if filter_key == "flat3room":
        return record.unit_type == UnitType.THREE_ROOM
    if filter_key == "married_flat2room":
        return married and record.unit_type == UnitType.TWO_ROOM
    raise ValueError(f"Unknown report filter: {filter_key}. Use one of {list(REPORT_FILTERS)}")


def booking_report(
    records: List[ApplicationRecord],
    profiles: Dict[str, ApplicantProfile],
    projects: Dict[str, Project],
    filter_key: str = "all",
) -> pd.DataFrame:
    """Booked applications joined with applicant profiles, filtered by filter_key."""
    filter_key = filter_key.strip().lower()
    if filter_key not in REPORT_FILTERS:
        raise ValueError(f"Unknown report filter: {filter_key}. Use one of {list(REPORT_FILTERS)}")

    rows = []
    for record in records:
        if record.status != ApplicationStatus.BOOKED:
            continue
        profile = profiles.get(record.applicant_id)
        if not _matches(filter_key, profile, record):
            continue
        project = projects.get(record.project_name)
        rows.append({
            "Project": record.project_name,
            "Neighbourhood": project.neighbourhood if project else "",
            "Unit Type": record.unit_type.value,
            "Applicant ID": record.applicant_id,
            "Name": profile.name if profile else "",
            "Age": profile.age if profile else None,
            "Marital Status": profile.marital_status.value if profile else "",
        })
    return pd.DataFrame(rows, columns=REPORT_COLUMNS)


def inventory_summary(projects: List[Project], records: List[ApplicationRecord]) -> pd.DataFrame:
    """Per project and unit type: total, available and booked units."""
    booked = {}
    for r in records:
        if r.status == ApplicationStatus.BOOKED:
            key = (r.project_name, r.unit_type)
            booked[key] = booked.get(key, 0) + 1

    rows = []
    for p in sorted(projects, key=lambda p: p.name):
        for unit_type in UnitType:
            rows.append({
                "Project": p.name,
                "Unit Type": unit_type.value,
                "Total": p.total(unit_type),
                "Available": p.available(unit_type),
                "Booked": booked.get((p.name, unit_type), 0),
                "Visible": p.visibility,
            })
    return pd.DataFrame(rows, columns=["Project", "Unit Type", "Total", "Available", "Booked", "Visible"])


def applications_by_status(records: List[ApplicationRecord], project_name: Optional[str] = None) -> Dict[str, int]:
    """Count current applications per status, optionally for one project."""
    counts = {s.value: 0 for s in ApplicationStatus if s != ApplicationStatus.NONE}
    for r in records:
        if project_name is None or r.project_name == project_name:
            counts[r.status.value] += 1
    return counts
