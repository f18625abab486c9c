"""Snapshot parsing: CSV/XLSX tables into typed model lists, and back."""

import pandas as pd
from typing import List, Tuple

from models.applicant import ApplicantProfile, MaritalStatus
from models.application import ApplicationRecord, ApplicationStatus
from models.officer import AssignmentState, OfficerAssignment
from models.project import Project, UnitInventory, UnitType
from data.store import Snapshot
from config.defaults import DATE_FORMAT

PROJECT_COLUMNS = [
    "Project Name", "Neighbourhood", "Visibility", "Manager ID",
    "Opening Date", "Closing Date",
    "2-Room Total", "2-Room Available", "3-Room Total", "3-Room Available",
]
APPLICANT_COLUMNS = ["Applicant ID", "Name", "Age", "Marital Status"]
APPLICATION_COLUMNS = [
    "Applicant ID", "Project Name", "Unit Type", "Status",
    "Withdrawal Pending", "Booking Requested",
]
OFFICER_COLUMNS = ["Project Name", "Officer ID", "Status"]

_INVENTORY_COLUMNS = {
    UnitType.TWO_ROOM: ("2-Room Total", "2-Room Available"),
    UnitType.THREE_ROOM: ("3-Room Total", "3-Room Available"),
}


def _to_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1", "y")
    if pd.isna(value):
        return False
    return bool(value)


def parse_projects(df: pd.DataFrame) -> List[Project]:
    """Convert a projects DataFrame into Project objects."""
    projects = []
    for _, row in df.iterrows():
        inventory = {}
        for unit_type, (total_col, avail_col) in _INVENTORY_COLUMNS.items():
            total = int(row[total_col])
            available = int(row[avail_col]) if pd.notna(row.get(avail_col)) else total
            inventory[unit_type] = UnitInventory(total=total, available=available)
        projects.append(Project(
            name=str(row["Project Name"]).strip(),
            neighbourhood=str(row["Neighbourhood"]).strip(),
            manager_id=str(row["Manager ID"]).strip(),
            opening_date=pd.to_datetime(row["Opening Date"]).date(),
            closing_date=pd.to_datetime(row["Closing Date"]).date(),
            visibility=_to_bool(row["Visibility"]),
            inventory=inventory,
        ))
    return projects


def parse_applicants(df: pd.DataFrame) -> List[ApplicantProfile]:
    """Convert an applicants DataFrame into ApplicantProfile objects."""
    profiles = []
    for _, row in df.iterrows():
        name = ""
        if "Name" in df.columns and pd.notna(row.get("Name")):
            name = str(row["Name"]).strip()
        profiles.append(ApplicantProfile(
            applicant_id=str(row["Applicant ID"]).strip(),
            age=int(row["Age"]),
            marital_status=MaritalStatus.parse(row["Marital Status"]),
            name=name,
        ))
    return profiles


def parse_applications(df: pd.DataFrame) -> List[ApplicationRecord]:
    """Convert an applications DataFrame into ApplicationRecord objects, in row order."""
    records = []
    for _, row in df.iterrows():
        withdrawal = _to_bool(row["Withdrawal Pending"]) if "Withdrawal Pending" in df.columns else False
        booking = _to_bool(row["Booking Requested"]) if "Booking Requested" in df.columns else False
        records.append(ApplicationRecord(
            applicant_id=str(row["Applicant ID"]).strip(),
            project_name=str(row["Project Name"]).strip(),
            unit_type=UnitType.parse(row["Unit Type"]),
            status=ApplicationStatus.parse(row["Status"]),
            withdrawal_pending=withdrawal,
            booking_requested=booking,
        ))
    return records


def parse_assignments(df: pd.DataFrame) -> List[OfficerAssignment]:
    """Convert an officer roster DataFrame into OfficerAssignment objects."""
    assignments = []
    for _, row in df.iterrows():
        state = str(row["Status"]).strip().capitalize()
        assignments.append(OfficerAssignment(
            project_name=str(row["Project Name"]).strip(),
            officer_id=str(row["Officer ID"]).strip(),
            state=AssignmentState(state),
        ))
    return assignments


def parse_snapshot(
    projects_df: pd.DataFrame,
    applicants_df: pd.DataFrame,
    applications_df: pd.DataFrame,
    officers_df: pd.DataFrame,
) -> Snapshot:
    return Snapshot(
        projects=parse_projects(projects_df),
        applicants=parse_applicants(applicants_df),
        applications=parse_applications(applications_df),
        assignments=parse_assignments(officers_df),
    )


# --- Model lists back into DataFrames ---

def projects_to_df(projects: List[Project]) -> pd.DataFrame:
    rows = []
    for p in projects:
        row = {
            "Project Name": p.name,
            "Neighbourhood": p.neighbourhood,
            "Visibility": p.visibility,
            "Manager ID": p.manager_id,
            "Opening Date": p.opening_date.strftime(DATE_FORMAT),
            "Closing Date": p.closing_date.strftime(DATE_FORMAT),
        }
        for unit_type, (total_col, avail_col) in _INVENTORY_COLUMNS.items():
            row[total_col] = p.total(unit_type)
            row[avail_col] = p.available(unit_type)
        rows.append(row)
    return pd.DataFrame(rows, columns=PROJECT_COLUMNS)


def applicants_to_df(profiles: List[ApplicantProfile]) -> pd.DataFrame:
    rows = [{
        "Applicant ID": a.applicant_id,
        "Name": a.name,
        "Age": a.age,
        "Marital Status": a.marital_status.value,
    } for a in profiles]
    return pd.DataFrame(rows, columns=APPLICANT_COLUMNS)


def applications_to_df(records: List[ApplicationRecord]) -> pd.DataFrame:
    rows = [{
        "Applicant ID": r.applicant_id,
        "Project Name": r.project_name,
        "Unit Type": r.unit_type.value,
        "Status": r.status.value,
        "Withdrawal Pending": r.withdrawal_pending,
        "Booking Requested": r.booking_requested,
    } for r in records]
    return pd.DataFrame(rows, columns=APPLICATION_COLUMNS)


def assignments_to_df(assignments: List[OfficerAssignment]) -> pd.DataFrame:
    rows = [{
        "Project Name": a.project_name,
        "Officer ID": a.officer_id,
        "Status": a.state.value,
    } for a in assignments]
    return pd.DataFrame(rows, columns=OFFICER_COLUMNS)


def snapshot_to_dfs(snapshot: Snapshot) -> Tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame, pd.DataFrame]:
    """Returns (projects_df, applicants_df, applications_df, officers_df)."""
    return (
        projects_to_df(snapshot.projects),
        applicants_to_df(snapshot.applicants),
        applications_to_df(snapshot.applications),
        assignments_to_df(snapshot.assignments),
    )


def load_file(uploaded_file) -> pd.DataFrame:
    """Load an uploaded file (CSV or XLSX) into a DataFrame."""
    name = uploaded_file.name.lower()
    if name.endswith(".csv"):
        return pd.read_csv(uploaded_file)
    elif name.endswith(".xlsx") or name.endswith(".xls"):
        return pd.read_excel(uploaded_file, engine="openpyxl")
    else:
        raise ValueError(f"Unsupported file format: {name}. Use CSV or XLSX.")


# Expected sheet names for multi-tab Excel (case-insensitive matching)
SHEET_ALIASES = {
    "projects": ["projects", "project", "project list"],
    "applicants": ["applicants", "applicant", "users", "profiles"],
    "applications": ["applications", "application", "bookings"],
    "officers": ["officers", "officer", "project officers", "roster"],
}


def _match_sheet(sheet_names: List[str], category: str) -> str:
    """Find a sheet name matching the given category. Returns the matched name or raises."""
    aliases = SHEET_ALIASES[category]
    lower_map = {s.lower().strip(): s for s in sheet_names}
    for alias in aliases:
        if alias in lower_map:
            return lower_map[alias]
    raise ValueError(
        f"Could not find a sheet for '{category}'. "
        f"Expected one of: {aliases}. "
        f"Found sheets: {sheet_names}"
    )


def load_multi_sheet_excel(uploaded_file) -> Tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame, pd.DataFrame]:
    """Load a single Excel file with 4 tabs: Projects, Applicants, Applications, Officers.

    Sheet names are matched case-insensitively; see SHEET_ALIASES.

    Returns (projects_df, applicants_df, applications_df, officers_df).
    """
    xl = pd.ExcelFile(uploaded_file, engine="openpyxl")
    sheet_names = xl.sheet_names
    return tuple(
        pd.read_excel(xl, sheet_name=_match_sheet(sheet_names, category))
        for category in ("projects", "applicants", "applications", "officers")
    )
