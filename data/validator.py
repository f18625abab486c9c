"""Schema validation for snapshot tables."""

from dataclasses import dataclass, field
from typing import List

import pandas as pd

from data.loader import APPLICANT_COLUMNS, APPLICATION_COLUMNS, OFFICER_COLUMNS, PROJECT_COLUMNS
from models.applicant import MaritalStatus
from models.application import ACTIVE_STATUSES, ApplicationStatus
from models.project import UnitType


@dataclass
class ValidationResult:
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def _check_required_columns(df: pd.DataFrame, required: List[str], file_label: str) -> ValidationResult:
    result = ValidationResult()
    missing = [col for col in required if col not in df.columns]
    if missing:
        result.is_valid = False
        result.errors.append(f"{file_label}: Missing required columns: {', '.join(missing)}")
    return result


def _invalid_values(series: pd.Series, parse) -> List[str]:
    bad = []
    for value in series.dropna().unique():
        try:
            parse(value)
        except ValueError:
            bad.append(str(value))
    return bad


def validate_projects(df: pd.DataFrame) -> ValidationResult:
    result = _check_required_columns(df, PROJECT_COLUMNS, "Projects")
    if not result.is_valid:
        return result

    for prefix in ("2-Room", "3-Room"):
        total = df[f"{prefix} Total"]
        available = df[f"{prefix} Available"]
        if (total < 0).any() or (available < 0).any():
            result.is_valid = False
            result.errors.append(f"Projects: {prefix} unit counts cannot be negative.")
        if (available > total).any():
            result.is_valid = False
            names = df.loc[available > total, "Project Name"].tolist()
            result.errors.append(f"Projects: {prefix} available exceeds total for: {names}")

    dupes = df.duplicated(subset=["Project Name"], keep=False)
    if dupes.any():
        result.is_valid = False
        result.errors.append(f"Projects: Duplicate project names: {df[dupes]['Project Name'].unique().tolist()}")

    opening = pd.to_datetime(df["Opening Date"], errors="coerce")
    closing = pd.to_datetime(df["Closing Date"], errors="coerce")
    if opening.isna().any() or closing.isna().any():
        result.is_valid = False
        result.errors.append("Projects: Opening and Closing Date must be valid dates.")
    elif (closing < opening).any():
        result.is_valid = False
        names = df.loc[closing < opening, "Project Name"].tolist()
        result.errors.append(f"Projects: Closing date before opening date for: {names}")

    return result


def validate_applicants(df: pd.DataFrame) -> ValidationResult:
    result = _check_required_columns(df, APPLICANT_COLUMNS, "Applicants")
    if not result.is_valid:
        return result

    if (df["Age"] < 0).any():
        result.is_valid = False
        result.errors.append("Applicants: Age cannot be negative.")

    bad = _invalid_values(df["Marital Status"], MaritalStatus.parse)
    if bad:
        result.is_valid = False
        result.errors.append(f"Applicants: Unknown marital status values: {bad}")

    dupes = df.duplicated(subset=["Applicant ID"], keep=False)
    if dupes.any():
        result.is_valid = False
        result.errors.append(f"Applicants: Duplicate applicant IDs: {df[dupes]['Applicant ID'].unique().tolist()}")

    return result


def validate_applications(df: pd.DataFrame) -> ValidationResult:
    result = _check_required_columns(df, APPLICATION_COLUMNS[:4], "Applications")
    if not result.is_valid:
        return result

    bad_types = _invalid_values(df["Unit Type"], UnitType.parse)
    if bad_types:
        result.is_valid = False
        result.errors.append(f"Applications: Unknown unit types: {bad_types}")

    bad_status = _invalid_values(df["Status"], ApplicationStatus.parse)
    if bad_status:
        result.is_valid = False
        result.errors.append(f"Applications: Unknown status values: {bad_status}")
        return result

    active_names = {s.value.lower() for s in ACTIVE_STATUSES}
    active = df[df["Status"].astype(str).str.strip().str.lower().isin(active_names)]
    multi = active["Applicant ID"].value_counts()
    multi = multi[multi > 1]
    if not multi.empty:
        result.is_valid = False
        result.errors.append(f"Applications: More than one active application for: {sorted(multi.index.tolist())}")

    return result


def validate_officers(df: pd.DataFrame) -> ValidationResult:
    result = _check_required_columns(df, OFFICER_COLUMNS, "Officers")
    if not result.is_valid:
        return result

    states = df["Status"].astype(str).str.strip().str.capitalize()
    bad = sorted(set(states) - {"Pending", "Approved"})
    if bad:
        result.is_valid = False
        result.errors.append(f"Officers: Unknown roster status values: {bad}")

    dupes = df.duplicated(subset=["Project Name", "Officer ID"], keep=False)
    if dupes.any():
        result.warnings.append("Officers: Duplicate roster rows found; the last one wins.")

    return result


def validate_cross_file(projects_df: pd.DataFrame, applications_df: pd.DataFrame) -> ValidationResult:
    """Check project references and that available + booked matches total per unit type."""
    result = ValidationResult()
    project_names = set(projects_df["Project Name"].astype(str).str.strip())
    referenced = set(applications_df["Project Name"].astype(str).str.strip())

    unknown = referenced - project_names
    if unknown:
        result.is_valid = False
        result.errors.append(f"Applications reference unknown projects: {', '.join(sorted(unknown))}")

    booked = applications_df[applications_df["Status"].astype(str).str.strip().str.lower() == "booked"]
    for _, row in projects_df.iterrows():
        name = str(row["Project Name"]).strip()
        for unit_type, prefix in ((UnitType.TWO_ROOM, "2-Room"), (UnitType.THREE_ROOM, "3-Room")):
            count = sum(
                1 for _, b in booked.iterrows()
                if str(b["Project Name"]).strip() == name and UnitType.parse(b["Unit Type"]) == unit_type
            )
            if int(row[f"{prefix} Available"]) + count != int(row[f"{prefix} Total"]):
                result.warnings.append(
                    f"{name}: {prefix} available ({int(row[f'{prefix} Available'])}) + booked ({count}) "
                    f"does not match total ({int(row[f'{prefix} Total'])})."
                )
    return result
