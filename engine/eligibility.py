"""Eligibility rules: which unit types an applicant may apply for in a project."""

from typing import List, Optional, Set

from models.applicant import MaritalStatus
from models.project import Project, UnitType
from config.defaults import (
    SINGLE_MIN_AGE, MARRIED_MIN_AGE,
    SINGLE_UNIT_TYPES, MARRIED_UNIT_TYPES,
)


def allowed_unit_types(
    age: int,
    marital_status: MaritalStatus,
    rule_config: Optional[dict] = None,
) -> Set[UnitType]:
    """Unit types the profile qualifies for, ignoring any project or inventory."""
    cfg = rule_config or {}
    single_min = cfg.get("single_min_age", SINGLE_MIN_AGE)
    married_min = cfg.get("married_min_age", MARRIED_MIN_AGE)

    status = MaritalStatus.parse(marital_status)
    if status == MaritalStatus.SINGLE and age >= single_min:
        return {UnitType.parse(u) for u in cfg.get("single_unit_types", SINGLE_UNIT_TYPES)}
    if status == MaritalStatus.MARRIED and age >= married_min:
        return {UnitType.parse(u) for u in cfg.get("married_unit_types", MARRIED_UNIT_TYPES)}
    return set()


def eligible_unit_types(
    age: int,
    marital_status: MaritalStatus,
    project: Project,
    rule_config: Optional[dict] = None,
) -> Set[UnitType]:
    """Unit types the profile may apply for in this project right now.

    Hidden projects yield nothing; each allowed type also needs at least one
    available unit.
    """
    if not project.visibility:
        return set()
    return {
        unit_type
        for unit_type in allowed_unit_types(age, marital_status, rule_config)
        if project.available(unit_type) > 0
    }


def filter_eligible_projects(
    age: int,
    marital_status: MaritalStatus,
    projects: List[Project],
    neighbourhood: Optional[str] = None,
    rule_config: Optional[dict] = None,
) -> List[Project]:
    """Projects with at least one eligible unit type, optionally within one neighbourhood."""
    wanted = neighbourhood.strip().lower() if neighbourhood else None
    results = []
    for project in projects:
        if wanted and project.neighbourhood.strip().lower() != wanted:
            continue
        if eligible_unit_types(age, marital_status, project, rule_config):
            results.append(project)
    return results
