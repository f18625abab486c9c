"""Generates human-readable explanations for eligibility decisions."""

from typing import List, Optional

from models.applicant import ApplicantProfile, MaritalStatus
from models.project import Project, UnitType
from engine.eligibility import allowed_unit_types
from config.defaults import SINGLE_MIN_AGE, MARRIED_MIN_AGE


def explain_eligibility(
    profile: ApplicantProfile,
    project: Project,
    unit_type: UnitType,
    rule_config: Optional[dict] = None,
) -> List[str]:
    """Produce step-by-step explanation of whether a profile may apply for a unit type."""
    cfg = rule_config or {}
    single_min = cfg.get("single_min_age", SINGLE_MIN_AGE)
    married_min = cfg.get("married_min_age", MARRIED_MIN_AGE)
    unit_type = UnitType.parse(unit_type)
    steps = []

    steps.append(
        f"Step 1 - Visibility: project '{project.name}' is "
        f"{'open to applicants' if project.visibility else 'hidden from applicants'}"
    )

    status = MaritalStatus.parse(profile.marital_status)
    threshold = single_min if status == MaritalStatus.SINGLE else married_min
    allowed = allowed_unit_types(profile.age, status, cfg)
    if allowed:
        types = ", ".join(sorted(u.value for u in allowed))
        steps.append(
            f"Step 2 - Profile: {status.value}, age {profile.age} (minimum {threshold}) "
            f"=> may apply for {types}"
        )
    else:
        steps.append(
            f"Step 2 - Profile: {status.value}, age {profile.age} (minimum {threshold}) "
            f"=> not eligible for any unit type"
        )

    steps.append(
        f"Step 3 - Inventory: {unit_type.value} has {project.available(unit_type)} of "
        f"{project.total(unit_type)} units available"
    )

    verdict = (
        project.visibility
        and unit_type in allowed
        and project.available(unit_type) > 0
    )
    steps.append(f"Result: {'eligible' if verdict else 'not eligible'} for {unit_type.value}")
    return steps
