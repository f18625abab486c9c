from dataclasses import dataclass
from enum import Enum


class MaritalStatus(str, Enum):
    SINGLE = "Single"
    MARRIED = "Married"

    @classmethod
    def parse(cls, value) -> "MaritalStatus":
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        raise ValueError(f"Unknown marital status: {value!r}. Use 'Single' or 'Married'.")


@dataclass
class ApplicantProfile:
    applicant_id: str           # NRIC-like identifier, e.g. "S1234567A"
    age: int
    marital_status: MaritalStatus
    name: str = ""
