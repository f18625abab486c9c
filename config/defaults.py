"""Default configuration constants for the BTO Flat Allocation platform."""

import logging

# Eligibility thresholds
SINGLE_MIN_AGE = 35     # Singles may only take 2-room units
MARRIED_MIN_AGE = 21    # Married couples may take either unit type

# Unit types each marital status may apply for, once the age threshold is met
SINGLE_UNIT_TYPES = ["2-room"]
MARRIED_UNIT_TYPES = ["2-room", "3-room"]

# Officer roster
MAX_OFFICERS_PER_PROJECT = 10

# Booking report filters (key -> description)
REPORT_FILTERS = {
    "all": "All booked applicants",
    "married": "Married applicants",
    "unmarried": "Single applicants",
    "flat2room": "2-room bookings",
    "flat3room": "3-room bookings",
    "married_flat2room": "Married applicants in 2-room units",
}
DEFAULT_REPORT_FILTER = "all"

# Dates
DATE_FORMAT = "%Y-%m-%d"

# Logging
LOG_LEVEL = logging.INFO
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Dashboard roles
ROLES = ["Applicant", "Officer", "Manager"]
DEFAULT_ROLE = "Manager"
