"""Generate synthetic datasets for the BTO Flat Allocation platform."""

import pandas as pd
import random
import os


def generate_projects_df() -> pd.DataFrame:
    """Generate 4 projects across 2 managers with non-overlapping periods per manager."""
    rows = [
        {"Project Name": "Acacia Breeze", "Neighbourhood": "Yishun", "Visibility": True, "Manager ID": "M001",
         "Opening Date": "2026-02-15", "Closing Date": "2026-03-20",
         "2-Room Total": 2, "2-Room Available": 2, "3-Room Total": 3, "3-Room Available": 3},
        {"Project Name": "Boon Lay Glades", "Neighbourhood": "Boon Lay", "Visibility": True, "Manager ID": "M001",
         "Opening Date": "2026-04-01", "Closing Date": "2026-05-15",
         "2-Room Total": 10, "2-Room Available": 10, "3-Room Total": 6, "3-Room Available": 6},
        {"Project Name": "Tengah Grove", "Neighbourhood": "Tengah", "Visibility": True, "Manager ID": "M002",
         "Opening Date": "2026-02-01", "Closing Date": "2026-03-31",
         "2-Room Total": 5, "2-Room Available": 5, "3-Room Total": 0, "3-Room Available": 0},
        {"Project Name": "Kallang Vista", "Neighbourhood": "Kallang", "Visibility": False, "Manager ID": "M002",
         "Opening Date": "2026-06-01", "Closing Date": "2026-07-15",
         "2-Room Total": 4, "2-Room Available": 4, "3-Room Total": 8, "3-Room Available": 8},
    ]
    return pd.DataFrame(rows)


def generate_applicants_df(count: int = 12) -> pd.DataFrame:
    """Generate applicant profiles with a mix of eligible and ineligible combinations."""
    random.seed(42)
    rows = []
    for i in range(count):
        married = random.random() < 0.6
        age = random.randint(21, 45) if married else random.randint(25, 60)
        rows.append({
            "Applicant ID": f"S{1000001 + i}A",
            "Name": f"Applicant {i + 1}",
            "Age": age,
            "Marital Status": "Married" if married else "Single",
        })
    return pd.DataFrame(rows)


def generate_applications_df() -> pd.DataFrame:
    """Empty application table with the expected headers."""
    return pd.DataFrame(columns=[
        "Applicant ID", "Project Name", "Unit Type", "Status",
        "Withdrawal Pending", "Booking Requested",
    ])


def generate_officers_df() -> pd.DataFrame:
    rows = [
        {"Project Name": "Acacia Breeze", "Officer ID": "T2000001B", "Status": "Approved"},
        {"Project Name": "Boon Lay Glades", "Officer ID": "T2000002C", "Status": "Pending"},
    ]
    return pd.DataFrame(rows)


def generate_sample_csvs(output_dir: str):
    """Write sample CSV files to the given directory."""
    os.makedirs(output_dir, exist_ok=True)
    generate_projects_df().to_csv(os.path.join(output_dir, "projects.csv"), index=False)
    generate_applicants_df().to_csv(os.path.join(output_dir, "applicants.csv"), index=False)
    generate_applications_df().to_csv(os.path.join(output_dir, "applications.csv"), index=False)
    generate_officers_df().to_csv(os.path.join(output_dir, "officers.csv"), index=False)


def generate_sample_excel(output_dir: str):
    """Write a single multi-tab Excel file with all four datasets."""
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, "sample_data.xlsx")
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        generate_projects_df().to_excel(writer, sheet_name="Projects", index=False)
        generate_applicants_df().to_excel(writer, sheet_name="Applicants", index=False)
        generate_applications_df().to_excel(writer, sheet_name="Applications", index=False)
        generate_officers_df().to_excel(writer, sheet_name="Officers", index=False)


if __name__ == "__main__":
    out = os.path.join(os.path.dirname(__file__), "..", "sample_files")
    generate_sample_csvs(out)
    generate_sample_excel(out)
    print("Sample CSV and Excel files generated in sample_files/")
