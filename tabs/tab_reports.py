"""Tab 4: Reports & Data — snapshot upload/export, booking report, audit trail."""

import streamlit as st
import pandas as pd

from data.loader import (
    load_file, load_multi_sheet_excel, parse_snapshot, snapshot_to_dfs,
)
from data.validator import (
    validate_projects, validate_applicants, validate_applications,
    validate_officers, validate_cross_file,
)
from data.sample_data import (
    generate_projects_df, generate_applicants_df,
    generate_applications_df, generate_officers_df,
)
from data.session_store import (
    get_service, get_rule_config, is_data_loaded, load_snapshot, reset, set_rule_config,
)
from components.tables import render_styled_table
from config.defaults import (
    REPORT_FILTERS, DEFAULT_REPORT_FILTER,
    SINGLE_MIN_AGE, MARRIED_MIN_AGE, MAX_OFFICERS_PER_PROJECT,
)


def _load_and_validate(projects_df, applicants_df, applications_df, officers_df):
    """Validate and load uploaded tables into a fresh service."""
    errors = []
    warnings = []

    for r in [
        validate_projects(projects_df),
        validate_applicants(applicants_df),
        validate_applications(applications_df),
        validate_officers(officers_df),
    ]:
        errors.extend(r.errors)
        warnings.extend(r.warnings)

    if not errors:
        cross = validate_cross_file(projects_df, applications_df)
        errors.extend(cross.errors)
        warnings.extend(cross.warnings)

    if errors:
        for e in errors:
            st.error(e)
        return False

    for w in warnings:
        st.warning(w)

    try:
        snapshot = parse_snapshot(projects_df, applicants_df, applications_df, officers_df)
        load_snapshot(snapshot)
    except ValueError as e:
        st.error(f"Could not load data: {e}")
        return False

    st.success(
        f"Data loaded: {len(snapshot.projects)} projects, {len(snapshot.applicants)} applicants, "
        f"{len(snapshot.applications)} applications, {len(snapshot.assignments)} officer assignments"
    )
    return True


def _render_upload():
    st.subheader("Data Upload")
    single_file = st.file_uploader(
        "Excel workbook with Projects, Applicants, Applications and Officers sheets",
        type=["xlsx"],
        key="upload_single",
    )
    with st.expander("Or upload four CSV files"):
        col1, col2, col3, col4 = st.columns(4)
        projects_file = col1.file_uploader("Projects", type=["csv", "xlsx"], key="upload_projects")
        applicants_file = col2.file_uploader("Applicants", type=["csv", "xlsx"], key="upload_applicants")
        applications_file = col3.file_uploader("Applications", type=["csv", "xlsx"], key="upload_applications")
        officers_file = col4.file_uploader("Officers", type=["csv", "xlsx"], key="upload_officers")

    col_upload, col_sample = st.columns(2)
    with col_upload:
        if st.button("Upload & Validate", type="primary", key="btn_upload"):
            files = [projects_file, applicants_file, applications_file, officers_file]
            try:
                if single_file:
                    _load_and_validate(*load_multi_sheet_excel(single_file))
                elif all(files):
                    _load_and_validate(*[load_file(f) for f in files])
                else:
                    st.warning("Upload a workbook or all four files.")
            except ValueError as e:
                st.error(f"Error loading files: {e}")

    with col_sample:
        if st.button("Load Sample Data", key="btn_sample"):
            _load_and_validate(
                generate_projects_df(), generate_applicants_df(),
                generate_applications_df(), generate_officers_df(),
            )


def _render_rules(service):
    st.subheader("Allocation Rules")
    cfg = get_rule_config()
    col1, col2, col3 = st.columns(3)
    single_min = col1.number_input("Single minimum age", min_value=0, step=1,
                                   value=int(cfg.get("single_min_age", SINGLE_MIN_AGE)))
    married_min = col2.number_input("Married minimum age", min_value=0, step=1,
                                    value=int(cfg.get("married_min_age", MARRIED_MIN_AGE)))
    max_officers = col3.number_input("Officers per project", min_value=1, step=1,
                                     value=int(cfg.get("max_officers_per_project", MAX_OFFICERS_PER_PROJECT)))

    col_apply, col_clear = st.columns(2)
    with col_apply:
        if st.button("Apply Rules", key="btn_rules"):
            set_rule_config({
                "single_min_age": int(single_min),
                "married_min_age": int(married_min),
                "max_officers_per_project": int(max_officers),
            })
            try:
                reloaded = load_snapshot(service.snapshot())
                reloaded.audit_log.extend(service.audit_log)
                st.success("Rules applied.")
            except ValueError as e:
                st.error(f"Current data does not satisfy the new rules: {e}")
    with col_clear:
        if st.button("Clear Data", key="btn_clear"):
            reset()
            st.rerun()


def render(sidebar_state):
    """Render the Reports & Data tab."""
    st.header("Reports & Data")
    _render_upload()

    service = get_service()
    if not is_data_loaded() or service is None:
        return

    st.divider()
    _render_rules(service)

    st.divider()
    st.subheader("Export Snapshot")
    projects_df, applicants_df, applications_df, officers_df = snapshot_to_dfs(service.snapshot())
    cols = st.columns(4)
    for col, (label, df) in zip(cols, [
        ("projects", projects_df), ("applicants", applicants_df),
        ("applications", applications_df), ("officers", officers_df),
    ]):
        col.download_button(f"{label}.csv", df.to_csv(index=False), f"{label}.csv", "text/csv")

    st.divider()
    st.subheader("Booking Report")
    filter_key = st.selectbox(
        "Filter",
        options=list(REPORT_FILTERS),
        index=list(REPORT_FILTERS).index(DEFAULT_REPORT_FILTER),
        format_func=lambda k: REPORT_FILTERS[k],
        key="report_filter",
    )
    scope = st.radio("Scope", ["Selected project", "All projects"], horizontal=True, key="report_scope")
    project_name = sidebar_state.project_name if scope == "Selected project" else None
    result = service.booking_report(project_name, filter_key)
    if result.ok:
        render_styled_table(result.value)
    else:
        st.error(result.message)

    st.divider()
    st.subheader("Audit Trail")
    if service.audit_log:
        audit_df = pd.DataFrame([{
            "Timestamp": e.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            "Action": e.action,
            "Actor": e.actor_id or "—",
            "Subject": e.subject_id,
            "Project": e.project_name or "—",
            "Field": e.field_changed,
            "Old Value": e.old_value[:50],
            "New Value": e.new_value[:50],
        } for e in reversed(service.audit_log)])
        st.dataframe(audit_df, use_container_width=True, height=300)
        st.download_button("Export Audit Log (CSV)", audit_df.to_csv(index=False), "audit_log.csv", "text/csv")
    else:
        st.info("No audit entries yet.")
