"""Tab 2: Applications — applicant self-service and manager review queues."""

import streamlit as st
import pandas as pd

from models.application import ApplicationStatus
from data.session_store import get_service, is_data_loaded
from engine.explainer import explain_eligibility
from components.charts import status_donut
from components.metrics_cards import render_result
from components.tables import render_status_table


def _applications_df(records) -> pd.DataFrame:
    return pd.DataFrame([{
        "Applicant ID": r.applicant_id,
        "Project": r.project_name,
        "Unit Type": r.unit_type.value,
        "Status": r.status.value,
        "Withdrawal Pending": r.withdrawal_pending,
        "Booking Requested": r.booking_requested,
    } for r in records])


def _render_applicant(service, applicant_id: str, project_name):
    record = service.current_application(applicant_id)
    st.subheader("My Application")
    if record is None:
        st.caption("You have no application on record.")
    else:
        render_status_table(_applications_df([record]))
        col_book, col_withdraw = st.columns(2)
        with col_book:
            if st.button("Request Booking", key="btn_request_book",
                         disabled=record.status != ApplicationStatus.SUCCESSFUL):
                render_result(service.request_booking(applicant_id), "Booking request sent to an officer.")
        with col_withdraw:
            if st.button("Request Withdrawal", key="btn_request_withdraw",
                         disabled=record.status not in (ApplicationStatus.SUCCESSFUL, ApplicationStatus.BOOKED)):
                render_result(service.request_withdrawal(applicant_id), "Withdrawal request sent to the manager.")

    if not project_name:
        return

    st.subheader(f"Apply to {project_name}")
    types_result = service.eligible_unit_types(applicant_id, project_name)
    if not types_result.ok:
        st.error(types_result.message)
        return
    if not types_result.value:
        profile = service.profiles.get(applicant_id)
        project_result = service.project(project_name)
        if profile and project_result.ok:
            with st.expander("Why can't I apply?"):
                for ut in project_result.value.inventory:
                    for step in explain_eligibility(profile, project_result.value, ut, service.rule_config):
                        st.markdown(f"- {step}")
        st.info("No unit type in this project is open to you.")
        return

    unit_type = st.selectbox(
        "Unit Type", sorted(types_result.value, key=lambda u: u.value),
        format_func=lambda u: u.value, key="apply_unit_type",
    )
    if st.button("Submit Application", type="primary", key="btn_apply"):
        render_result(service.apply(applicant_id, project_name, unit_type), "Application submitted.")


def _render_manager(service, manager_id: str, project_name):
    if not project_name:
        st.caption("Select a project in the sidebar.")
        return

    pending = service.applications(project_name, ApplicationStatus.PENDING)
    st.subheader("Pending Applications")
    if pending:
        applicant_id = st.selectbox("Applicant", [r.applicant_id for r in pending], key="review_applicant")
        col_accept, col_reject = st.columns(2)
        with col_accept:
            if st.button("Approve", type="primary", key="btn_approve_app"):
                render_result(service.manager_decide_application(applicant_id, True, manager_id),
                              f"{applicant_id} approved.")
        with col_reject:
            if st.button("Reject", key="btn_reject_app"):
                render_result(service.manager_decide_application(applicant_id, False, manager_id),
                              f"{applicant_id} rejected.")
    else:
        st.caption("No pending applications.")

    withdrawals = service.ledger.withdrawal_requests(project_name)
    st.subheader("Withdrawal Requests")
    if withdrawals:
        applicant_id = st.selectbox("Applicant", [r.applicant_id for r in withdrawals], key="review_withdrawal")
        col_accept, col_reject = st.columns(2)
        with col_accept:
            if st.button("Approve Withdrawal", type="primary", key="btn_approve_wd"):
                render_result(service.manager_decide_withdrawal(applicant_id, True, manager_id),
                              f"Withdrawal of {applicant_id} approved.")
        with col_reject:
            if st.button("Reject Withdrawal", key="btn_reject_wd"):
                render_result(service.manager_decide_withdrawal(applicant_id, False, manager_id),
                              f"Withdrawal of {applicant_id} rejected.")
    else:
        st.caption("No withdrawal requests.")


def render(sidebar_state):
    """Render the Applications tab."""
    st.header("Applications")

    service = get_service()
    if not is_data_loaded() or service is None:
        st.info("No data loaded. Please load data in the Reports & Data tab.")
        return
    if not sidebar_state.actor_id:
        st.info("Enter your ID in the sidebar.")
        return

    if sidebar_state.role == "Manager":
        _render_manager(service, sidebar_state.actor_id, sidebar_state.project_name)
    else:
        _render_applicant(service, sidebar_state.actor_id, sidebar_state.project_name)

    st.divider()
    col_chart, col_table = st.columns([1, 2])
    with col_chart:
        st.plotly_chart(status_donut(service.applications_by_status(sidebar_state.project_name)),
                        use_container_width=True)
    with col_table:
        if sidebar_state.role == "Manager":
            render_status_table(_applications_df(service.applications(sidebar_state.project_name)))
