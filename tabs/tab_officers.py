"""Tab 3: Officers — registration, roster approval, booking desk and receipts."""

import streamlit as st

from models.application import ApplicationStatus
from data.session_store import get_service, is_data_loaded
from components.metrics_cards import render_metric_row, render_result


def _render_officer(service, officer_id: str, project_name: str):
    st.subheader("Registration")
    state = service.roster.state(officer_id, project_name)
    if state is not None:
        st.caption(f"Your registration for {project_name}: {state.value}")
    elif st.button("Register to handle this project", type="primary", key="btn_register"):
        render_result(service.request_officer_assignment(officer_id, project_name),
                      "Registration submitted for manager approval.")

    if not service.roster.is_approved(officer_id, project_name):
        return

    st.subheader("Booking Desk")
    successful = service.applications(project_name, ApplicationStatus.SUCCESSFUL)
    requested = [r for r in successful if r.booking_requested and not r.withdrawal_pending]
    if requested:
        applicant_id = st.selectbox("Applicant", [r.applicant_id for r in requested], key="book_applicant")
        if st.button("Confirm Booking", type="primary", key="btn_confirm_book"):
            render_result(service.officer_confirm_booking(applicant_id, officer_id),
                          f"Unit booked for {applicant_id}.")
    else:
        st.caption("No booking requests.")

    st.subheader("Receipts")
    booked = service.applications(project_name, ApplicationStatus.BOOKED)
    if booked:
        applicant_id = st.selectbox("Applicant", [r.applicant_id for r in booked], key="receipt_applicant")
        result = service.generate_receipt(applicant_id, officer_id)
        if result.ok:
            st.json(result.value)
        else:
            st.error(result.message)
    else:
        st.caption("No booked applicants yet.")


def _render_manager(service, manager_id: str, project_name: str):
    st.subheader("Pending Officer Registrations")
    pending = service.pending_officers(project_name)
    if not pending:
        st.caption("No pending registrations.")
        return
    officer_id = st.selectbox("Officer", pending, key="review_officer")
    col_accept, col_reject = st.columns(2)
    with col_accept:
        if st.button("Approve Officer", type="primary", key="btn_approve_officer"):
            render_result(service.manager_decide_officer_assignment(officer_id, project_name, True, manager_id),
                          f"{officer_id} approved.")
    with col_reject:
        if st.button("Reject Officer", key="btn_reject_officer"):
            render_result(service.manager_decide_officer_assignment(officer_id, project_name, False, manager_id),
                          f"{officer_id} rejected.")


def render(sidebar_state):
    """Render the Officers tab."""
    st.header("Officers")

    service = get_service()
    if not is_data_loaded() or service is None:
        st.info("No data loaded. Please load data in the Reports & Data tab.")
        return
    if not sidebar_state.project_name:
        st.info("Select a project in the sidebar.")
        return

    project_name = sidebar_state.project_name
    approved = service.approved_officers(project_name)
    render_metric_row([
        {"label": "Approved Officers", "value": len(approved)},
        {"label": "Slots Left", "value": service.roster.max_officers - len(approved)},
        {"label": "Pending", "value": len(service.pending_officers(project_name))},
    ])
    if approved:
        st.caption("Approved: " + ", ".join(approved))

    if not sidebar_state.actor_id:
        st.info("Enter your ID in the sidebar.")
        return
    if sidebar_state.role == "Officer":
        _render_officer(service, sidebar_state.actor_id, project_name)
    elif sidebar_state.role == "Manager":
        _render_manager(service, sidebar_state.actor_id, project_name)
