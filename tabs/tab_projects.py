"""Tab 1: Projects & Inventory — unit supply per project and manager project controls."""

import streamlit as st
from datetime import date, timedelta

from data.session_store import get_service, is_data_loaded
from components.charts import inventory_bar
from components.metrics_cards import render_metric_row, render_result
from components.tables import render_styled_table


def _render_manager_controls(service, manager_id: str):
    with st.expander("Create Project", expanded=False):
        name = st.text_input("Project Name", key="new_project_name")
        neighbourhood = st.text_input("Neighbourhood", key="new_project_neighbourhood")
        col1, col2 = st.columns(2)
        opening = col1.date_input("Opening Date", value=date.today(), key="new_project_open")
        closing = col2.date_input("Closing Date", value=date.today() + timedelta(days=30), key="new_project_close")
        two_room = col1.number_input("2-room units", min_value=0, value=10, step=1, key="new_project_2r")
        three_room = col2.number_input("3-room units", min_value=0, value=10, step=1, key="new_project_3r")
        visible = st.checkbox("Visible to applicants", value=True, key="new_project_visible")
        if st.button("Create Project", type="primary"):
            result = service.create_project(
                manager_id, name.strip(), neighbourhood.strip(), opening, closing,
                int(two_room), int(three_room), visible,
            )
            render_result(result, f"Project '{name}' created.")

    own = service.projects(manager_id)
    if not own:
        st.caption("You do not manage any project yet.")
        return

    st.subheader("My Projects")
    target = st.selectbox("Project", [p.name for p in own], key="manage_project")
    col_toggle, col_delete = st.columns(2)
    with col_toggle:
        if st.button("Toggle Visibility", key="btn_toggle"):
            render_result(service.toggle_visibility(manager_id, target), "Visibility updated.")
    with col_delete:
        if st.button("Delete Project", key="btn_delete"):
            render_result(service.delete_project(manager_id, target), f"Project '{target}' deleted.")


def render(sidebar_state):
    """Render the Projects & Inventory tab."""
    st.header("Projects & Inventory")

    service = get_service()
    if not is_data_loaded() or service is None:
        st.info("No data loaded. Please load data in the Reports & Data tab.")
        return

    summary = service.inventory_summary()
    render_metric_row([
        {"label": "Projects", "value": len(service.projects())},
        {"label": "Total Units", "value": int(summary["Total"].sum())},
        {"label": "Booked", "value": int(summary["Booked"].sum())},
        {"label": "Available", "value": int(summary["Available"].sum())},
    ])

    if not summary.empty:
        st.plotly_chart(inventory_bar(summary), use_container_width=True)
    render_styled_table(summary, title="Inventory")

    if sidebar_state.role == "Applicant" and sidebar_state.actor_id:
        result = service.list_eligible_projects(sidebar_state.actor_id)
        st.subheader("Projects Open to You")
        if result.ok:
            names = [f"{p.name} ({p.neighbourhood})" for p in result.value]
            st.write(", ".join(names) if names else "No projects available to you right now.")
        else:
            st.error(result.message)

    if sidebar_state.role == "Manager" and sidebar_state.actor_id:
        st.divider()
        _render_manager_controls(service, sidebar_state.actor_id)
