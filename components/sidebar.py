"""Global sidebar controls for acting role and identity."""

import streamlit as st
from dataclasses import dataclass
from typing import Optional

from data.session_store import get_service, is_data_loaded
from config.defaults import ROLES, DEFAULT_ROLE


@dataclass
class SidebarState:
    role: str
    actor_id: str
    project_name: Optional[str]


def render_sidebar() -> SidebarState:
    """Render the global sidebar controls and return current state."""
    with st.sidebar:
        st.title("BTO Flat Allocation")
        st.divider()

        role = st.selectbox("Acting as", options=ROLES, index=ROLES.index(DEFAULT_ROLE), key="sidebar_role")
        actor_id = st.text_input(f"{role} ID", key="sidebar_actor").strip()

        service = get_service()
        project_names = sorted(p.name for p in service.projects()) if service else []
        project_name = st.selectbox(
            "Project",
            options=project_names,
            index=0 if project_names else None,
            key="sidebar_project",
        )

        st.divider()

        if is_data_loaded():
            st.success("Data loaded")
        else:
            st.warning("No data loaded — go to the Reports & Data tab")

        if service and actor_id and role != "Manager":
            st.caption(f"Application status: {service.application_status(actor_id).value}")

    return SidebarState(role=role, actor_id=actor_id, project_name=project_name)
