"""BTO Flat Allocation staff dashboard — Streamlit entry point."""

import streamlit as st
import sys
import os

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from components.sidebar import render_sidebar
from config.logging_utils import configure_logging
from data.session_store import initialize_session_state
from tabs import (
    tab_projects,
    tab_applications,
    tab_officers,
    tab_reports,
)


def main():
    st.set_page_config(
        page_title="BTO Flat Allocation",
        page_icon="🏠",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    configure_logging()
    initialize_session_state()
    sidebar_state = render_sidebar()

    tab1, tab2, tab3, tab4 = st.tabs([
        "🏠 Projects & Inventory",
        "📝 Applications",
        "🧑‍💼 Officers",
        "📊 Reports & Data",
    ])

    with tab1:
        tab_projects.render(sidebar_state)
    with tab2:
        tab_applications.render(sidebar_state)
    with tab3:
        tab_officers.render(sidebar_state)
    with tab4:
        tab_reports.render(sidebar_state)


if __name__ == "__main__":
    main()
