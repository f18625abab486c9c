"""Typed wrapper around st.session_state for the dashboard."""

import streamlit as st
from typing import Optional

from engine.service import AllocationService
from data.store import InMemoryRecordStore, Snapshot
from config.defaults import DEFAULT_ROLE


def initialize_session_state():
    """Initialize all session state keys with defaults."""
    defaults = {
        "service": None,
        "store": None,
        "data_loaded": False,
        "rule_config": {},
        "sidebar_state": {
            "role": DEFAULT_ROLE,
            "actor_id": "",
            "project_name": None,
        },
    }
    for key, default in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = default


# --- Getters ---

def get_service() -> Optional[AllocationService]:
    return st.session_state.get("service")


def get_rule_config() -> dict:
    return st.session_state.get("rule_config", {})


def is_data_loaded() -> bool:
    return st.session_state.get("data_loaded", False)


# --- Setters ---

def load_snapshot(snapshot: Snapshot) -> AllocationService:
    """Build a fresh service (and backing store) from a snapshot and keep it in the session."""
    store = InMemoryRecordStore(snapshot)
    service = AllocationService.from_store(store, get_rule_config())
    st.session_state["store"] = store
    st.session_state["service"] = service
    st.session_state["data_loaded"] = True
    return service


def set_rule_config(config: dict):
    st.session_state["rule_config"] = config


def reset():
    st.session_state["service"] = None
    st.session_state["store"] = None
    st.session_state["data_loaded"] = False
