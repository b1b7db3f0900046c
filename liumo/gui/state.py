"""
Streamlit session state management.

Provides helpers for initializing, reading, and updating
session state values used across the application.
"""

import streamlit as st
from typing import Any, Dict


DEFAULT_STATE = {
    "search_query": "",
    "search_active": False,
    "search_results": [],
    "search_error": None,
    "search_elapsed_ms": 0.0,
    "dynasty": "",
    "tag": "",
    "show_content": {},
    "results_per_page": 20,
    "current_page": 1,
}


def init_state(results_per_page: int = None) -> None:
    """
    Initialize session state with default values.

    Only sets values that don't already exist, preserving
    state across reruns.

    Args:
        results_per_page: Initial page size, usually from configuration.
    """
    for key, default_value in DEFAULT_STATE.items():
        if key not in st.session_state:
            st.session_state[key] = default_value

    if results_per_page and "page_size_initialized" not in st.session_state:
        st.session_state["results_per_page"] = results_per_page
        st.session_state["page_size_initialized"] = True


def get_state(key: str, default: Any = None) -> Any:
    """
    Get a value from session state.

    Args:
        key: State key to retrieve.
        default: Default value if key doesn't exist.

    Returns:
        The stored value or default.
    """
    return st.session_state.get(key, default)


def set_state(key: str, value: Any) -> None:
    """
    Set a value in session state.

    Args:
        key: State key to set.
        value: Value to store.
    """
    st.session_state[key] = value


def clear_search_state() -> None:
    """Reset search-related state to defaults."""
    set_state("search_results", [])
    set_state("search_error", None)
    set_state("current_page", 1)
    set_state("show_content", {})


def get_pagination_state() -> Dict[str, int]:
    """
    Get pagination-related state.

    Returns:
        Dictionary with current_page, results_per_page, and offset.
    """
    current_page = get_state("current_page", 1)
    results_per_page = get_state("results_per_page", 20)
    offset = (current_page - 1) * results_per_page

    return {
        "current_page": current_page,
        "results_per_page": results_per_page,
        "offset": offset
    }
