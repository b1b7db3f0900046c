"""
Search bar component for the corpus browser.

Provides the main search input and submit functionality.
"""

import streamlit as st
from typing import Tuple

from ..state import get_state, set_state, clear_search_state


def render_search_bar() -> Tuple[str, bool]:
    """
    Render the search input bar.

    Returns:
        Tuple of (query_text, was_submitted).
    """
    col1, col2 = st.columns([5, 1])

    with col1:
        query = st.text_input(
            "检索",
            value=get_state("search_query", ""),
            placeholder="输入标题、作者或诗句……",
            key="search_input",
            label_visibility="collapsed"
        )

    with col2:
        submitted = st.button(
            "检索",
            type="primary",
            use_container_width=True
        )

    previous_query = get_state("search_query", "")
    query_changed = query != previous_query

    if query_changed:
        clear_search_state()
        set_state("search_query", query)

    return query, submitted or query_changed


def render_search_header(keyword: str, count: int, page: int, elapsed_ms: float) -> None:
    """
    Render search results header.

    Args:
        keyword: Keyword searched for, blank in browse mode.
        count: Results on the current page.
        page: Current page number.
        elapsed_ms: Time the search took.
    """
    col1, col2, col3 = st.columns([2, 2, 1])

    with col1:
        st.markdown(f"第 {page} 页 · **{count}** 条结果")

    with col2:
        if keyword.strip():
            st.caption(f"关键词：\"{keyword}\"")
        else:
            st.caption("浏览模式")

    with col3:
        st.caption(f"{elapsed_ms:.0f} ms")


def render_no_results(keyword: str) -> None:
    """Display no results message with suggestions."""
    if keyword.strip():
        st.info(f"没有找到与 \"{keyword}\" 相关的作品")
    else:
        st.info("当前筛选条件下没有作品")

    with st.expander("建议"):
        st.markdown("""
        - 检查错别字，或换用更短的词句
        - 放宽朝代或标签筛选
        - 关键词按原文顺序匹配，可尝试只输入其中一段
        """)
