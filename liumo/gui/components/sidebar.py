"""
Sidebar component for the corpus browser.

Displays store statistics, the dynasty and tag facets, page size
and help text.
"""

import streamlit as st
from typing import Dict, List

from ...core import LiumoError
from ...database import get_statistics
from ...search import Facets, SearchEngine
from ..state import get_state, set_state


ALL_OPTION = "全部"

TAG_LABELS = {
    "shi": "诗",
    "ci": "词",
    "qu": "曲",
    "wen": "文",
    "fu": "赋",
}


def render_sidebar(engine: SearchEngine) -> Dict:
    """
    Render the sidebar with stats and filters.

    Args:
        engine: Search engine over the provisioned store.

    Returns:
        Dictionary of selected options.
    """
    with st.sidebar:
        st.title("流墨")

        st.subheader("收录")
        _render_statistics(engine)

        st.divider()

        st.subheader("筛选")
        facets = _load_facets(engine)
        options = _render_filters(facets, engine.curated_tags)

        st.divider()

        _render_help()

    return options


def _render_statistics(engine: SearchEngine) -> None:
    """Display store statistics."""
    try:
        stats = get_statistics(engine.db_manager)
    except LiumoError as e:
        st.warning(f"无法读取统计信息：{e.message}")
        return

    col1, col2 = st.columns(2)

    with col1:
        st.metric("作品", f"{stats['total_records']:,}")

    with col2:
        st.metric("作者", f"{stats['total_authors']:,}")

    st.caption(
        f"{stats['total_dynasties']} 个朝代 · 数据库 {stats['store_size_mb']:.1f} MB"
        f" · schema v{stats['schema_version']}"
    )


def _load_facets(engine: SearchEngine) -> Facets:
    try:
        return engine.facets()
    except LiumoError as e:
        st.warning(f"无法读取筛选项：{e.message}")
        return Facets(dynasties=(), tags=frozenset())


def _render_filters(facets: Facets, tag_order: List[str]) -> Dict:
    """Render dynasty, tag and page size controls."""
    dynasty_options = [ALL_OPTION] + list(facets.dynasties)
    current_dynasty = get_state("dynasty", "") or ALL_OPTION
    dynasty_index = dynasty_options.index(current_dynasty) if current_dynasty in dynasty_options else 0

    selected_dynasty = st.selectbox(
        "朝代",
        options=dynasty_options,
        index=dynasty_index,
        key="dynasty_select"
    )

    tag_options = [ALL_OPTION] + facets.sorted_tags(tag_order)
    current_tag = get_state("tag", "") or ALL_OPTION
    tag_index = tag_options.index(current_tag) if current_tag in tag_options else 0

    selected_tag = st.selectbox(
        "标签",
        options=tag_options,
        index=tag_index,
        format_func=lambda tag: TAG_LABELS.get(tag, tag),
        key="tag_select"
    )

    results_per_page = st.slider(
        "每页结果",
        min_value=10,
        max_value=100,
        value=get_state("results_per_page", 20),
        step=10,
        key="results_slider"
    )

    dynasty = "" if selected_dynasty == ALL_OPTION else selected_dynasty
    tag = "" if selected_tag == ALL_OPTION else selected_tag

    if (dynasty, tag, results_per_page) != (
        get_state("dynasty", ""), get_state("tag", ""), get_state("results_per_page", 20)
    ):
        set_state("current_page", 1)

    set_state("dynasty", dynasty)
    set_state("tag", tag)
    set_state("results_per_page", results_per_page)

    return {
        "dynasty": dynasty,
        "tag": tag,
        "results_per_page": results_per_page
    }


def _render_help() -> None:
    """Display search help text."""
    with st.expander("检索说明"):
        st.markdown("""
        **关键词检索：**
        - 输入连续的字词，按原文顺序匹配，例如 `明月` 或 `李白`
        - 标题、作者与正文都会被检索
        - 结果按匹配程度排序

        **浏览：**
        - 关键词留空时，按朝代和标签列出作品，最新收录的在前
        """)
