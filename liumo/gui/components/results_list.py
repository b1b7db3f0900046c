"""
Results list component for displaying corpus records.

Renders each poem as a card honoring its layout hint, plus pagination.
"""

import html
import streamlit as st
from typing import List

from ...search import CorpusRecord
from ...utils import truncate_text
from ..state import get_state, set_state


PREVIEW_LENGTH = 48

LAYOUT_ALIGN = {
    "CENTER_ALIGNED": "center",
    "LEFT_ALIGNED": "left",
    "INDENTED": "left",
}


def render_results(results: List[CorpusRecord]) -> None:
    """
    Render the list of search results.

    Args:
        results: Records to display, in result order.
    """
    if not results:
        return

    for idx, record in enumerate(results):
        _render_result_card(record, idx)


def _render_result_card(record: CorpusRecord, idx: int) -> None:
    """Render a single record card with expander."""
    header = f"**{record.title}** · {record.author} · {record.dynasty}　{preview_line(record)}"
    result_id = f"{record.id}_{idx}"

    with st.expander(header, expanded=idx == 0):
        if record.tags:
            st.caption(" · ".join(sorted(record.tags)))

        _render_poem(record)

        if st.button("原始数据", key=f"raw_btn_{result_id}"):
            current = get_state("show_content", {})
            current[result_id] = not current.get(result_id, False)
            set_state("show_content", current)

        if get_state("show_content", {}).get(result_id, False):
            st.json(record.to_dict())


def _render_poem(record: CorpusRecord) -> None:
    """Render the poem body using its layout hint."""
    content = record.structured_content

    if not content.paragraphs:
        st.info("正文暂缺")
        return

    align = LAYOUT_ALIGN.get(record.layout_strategy, "center")
    indent = "2em" if record.layout_strategy == "INDENTED" else "0"

    blocks = []
    for paragraph in content.paragraphs:
        lines = "<br>".join(html.escape(line) for line in paragraph.lines)
        blocks.append(
            f'<p class="poem-{html.escape(paragraph.type)}" '
            f'style="text-align:{align};text-indent:{indent}">{lines}</p>'
        )

    st.markdown("".join(blocks), unsafe_allow_html=True)


def preview_line(record: CorpusRecord) -> str:
    """First line of the poem, shortened for compact listings."""
    content = record.structured_content
    for paragraph in content.paragraphs:
        for line in paragraph.lines:
            return truncate_text(line, PREVIEW_LENGTH)
    return ""


def render_pagination(page_count: int, results_per_page: int) -> None:
    """
    Render pagination controls.

    The total number of matches is never computed, so a full page
    means there may be another one.

    Args:
        page_count: Number of results on the current page.
        results_per_page: Number of results per page.
    """
    current_page = get_state("current_page", 1)
    has_more = page_count >= results_per_page

    if current_page <= 1 and not has_more:
        return

    col1, col2, col3, col4 = st.columns([1, 1, 2, 1])

    with col1:
        if st.button("首页", disabled=current_page <= 1):
            set_state("current_page", 1)
            st.rerun()

    with col2:
        if st.button("上一页", disabled=current_page <= 1):
            set_state("current_page", current_page - 1)
            st.rerun()

    with col3:
        st.markdown(
            f"<div style='text-align:center'>第 {current_page} 页</div>",
            unsafe_allow_html=True
        )

    with col4:
        if st.button("下一页", disabled=not has_more):
            set_state("current_page", current_page + 1)
            st.rerun()
