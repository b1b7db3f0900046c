"""
Main Streamlit application for the Liumo corpus browser.

Entry point that provisions the corpus store once per server process
and assembles the sidebar, search bar and results into the interface.

Note: This file is run directly by Streamlit, so it needs to
set up the Python path before importing other modules.
"""

import sys
import time
from pathlib import Path

# Add project root to path for imports when run directly by Streamlit
_project_root = Path(__file__).parent.parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import streamlit as st  # noqa: E402

from liumo.bootstrap import start  # noqa: E402
from liumo.core import get_config, get_logger, LiumoError, SearchError  # noqa: E402
from liumo.search import SearchEngine  # noqa: E402

from liumo.gui.state import init_state, get_state, set_state, get_pagination_state  # noqa: E402
from liumo.gui.components import (  # noqa: E402
    render_sidebar,
    render_search_bar,
    render_results,
)
from liumo.gui.components.search_bar import render_search_header, render_no_results  # noqa: E402
from liumo.gui.components.results_list import render_pagination  # noqa: E402

logger = get_logger(__name__)


@st.cache_resource(show_spinner="正在准备诗词库……")
def get_engine() -> SearchEngine:
    """Provision the store and build the engine once per server process."""
    return start()


def load_css(css_path: Path) -> None:
    """
    Load and inject custom CSS into Streamlit.

    Args:
        css_path: Path to the CSS file.
    """
    if css_path.exists():
        with open(css_path, "r", encoding="utf-8") as f:
            css_content = f.read()
        st.markdown(f"<style>{css_content}</style>", unsafe_allow_html=True)


def render_banner(title: str) -> None:
    """Render the main header banner."""
    banner_html = f"""
    <div class="main-header">
        <div class="main-header-content">
            <h1>{title}</h1>
            <p>诗词曲赋 · 全文检索</p>
        </div>
    </div>
    """
    st.markdown(banner_html, unsafe_allow_html=True)


def main():
    """Main application entry point."""
    config = get_config()

    st.set_page_config(
        page_title=config.gui.page_title,
        page_icon="📜",
        layout="wide",
        initial_sidebar_state="expanded"
    )

    load_css(config.assets.css_path)

    init_state(config.gui.results_per_page)

    try:
        engine = get_engine()
    except LiumoError as e:
        logger.error(f"Startup failed: {e}")
        st.error(f"诗词库初始化失败：{e.message}")
        st.stop()

    options = render_sidebar(engine)

    render_banner(config.gui.page_title)

    query_text, submitted = render_search_bar()

    if submitted:
        set_state("search_active", True)

    if get_state("search_active", False):
        _execute_search(engine, query_text, options)
        _render_results_section(query_text)
    else:
        _render_welcome()


def _execute_search(engine: SearchEngine, query_text: str, options: dict) -> None:
    """
    Execute search and store results in state.

    Args:
        engine: Search engine over the provisioned store.
        query_text: The search query string.
        options: Filter options from sidebar.
    """
    pagination = get_pagination_state()
    start_time = time.time()

    with st.spinner("检索中……"):
        try:
            results = engine.search_simple(
                query_text,
                dynasty=options["dynasty"],
                tag=options["tag"],
                offset=pagination["offset"],
                limit=options["results_per_page"]
            )
            set_state("search_results", results)
            set_state("search_error", None)

        except SearchError as e:
            set_state("search_results", [])
            set_state("search_error", e.message)
            logger.error(f"Search error: {e}")

    set_state("search_elapsed_ms", (time.time() - start_time) * 1000)


def _render_results_section(query_text: str) -> None:
    """Render the search results section."""
    error = get_state("search_error")
    if error:
        st.error(f"检索出错：{error}")
        return

    results = get_state("search_results", [])
    pagination = get_pagination_state()

    render_search_header(
        query_text,
        len(results),
        pagination["current_page"],
        get_state("search_elapsed_ms", 0.0)
    )

    if not results:
        render_no_results(query_text)
        return

    st.divider()

    render_results(results)

    st.divider()

    render_pagination(len(results), pagination["results_per_page"])


def _render_welcome() -> None:
    """Render welcome message when no search has been performed."""
    st.markdown("""
    ### 欢迎使用流墨

    在上方输入标题、作者或诗句进行检索，或直接点击「检索」按朝代与标签浏览。

    **功能：**
    - 中文全文检索，按字序匹配
    - 按朝代、标签（唐诗三百首、宋词三百首等）筛选
    - 按作品排版方式展示正文

    离线可用，所有数据均保存在本机。
    """)


if __name__ == "__main__":
    main()
