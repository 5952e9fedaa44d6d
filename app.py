"""
ChunkReader - Chunk-by-chunk Passage Reader

Streamlit application for reading foreign-language passages one chunk at a
time, with on-demand translation and sentence tagging for focused practice.

Usage:
    streamlit run app.py
"""

import logging

import streamlit as st

from chunkreader.reader import ReadingSession, create_repository
from chunkreader.schemas import ReaderMode
from chunkreader.utils import load_settings
from chunkreader.viewer import (
    THEMES,
    THEME_LABELS,
    get_reader_css,
    render_engine_frame,
    render_full_passage,
    render_progress_header,
    render_passage_card,
    render_end_prompt,
)


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

SETTINGS = load_settings()

logging.basicConfig(
    level=SETTINGS.log_level,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="ChunkReader",
    page_icon="📖",
    layout="centered",
    initial_sidebar_state="collapsed",
)


# -----------------------------------------------------------------------------
# Session State Initialization
# -----------------------------------------------------------------------------

def init_session_state():
    """Initialize session state variables."""
    if "session" not in st.session_state:
        st.session_state.session = ReadingSession(create_repository(SETTINGS), SETTINGS)

    if "view" not in st.session_state:
        st.session_state.view = "list"  # list, mode, read

    if "theme" not in st.session_state:
        st.session_state.theme = SETTINGS.theme


# -----------------------------------------------------------------------------
# Sidebar: Theme
# -----------------------------------------------------------------------------

def render_sidebar():
    """Render the sidebar with the theme selector."""
    st.sidebar.title("📖 ChunkReader")
    st.sidebar.subheader("Theme")
    keys = list(THEMES)
    choice = st.sidebar.radio(
        "Select theme",
        keys,
        index=keys.index(st.session_state.theme),
        format_func=lambda k: THEME_LABELS[k],
        label_visibility="collapsed",
    )
    st.session_state.theme = choice


# -----------------------------------------------------------------------------
# Passage List
# -----------------------------------------------------------------------------

def render_list_view():
    """Render the passage list."""
    session = st.session_state.session

    st.title("Passages")
    st.caption("Choose a passage to read.")

    entries = session.list_passages()
    if session.index_error:
        st.error(session.index_error)
        return

    if not entries:
        st.info("No passages available.")
        return

    for entry in entries:
        st.markdown(render_passage_card(entry), unsafe_allow_html=True)
        if st.button("Open", key=f"passage_{entry.id}", use_container_width=True):
            session.select_passage(entry.id)
            st.session_state.view = "mode"
            st.rerun()


# -----------------------------------------------------------------------------
# Mode Select
# -----------------------------------------------------------------------------

def render_mode_view():
    """Render the reading mode choice for the selected passage."""
    session = st.session_state.session

    if st.button("← Back to list"):
        st.session_state.view = "list"
        st.rerun()

    if session.passage is None and not session.load_error:
        session.load_passage(session.passage_id)

    title = session.passage.title if session.passage else session.passage_id
    st.markdown(render_progress_header(title, "Choose a reading mode."), unsafe_allow_html=True)

    if session.load_error:
        st.error(session.load_error)
        return

    chunk_enabled = session.can_enter_chunk_mode()
    if st.button("Chunk reading", use_container_width=True, disabled=not chunk_enabled):
        if session.enter_mode(ReaderMode.CHUNK):
            st.session_state.view = "read"
            st.rerun()
    if not chunk_enabled:
        st.caption("Tag sentences in full reading to practise them chunk by chunk.")

    if st.button("Full reading", use_container_width=True):
        if session.enter_mode(ReaderMode.FULL):
            st.session_state.view = "read"
            st.rerun()


# -----------------------------------------------------------------------------
# Reader
# -----------------------------------------------------------------------------

def render_reader_view():
    """Render the reader in the current mode."""
    session = st.session_state.session

    if st.button("← Back to mode select"):
        session.leave_mode()
        st.session_state.view = "mode"
        st.rerun()

    if session.load_error or not session.is_initialized:
        st.markdown(render_progress_header("Data Load Error"), unsafe_allow_html=True)
        st.error(session.load_error or "No content available.")
        return

    if session.mode == ReaderMode.CHUNK:
        render_chunk_reader()
    else:
        render_full_reader()


def render_chunk_reader():
    """Render the chunk walkthrough with controls and end prompt."""
    session = st.session_state.session
    engine = session.engine

    st.markdown(
        render_progress_header(session.passage.title, engine.progress_label()),
        unsafe_allow_html=True,
    )
    st.markdown(render_engine_frame(engine), unsafe_allow_html=True)

    col1, col2, col3 = st.columns(3)
    with col1:
        if st.button("◀ Previous", use_container_width=True, disabled=not engine.can_retreat):
            session.retreat()
            st.rerun()
    with col2:
        if st.button(
            "Translate",
            use_container_width=True,
            disabled=engine.current_chunk() is None,
        ):
            session.reveal_translation()
            st.rerun()
    with col3:
        if st.button("Next ▶", use_container_width=True, disabled=not engine.can_advance):
            session.advance()
            st.rerun()

    if engine.reached_end:
        st.markdown(render_end_prompt(len(engine.active_sentences)), unsafe_allow_html=True)
        col1, col2 = st.columns(2)
        with col1:
            if st.button("Go to beginning", use_container_width=True):
                session.restart()
                st.rerun()
        with col2:
            if st.button("Switch to full view", use_container_width=True):
                session.acknowledge_end(switch_to=ReaderMode.FULL)
                st.rerun()


def render_full_reader():
    """Render the full passage with sentence tagging."""
    session = st.session_state.session
    passage = session.passage

    st.markdown(render_progress_header(passage.title, "Full view"), unsafe_allow_html=True)
    st.markdown(render_full_passage(passage, session.selection.ids), unsafe_allow_html=True)

    st.subheader("Tag sentences for chunk practice")
    for idx, sentence in enumerate(passage.sentences):
        marker = "★" if session.selection.is_selected(sentence.sentence_id) else "☆"
        if st.button(
            f"{marker} {idx + 1}. {sentence.plain_text}",
            key=f"tag_{passage.id}_{sentence.sentence_id}",
            use_container_width=True,
        ):
            session.toggle_sentence(sentence.sentence_id)
            st.rerun()

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Clear tags", use_container_width=True, disabled=not session.selection):
            session.clear_selection()
            st.rerun()
    with col2:
        if st.button(
            f"Practise {len(session.selection)} tagged",
            use_container_width=True,
            disabled=not session.can_enter_chunk_mode(),
        ):
            session.enter_mode(ReaderMode.CHUNK)
            st.rerun()


# -----------------------------------------------------------------------------
# Main App
# -----------------------------------------------------------------------------

def main():
    """Main application entry point."""
    init_session_state()
    render_sidebar()
    st.markdown(get_reader_css(st.session_state.theme), unsafe_allow_html=True)

    # Main content based on view
    if st.session_state.view == "list":
        render_list_view()
    elif st.session_state.view == "mode":
        render_mode_view()
    elif st.session_state.view == "read":
        render_reader_view()


if __name__ == "__main__":
    main()
