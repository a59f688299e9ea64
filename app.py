"""
VARK Modules - Personalized Learning Module Viewer

Streamlit application that walks a learner through a VARK module:
sections in order, graded assessments, gated navigation, and a completion
summary with badge.

Usage:
    streamlit run app.py
"""

import logging

import streamlit as st

from varkmodules.auth import EnvironmentSessionProvider, resolve_learner
from varkmodules.classroom import (
    ModuleLoader,
    ModuleSession,
    NavigationAction,
    SQLiteStore,
    get_learner_stats,
)
from varkmodules.config import load_config
from varkmodules.schemas import LearningStyle, QuestionType, SectionType
from varkmodules.viewer import (
    get_section_css,
    render_assessment_result,
    render_completion_summary,
    render_section,
)


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)

st.set_page_config(
    page_title="VARK Modules",
    page_icon="🎓",
    layout="wide",
    initial_sidebar_state="expanded",
)


# -----------------------------------------------------------------------------
# Session State Initialization
# -----------------------------------------------------------------------------

def init_session_state():
    """Initialize session state variables."""
    if "config" not in st.session_state:
        st.session_state.config = load_config()

    config = st.session_state.config

    if "store" not in st.session_state:
        st.session_state.store = SQLiteStore(config.db_path)

    if "loader" not in st.session_state:
        if config.modules_dir.is_dir():
            st.session_state.loader = ModuleLoader(config.modules_dir)
        else:
            st.session_state.loader = None

    if "learner" not in st.session_state:
        st.session_state.learner = resolve_learner(
            EnvironmentSessionProvider(), timeout=config.auth_timeout_seconds
        )

    if "module_session" not in st.session_state:
        st.session_state.module_session = None


def open_module(module_id: str):
    """Open a module, closing any session in progress."""
    previous = st.session_state.module_session
    if previous is not None:
        previous.close()

    module = st.session_state.loader.get_module(module_id)
    if module is None:
        st.error(f"Module not found: {module_id}")
        return

    st.session_state.module_session = ModuleSession(
        module,
        st.session_state.learner,
        store=st.session_state.store,
        config=st.session_state.config,
    )


# -----------------------------------------------------------------------------
# Sidebar
# -----------------------------------------------------------------------------

def render_sidebar():
    """Render module picker, progress and section list."""
    st.sidebar.title("🎓 VARK Modules")

    learner = st.session_state.learner
    if learner:
        st.sidebar.caption(f"Signed in as {learner.display_name}")
        stats = get_learner_stats(st.session_state.store, learner.user_id)
        st.sidebar.markdown(
            f"**Completed:** {stats['total_modules_completed']} modules · "
            f"**Badges:** {stats['total_badges']}"
        )
    else:
        st.sidebar.warning("Not signed in. Progress will not be saved.")

    loader = st.session_state.loader
    if not loader:
        st.sidebar.error("Modules directory not found.")
        return

    summaries = loader.list_modules()
    if not summaries:
        st.sidebar.info("No modules available.")
        return

    titles = {s.id: s.title for s in summaries}
    current = st.session_state.module_session
    ids = list(titles)
    index = ids.index(current.module.id) if current and current.module.id in titles else 0
    selected = st.sidebar.selectbox("Module", ids, index=index, format_func=titles.get)
    if current is None or current.module.id != selected:
        open_module(selected)

    session = st.session_state.module_session
    if session is None:
        return

    st.sidebar.divider()
    st.sidebar.progress(session.progress_percent() / 100)
    st.sidebar.caption(f"{session.progress_percent():.0f}% complete")

    styles = [None] + list(LearningStyle)
    style = st.sidebar.selectbox(
        "Learning style", styles,
        format_func=lambda s: "All sections" if s is None else s.value.replace("_", " ").title(),
    )
    shown = {s.id for s in session.module.sections_for_style(style)} if style else None

    for position, section in enumerate(session.module.sections):
        if shown is not None and section.id not in shown:
            continue
        indicator = "✓" if session.is_complete(section.id) else ("→" if position == session.current_index else "○")
        if st.sidebar.button(f"{indicator} {section.title or section.id}", key=f"section_{section.id}",
                             use_container_width=True):
            session.jump_to(position)
            st.rerun()


# -----------------------------------------------------------------------------
# Main Content
# -----------------------------------------------------------------------------

def render_question_input(session: ModuleSession, section_id: str, index: int, question):
    """Render an input widget for one question and store its draft answer."""
    key = f"answer_{section_id}_{index}"
    st.markdown(f"**Question {index + 1}:** {question.question}")

    if question.type in (QuestionType.SINGLE_CHOICE, QuestionType.TRUE_FALSE):
        options = question.options or (["True", "False"] if question.type == QuestionType.TRUE_FALSE else [])
        choice = st.radio("Answer", options, index=None, key=key, label_visibility="collapsed")
        session.set_answer(section_id, index, {"selected": choice} if choice else None)
    elif question.type == QuestionType.MULTIPLE_CHOICE:
        choices = st.multiselect("Answer", question.options, key=key, label_visibility="collapsed")
        session.set_answer(section_id, index, choices)
    else:
        text = st.text_input("Answer", key=key, label_visibility="collapsed")
        session.set_answer(section_id, index, {"answer": text} if text.strip() else None)


def render_assessment(session: ModuleSession, section):
    """Render an assessment section: inputs before submission, results after."""
    questions = session.module.questions_for_section(section)
    result = session.results.get(section.id)

    if session.has_submitted(section.id):
        if result:
            st.markdown(render_assessment_result(result), unsafe_allow_html=True)
        else:
            st.success("Submitted.")
        return

    if not questions:
        st.info("This assessment has no questions.")

    for index, question in enumerate(questions):
        render_question_input(session, section.id, index, question)

    if st.button("Submit assessment", type="primary", use_container_width=True):
        session.submit_assessment(section.id)
        st.rerun()


def render_navigation_bar(session: ModuleSession):
    """Render previous / next (or finish) buttons with the gate's verdict."""
    decision = session.can_advance()
    pos, total = session.navigator.get_position()

    col1, col2, col3 = st.columns([1, 2, 1])

    with col1:
        if st.button("← Previous", disabled=session.navigator.is_first, use_container_width=True):
            session.go_back()
            st.rerun()

    with col2:
        st.markdown(f"<center>Section {pos} of {total}</center>", unsafe_allow_html=True)

    with col3:
        label = "Finish module" if decision.action == NavigationAction.FINISH else "Next →"
        if st.button(label, disabled=not decision.allowed, use_container_width=True):
            session.advance()
            st.rerun()

    if not decision.allowed:
        st.caption(decision.reason)


def render_module_view():
    """Render the current section of the open module."""
    session = st.session_state.module_session
    if session is None:
        st.info("Select a module from the sidebar to begin.")
        return

    session.poll()

    st.title(session.module.title)
    if session.module.description:
        st.caption(session.module.description)

    for warning in session.warnings:
        st.warning(warning)

    if session.completion is not None:
        render_completion(session)

    section = session.current_section
    if section is None:
        st.info("This module has no sections yet.")
        return

    render_navigation_bar(session)

    st.markdown(get_section_css(), unsafe_allow_html=True)
    st.markdown(render_section(section), unsafe_allow_html=True)

    if section.content_type == SectionType.ASSESSMENT:
        render_assessment(session, section)
    elif section.content_type == SectionType.QUICK_CHECK and not session.is_complete(section.id):
        col1, col2 = st.columns(2)
        with col1:
            if st.button("Yes, let's go!", use_container_width=True):
                session.mark_complete(section.id)
                st.rerun()
        with col2:
            if st.button("Not yet, I'd like to review a bit more", use_container_width=True):
                session.go_back()
                st.rerun()
    elif not session.is_complete(section.id):
        if st.button("Mark section as complete", type="primary", use_container_width=True):
            session.mark_complete(section.id)
            st.rerun()
    else:
        st.success("Section completed!")


def render_completion(session: ModuleSession):
    """Render the completion summary and a retry action for failed saves."""
    completion = session.completion
    if st.session_state.get("celebrated") is not completion:
        st.balloons()
        st.session_state.celebrated = completion
    st.markdown(render_completion_summary(completion.outcome), unsafe_allow_html=True)
    if not completion.report.ok:
        if st.button("Retry saving completion"):
            report = session.retry_failed_effects()
            if report and report.ok:
                session.warnings.clear()
            st.rerun()


@st.fragment(run_every=0.5)
def watch_completion():
    """Rerun the page once the debounced completion check has run."""
    session = st.session_state.module_session
    if session is not None and session.poll():
        st.rerun()


# -----------------------------------------------------------------------------
# Main App
# -----------------------------------------------------------------------------

def main():
    """Main application entry point."""
    init_session_state()
    render_sidebar()
    render_module_view()

    session = st.session_state.module_session
    if session is not None and session.scheduler.pending:
        watch_completion()


if __name__ == "__main__":
    main()
