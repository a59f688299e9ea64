"""
VARK Modules Viewer - Rendering components for module display.

This module provides:
- Section rendering with learning style tags
- Assessment result reports
- Badge and completion summary display
"""

from .section import (
    get_section_css,
    clean_image_styles,
    render_style_tags,
    render_table,
    render_section_body,
    render_section,
    LEARNING_STYLE_COLORS,
)

from .quiz import (
    get_quiz_css,
    format_answer,
    render_graded_answer,
    render_quiz_score,
    render_assessment_result,
    render_badge,
    render_completion_summary,
    BADGE_COLORS,
)

__all__ = [
    # Section rendering
    "get_section_css",
    "clean_image_styles",
    "render_style_tags",
    "render_table",
    "render_section_body",
    "render_section",
    "LEARNING_STYLE_COLORS",
    # Assessment rendering
    "get_quiz_css",
    "format_answer",
    "render_graded_answer",
    "render_quiz_score",
    "render_assessment_result",
    "render_badge",
    "render_completion_summary",
    "BADGE_COLORS",
]
