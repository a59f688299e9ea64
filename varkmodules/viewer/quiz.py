"""
Assessment renderer - Result, badge and completion displays.

Provides:
- Per-question result report with explanations
- Score summary box
- Badge card and module completion summary
"""

import html
from typing import Any

from varkmodules.schemas import AssessmentResult, Badge, BadgeTier, GradedAnswer, ModuleCompletionOutcome


BADGE_COLORS = {
    BadgeTier.BRONZE: "#b45309",
    BadgeTier.SILVER: "#6b7280",
    BadgeTier.GOLD: "#ca8a04",
    BadgeTier.PLATINUM: "#0891b2",
}


def get_quiz_css() -> str:
    """Get CSS styles for assessment results."""
    return """
    <style>
    .quiz-container {
        background: #e3f2fd;
        border-radius: 12px;
        padding: 1.5em;
        margin: 1.5em 0;
        border-left: 4px solid #1976D2;
    }
    .quiz-result {
        border-radius: 8px;
        padding: 0.8em 1em;
        margin: 0.6em 0;
        background: white;
    }
    .quiz-result.correct { border-left: 4px solid #388E3C; }
    .quiz-result.incorrect { border-left: 4px solid #D32F2F; }
    .quiz-question {
        font-size: 1.05em;
        color: #333;
        margin-bottom: 0.4em;
    }
    .quiz-answer-label {
        font-weight: 600;
        color: #555;
    }
    .quiz-explanation {
        background: #fff3e0;
        padding: 0.6em 0.8em;
        border-radius: 6px;
        font-size: 0.95em;
        color: #e65100;
        margin-top: 0.5em;
    }
    .quiz-score-box {
        background: #e8f5e9;
        border-radius: 8px;
        padding: 1em;
        margin-top: 1.5em;
        text-align: center;
    }
    .quiz-score-box.failed { background: #ffebee; }
    .quiz-score-value {
        font-size: 2em;
        font-weight: 700;
        color: #388E3C;
    }
    .quiz-score-box.failed .quiz-score-value { color: #C62828; }
    .quiz-score-label {
        color: #666;
        font-size: 0.9em;
    }
    .badge-card {
        border-radius: 12px;
        padding: 1.2em;
        text-align: center;
        color: white;
        margin: 1em 0;
    }
    .badge-icon { font-size: 2.5em; }
    .badge-name { font-size: 1.3em; font-weight: 700; }
    </style>
    """


def format_answer(value: Any) -> str:
    """Readable form of a submitted or correct answer."""
    if value is None or value == "":
        return "(no answer)"
    if isinstance(value, dict):
        value = value.get("selected") or value.get("answer") or value
    if isinstance(value, (list, tuple, set, frozenset)):
        return ", ".join(sorted(str(v) for v in value))
    return str(value)


def render_graded_answer(graded: GradedAnswer) -> str:
    """Render one question's result."""
    status = "correct" if graded.is_correct else "incorrect"
    mark = "✓" if graded.is_correct else "✗"

    parts = [f'<div class="quiz-result {status}">']
    parts.append(
        f'<div class="quiz-question">{mark} <strong>Question {graded.question_number}:</strong> '
        f'{html.escape(graded.question)}</div>'
    )
    parts.append(
        f'<div><span class="quiz-answer-label">Your answer:</span> '
        f'{html.escape(format_answer(graded.user_answer))}</div>'
    )
    if not graded.is_correct and graded.correct_answer is not None:
        parts.append(
            f'<div><span class="quiz-answer-label">Correct answer:</span> '
            f'{html.escape(format_answer(graded.correct_answer))}</div>'
        )
    if graded.explanation:
        parts.append(f'<div class="quiz-explanation">{html.escape(graded.explanation)}</div>')
    parts.append('</div>')
    return ''.join(parts)


def render_quiz_score(result: AssessmentResult) -> str:
    """Render the score summary box."""
    status = "" if result.passed else " failed"
    verdict = "Passed" if result.passed else "Not passed"
    return f"""
    <div class="quiz-score-box{status}">
        <div class="quiz-score-value">{result.percentage:.0f}%</div>
        <div class="quiz-score-label">{result.correct_count} of {result.total_questions} correct
        ({result.total_earned}/{result.total_possible} points) - {verdict}</div>
    </div>
    """


def render_assessment_result(result: AssessmentResult) -> str:
    """
    Render the full report for a submitted assessment.

    Args:
        result: AssessmentResult from the scorer

    Returns:
        HTML string with CSS, per-question results and the score box
    """
    parts = [get_quiz_css(), '<div class="quiz-container">']
    for graded in result.results:
        parts.append(render_graded_answer(graded))
    parts.append(render_quiz_score(result))
    parts.append('</div>')
    return ''.join(parts)


def render_badge(badge: Badge) -> str:
    color = BADGE_COLORS.get(badge.tier, "#6b7280")
    return f"""
    <div class="badge-card" style="background:{color};">
        <div class="badge-icon">{badge.icon}</div>
        <div class="badge-name">{html.escape(badge.name)}</div>
        <div>{html.escape(badge.description)}</div>
        <div style="font-size:0.8em;text-transform:uppercase;">{badge.tier.value}</div>
    </div>
    """


def render_completion_summary(outcome: ModuleCompletionOutcome) -> str:
    """Render the module completion summary with badge."""
    rows = [
        ("Final score", f"{outcome.final_score}%"),
        ("Time spent", f"{outcome.time_spent_minutes} min"),
        ("Sections completed", f"{outcome.sections_completed}/{outcome.total_sections}"),
        ("Perfect sections", str(outcome.perfect_sections)),
    ]
    if outcome.pre_test_score is not None:
        rows.append(("Pre-test", f"{outcome.pre_test_score:.0f}%"))
    if outcome.post_test_score is not None:
        rows.append(("Post-test", f"{outcome.post_test_score:.0f}%"))
    if outcome.improvement is not None:
        rows.append(("Improvement", f"{outcome.improvement:+.0f} points"))

    parts = [get_quiz_css(), render_badge(outcome.badge), '<table style="width:100%;">']
    for label, value in rows:
        parts.append(f'<tr><td><strong>{label}</strong></td><td>{html.escape(value)}</td></tr>')
    parts.append('</table>')
    return ''.join(parts)
