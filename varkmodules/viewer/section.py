"""
Section renderer - Generate HTML for module sections.

Features:
- Rich-text passthrough for authored HTML (inline image styles stripped)
- Media embeds for video and audio sections
- Tables built from authored headers and rows
- Callout boxes for highlight, quick check and activity sections
- Learning style tags
"""

import html
import re

from varkmodules.schemas import LearningStyle, Section, SectionType


LEARNING_STYLE_COLORS = {
    LearningStyle.EVERYONE: "#0d9488",         # Teal
    LearningStyle.VISUAL: "#2563eb",           # Blue
    LearningStyle.AUDITORY: "#16a34a",         # Green
    LearningStyle.READING_WRITING: "#9333ea",  # Purple
    LearningStyle.KINESTHETIC: "#ea580c",      # Orange
}

_IMG_STYLE = re.compile(r'<img([^>]*?)\s+style\s*=\s*["\'][^"\']*["\']([^>]*?)>', re.IGNORECASE)


def get_section_css() -> str:
    """Get CSS styles for section display."""
    return """
    <style>
    .section-container {
        padding: 1em 0;
        line-height: 1.7;
    }
    .section-container img {
        max-width: 100%;
        height: auto;
    }
    .section-callout {
        border-radius: 10px;
        padding: 1em 1.2em;
        margin: 1em 0;
    }
    .callout-highlight { background: #fffbeb; border-left: 4px solid #f59e0b; }
    .callout-check { background: #eff6ff; border-left: 4px solid #3b82f6; }
    .callout-activity { background: #fff7ed; border-left: 4px solid #f97316; }
    .section-table { width: 100%; border-collapse: collapse; }
    .section-table th, .section-table td { padding: 0.5em 0.8em; border-bottom: 1px solid #e5e7eb; text-align: left; }
    .section-table thead tr { background: #f9fafb; }
    .section-table.header-highlight thead tr { background: #f3f4f6; }
    .section-table.striped tbody tr:nth-child(even) { background: #f9fafb; }
    .section-table caption { color: #4b5563; font-size: 0.9em; margin-bottom: 0.4em; }
    .section-table { width: 100%; border-collapse: collapse; }
    .section-table th, .section-table td {
        padding: 0.5em 0.8em;
        border-bottom: 1px solid #e5e7eb;
        text-align: left;
    }
    .section-table thead tr { background: #f9fafb; }
    .section-table.header-highlight thead tr { background: #f3f4f6; }
    .section-table.striped tbody tr:nth-child(even) { background: #f9fafb; }
    .section-table caption { color: #4b5563; font-size: 0.9em; }
    .style-tag {
        display: inline-block;
        color: white;
        border-radius: 12px;
        padding: 0.1em 0.7em;
        margin-right: 0.4em;
        font-size: 0.8em;
    }
    </style>
    """


def clean_image_styles(content: str) -> str:
    """Remove inline style attributes from <img> tags in authored HTML."""
    if not content:
        return ""
    return _IMG_STYLE.sub(r"<img\1\2>", content)


def render_style_tags(section: Section) -> str:
    parts = []
    for style in section.learning_style_tags:
        color = LEARNING_STYLE_COLORS.get(style, "#6b7280")
        label = style.value.replace("_", " ").title()
        parts.append(f'<span class="style-tag" style="background:{color};">{html.escape(label)}</span>')
    return ''.join(parts)


def _text(section: Section, key: str = "text") -> str:
    return html.escape(str(section.content_data.get(key) or "")).replace('\n', '<br>')


def render_table(table_data: dict) -> str:
    """
    Render authored table data.

    Args:
        table_data: {"headers": [...], "rows": [[...], ...], "caption": str,
            "styling": {"zebra_stripes": bool, "highlight_header": bool}}

    Returns:
        HTML table with every cell escaped
    """
    styling = table_data.get("styling") or {}
    classes = ["section-table"]
    if styling.get("zebra_stripes"):
        classes.append("striped")
    if styling.get("highlight_header"):
        classes.append("header-highlight")

    parts = [f'<table class="{" ".join(classes)}">']
    caption = table_data.get("caption")
    if caption:
        parts.append(f'<caption>{html.escape(str(caption))}</caption>')
    headers = table_data.get("headers") or []
    if headers:
        cells = ''.join(f'<th>{html.escape(str(h))}</th>' for h in headers)
        parts.append(f'<thead><tr>{cells}</tr></thead>')
    parts.append('<tbody>')
    for row in table_data.get("rows") or []:
        cells = ''.join(f'<td>{html.escape(str(cell))}</td>' for cell in row)
        parts.append(f'<tr>{cells}</tr>')
    parts.append('</tbody></table>')
    return ''.join(parts)


def render_section_body(section: Section) -> str:
    """Render the type-specific body of a section."""
    data = section.content_data
    kind = section.content_type

    if kind == SectionType.TABLE and data.get("table_data"):
        return render_table(data["table_data"])

    if kind in (SectionType.TEXT, SectionType.READ_ALOUD, SectionType.TABLE):
        # Authored rich text is trusted HTML
        return clean_image_styles(str(data.get("text") or data.get("html") or ""))

    if kind == SectionType.VIDEO:
        url = html.escape(str(data.get("video_url") or data.get("url") or ""))
        return f'<video controls src="{url}" style="width:100%;"></video>' if url else ""

    if kind == SectionType.AUDIO:
        url = html.escape(str(data.get("audio_url") or data.get("url") or ""))
        return f'<audio controls src="{url}"></audio>' if url else ""

    if kind == SectionType.HIGHLIGHT:
        return f'<div class="section-callout callout-highlight">{_text(section)}</div>'

    if kind == SectionType.QUICK_CHECK:
        return f'<div class="section-callout callout-check"><strong>Quick Check</strong><br>{_text(section)}</div>'

    if kind == SectionType.ACTIVITY:
        return f'<div class="section-callout callout-activity">{_text(section, "instructions") or _text(section)}</div>'

    if kind == SectionType.DIAGRAM:
        src = html.escape(str(data.get("image_url") or ""))
        caption = _text(section, "caption")
        image = f'<img src="{src}" alt="{caption}">' if src else ""
        return f'<figure>{image}<figcaption>{caption}</figcaption></figure>'

    if kind == SectionType.INTERACTIVE:
        return '<p style="color:#666;">Interactive content will be displayed here</p>'

    # Assessments are rendered as interactive widgets by the app
    return ""


def render_section(section: Section) -> str:
    """
    Render a section with its title, style tags and body.

    Args:
        section: Section to render

    Returns:
        HTML string for the section
    """
    parts = ['<div class="section-container">']
    parts.append(f'<h2>{html.escape(section.title)}</h2>')
    tags = render_style_tags(section)
    if tags:
        parts.append(f'<div>{tags}</div>')
    parts.append(render_section_body(section))
    parts.append('</div>')
    return ''.join(parts)
