"""Rendering helpers turning grid rows into text or HTML."""

from __future__ import annotations

from typing import Optional, Sequence

from .models import Row
from .templating import get_environment


def render_text(rows: Sequence[Row], footer: Optional[Row] = None) -> str:
    """Plain-text rendering, one line per row."""
    lines = [r.text for r in rows]
    if footer is not None:
        lines.append(footer.text)
    return "\n".join(lines)


def render_html(
    rows: Sequence[Row], footer: Optional[Row] = None, title: str = "ZEEFAX"
) -> str:
    """Render a standalone HTML page using the Jinja2 template."""
    env = get_environment()
    template = env.get_template("page.html.j2")
    return template.render(rows=rows, footer=footer, title=title)
