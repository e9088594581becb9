"""Jinja2 environment for zeefax templates."""

from __future__ import annotations

from importlib import resources
from typing import Optional
from urllib.parse import urlparse

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .palette import css_for

WEB_SCHEMES = ("http", "https")

_ENV: Environment | None = None


def is_web_link(value: Optional[str]) -> bool:
    """True for absolute http(s) URLs; anything else is rendered as plain text."""
    if not value:
        return False
    parsed = urlparse(value.strip())
    return parsed.scheme.lower() in WEB_SCHEMES and bool(parsed.netloc)


def get_environment() -> Environment:
    """Return a cached Jinja environment configured for package templates."""
    global _ENV
    if _ENV is None:
        template_dir = resources.files(__package__) / "templates"
        loader = FileSystemLoader(str(template_dir))
        _ENV = Environment(
            loader=loader,
            autoescape=select_autoescape(["html", "xml", "html.j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        _ENV.filters["css"] = css_for
        _ENV.tests["web_link"] = is_web_link
    return _ENV
