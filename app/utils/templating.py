"""Jinja2 rendering for email bodies and printable admin pages."""

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

_JINJA_ENV = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=False,
)


def render_template(template_name: str, /, **context: Any) -> str:
    """Render a template under app/templates.

    The template name is positional-only so templates can take a ``name``
    variable.
    """
    return _JINJA_ENV.get_template(template_name).render(**context).strip()
