"""
Builds the standalone HTML document rendered in HTML mode
"""

import os
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader

from .utils import script_safe_json

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")

# Caller markup is inserted verbatim
_environment = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=False,
    keep_trailing_newline=False,
)


def build_document(html: str, css: str = "", state: Optional[Dict[str, Any]] = None, transparent: bool = True) -> str:
    """
    Wrap an HTML fragment in a complete document.

    The transparent shell sizes html/body to their content; the standard shell
    uses a regular responsive viewport. A non-empty state is published as
    window.__INITIAL_STATE__ from the head, before any body script runs.
    """
    template = _environment.get_template("transparent.html" if transparent else "standard.html")
    state_json = script_safe_json(state) if state else None
    return template.render(html=html, css=css or "", state_json=state_json).strip()
