"""Page rendering.

Routes only know a template name and a data mapping; the Renderer protocol
hides how the bytes are produced.  JinjaRenderer is the production
implementation and loads from webex_oauth/templates.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


class Renderer(Protocol):
    def render(self, name: str, context: Mapping[str, Any]) -> bytes: ...


class JinjaRenderer:
    def __init__(self, directory: Path = TEMPLATES_DIR) -> None:
        # Jinja2Templates enables HTML autoescaping for .html templates.
        self._templates = Jinja2Templates(directory=str(directory))

    def render(self, name: str, context: Mapping[str, Any]) -> bytes:
        template = self._templates.get_template(name)
        return template.render(**context).encode("utf-8")
