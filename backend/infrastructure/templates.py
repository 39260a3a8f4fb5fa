from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from markupsafe import Markup, escape

from backend.core.settings import Settings

TEMPLATE_DIR = Path(__file__).resolve().parents[1] / "templates" / "email"


def _nl2br(value: str) -> str:
    return Markup("<br>").join(escape(line) for line in str(value).splitlines())


class EmailRenderer:
    """Render HTML email bodies from the bundled Jinja2 templates."""

    def __init__(self, settings: Settings, template_dir: Path = TEMPLATE_DIR) -> None:
        self._settings = settings
        self._env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._env.filters["nl2br"] = _nl2br

    def render(self, template_name: str, context: dict[str, Any]) -> str:
        now = datetime.now(timezone.utc)
        base = {
            "company_name": self._settings.company_name,
            "site_url": self._settings.site_url,
            "contact_email": self._settings.ops_email,
            "year": now.year,
            "submitted_at": now.strftime("%Y-%m-%d %H:%M UTC"),
        }
        base.update(context)
        return self._env.get_template(template_name).render(**base)
