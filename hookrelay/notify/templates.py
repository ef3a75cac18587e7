"""Message templating for chat notifications."""

from __future__ import annotations

import re
from typing import Dict

from jinja2 import ChainableUndefined, TemplateError
from jinja2.sandbox import SandboxedEnvironment

from ..models import HookEvent

PLACEHOLDERS = ("Owner", "Repo", "Target", "UserName")

# Accepts the older "{{.Owner}}" spelling used by existing configs.
_DOTTED_PLACEHOLDER = re.compile(r"\{\{\s*\.([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")

_ENVIRONMENT = SandboxedEnvironment(
    undefined=ChainableUndefined,
    autoescape=False,
    keep_trailing_newline=True,
)


class TemplateRenderError(RuntimeError):
    """Raised when a template cannot be parsed or rendered."""


def template_context(event: HookEvent) -> Dict[str, str]:
    """Bind the supported placeholders to the event's values."""
    return {
        "Owner": event.owner,
        "Repo": event.repo,
        "Target": event.target,
        "UserName": event.user_name,
    }


def normalize_template(template: str) -> str:
    return _DOTTED_PLACEHOLDER.sub(lambda match: "{{ %s }}" % match.group(1), template)


def render_template(template: str, event: HookEvent) -> str:
    """Render ``template`` for ``event``.

    Only the names in :data:`PLACEHOLDERS` are bound; any other name renders
    as an empty string.
    """
    if not template:
        return ""
    try:
        compiled = _ENVIRONMENT.from_string(normalize_template(template))
        return compiled.render(template_context(event))
    except TemplateError as exc:
        raise TemplateRenderError(f"Unable to render template {template!r}: {exc}") from exc
    except Exception as exc:
        # Expressions such as {{ Owner + 1 }} parse fine and fail while rendering.
        raise TemplateRenderError(
            f"Template {template!r} failed while rendering: {type(exc).__name__}: {exc}"
        ) from exc


__all__ = [
    "PLACEHOLDERS",
    "TemplateRenderError",
    "normalize_template",
    "render_template",
    "template_context",
]
