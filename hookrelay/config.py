"""Configuration loading for hookrelay (config.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .models import check_path_segment

CONFIG_FILE_NAME = "config.yml"
DEFAULT_RESULT_ROOT = "results"

DEFAULT_PENDING_TEMPLATE = "Started build of {{ Owner }}/{{ Repo }} for {{ Target }}"
DEFAULT_ERROR_TEMPLATE = "Error while building {{ Owner }}/{{ Repo }} for {{ Target }}"
DEFAULT_FAILURE_TEMPLATE = "Build of {{ Owner }}/{{ Repo }} failed for {{ Target }} ({{ UserName }})"
DEFAULT_SUCCESS_TEMPLATE = "Build of {{ Owner }}/{{ Repo }} succeeded for {{ Target }} ({{ UserName }})"

ENV_HIPCHAT_TOKEN = "HOOKRELAY_HIPCHAT_TOKEN"
ENV_HIPCHAT_ROOM = "HOOKRELAY_HIPCHAT_ROOM"


class ConfigError(RuntimeError):
    """Raised when a configuration file cannot be parsed."""


@dataclass(frozen=True)
class EffectiveConfig:
    """Fully resolved settings needed to process one hook."""

    pending_template: str = DEFAULT_PENDING_TEMPLATE
    error_template: str = DEFAULT_ERROR_TEMPLATE
    failure_template: str = DEFAULT_FAILURE_TEMPLATE
    success_template: str = DEFAULT_SUCCESS_TEMPLATE
    hipchat_token: str = ""
    hipchat_room: str = ""
    result_root: Path = Path(DEFAULT_RESULT_ROOT)

    def template_for(self, state: str) -> str:
        templates = {
            "pending": self.pending_template,
            "error": self.error_template,
            "failure": self.failure_template,
            "success": self.success_template,
        }
        try:
            return templates[state]
        except KeyError as exc:
            raise ValueError(f"Unknown hook state '{state}'") from exc


def load_config(
    config_root: Path,
    owner: str | None = None,
    repo: str | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> EffectiveConfig:
    """Resolve the effective configuration for a repository.

    Settings come from ``config_root/config.yml``, overridden key by key by
    ``config_root/<owner>/<repo>/config.yml`` when both names are given.
    Names that are not plain directory names raise :class:`ConfigError`.
    Chat credentials fall back to the environment when no file sets them.
    """
    root = Path(config_root).expanduser().resolve()
    env = os.environ if environ is None else environ

    merged = _read_config(root / CONFIG_FILE_NAME)
    if owner is not None and repo is not None:
        for label, value in (("owner", owner), ("repo", repo)):
            try:
                check_path_segment(label, value)
            except ValueError as exc:
                raise ConfigError(str(exc)) from exc
        repo_data = _read_config(root / owner / repo / CONFIG_FILE_NAME)
        merged = _merge(merged, repo_data)

    templates = _as_dict(merged.get("templates"))
    hipchat = _as_dict(merged.get("hipchat"))

    result_root_str = _as_str(merged.get("result_root")) or DEFAULT_RESULT_ROOT
    result_root = Path(result_root_str).expanduser()
    if not result_root.is_absolute():
        result_root = root / result_root

    config = EffectiveConfig(
        hipchat_token=_as_str(hipchat.get("token")) or env.get(ENV_HIPCHAT_TOKEN, ""),
        hipchat_room=_as_str(hipchat.get("room")) or env.get(ENV_HIPCHAT_ROOM, ""),
        result_root=result_root,
    )

    overrides: Dict[str, str] = {}
    for state in ("pending", "error", "failure", "success"):
        value = _as_str(templates.get(state))
        if value is not None:
            overrides[f"{state}_template"] = value
    if overrides:
        config = replace(config, **overrides)
    return config


def _read_config(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    if not text.strip():
        return {}

    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path} must contain a mapping at the root")
    return loaded


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


__all__ = ["ConfigError", "EffectiveConfig", "load_config"]
