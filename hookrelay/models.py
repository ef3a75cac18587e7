"""Core data models shared across hookrelay components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Tuple

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .config import EffectiveConfig

# Wire names used in hook.json, keyed by attribute name.
_WIRE_FIELDS: Dict[str, str] = {
    "owner": "Owner",
    "repo": "Repo",
    "event_name": "EventName",
    "status_ref": "StatusRef",
    "action": "Action",
    "user_name": "UserName",
    "target": "Target",
    "ref": "Ref",
    "url": "URL",
    "pr_number": "PrNumber",
}


@dataclass(frozen=True)
class HookEvent:
    """A single repository event to be processed."""

    owner: str
    repo: str
    event_name: str = ""
    status_ref: str = ""
    action: str = ""
    user_name: str = ""
    target: str = ""
    ref: str = ""
    url: str = ""
    pr_number: int = 0
    extra: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if not self.owner or not self.repo:
            raise ValueError("hook event requires both Owner and Repo")
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        for attr, wire in _WIRE_FIELDS.items():
            data[wire] = getattr(self, attr)
        return data

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "HookEvent":
        if not isinstance(payload, Mapping):
            raise ValueError("hook event must be a mapping")
        values: Dict[str, Any] = {}
        for attr, wire in _WIRE_FIELDS.items():
            if wire not in payload or payload[wire] is None:
                continue
            raw = payload[wire]
            if attr == "pr_number":
                try:
                    values[attr] = int(raw)
                except (TypeError, ValueError) as exc:
                    raise ValueError(f"PrNumber must be an integer, got {raw!r}") from exc
            else:
                values[attr] = str(raw)
        for required in ("owner", "repo"):
            if not values.get(required):
                raise ValueError(f"hook event is missing {_WIRE_FIELDS[required]}")
        known = set(_WIRE_FIELDS.values())
        extra = {key: value for key, value in payload.items() if key not in known}
        return cls(extra=extra, **values)


@dataclass
class ExecuteResult:
    """Outcome of running the build action for a hook."""

    exit_code: int
    output: Optional[str] = None
    output_path: Optional[str] = None


def check_path_segment(label: str, value: str) -> str:
    """Return ``value`` if it is usable as a single directory name."""
    if (
        not value
        or value in {".", ".."}
        or "/" in value
        or "\\" in value
        or "\x00" in value
    ):
        raise ValueError(f"Invalid {label} name for a path segment: {value!r}")
    return value


class HookState(str, Enum):
    """Notification states; the last three are terminal."""

    PENDING = "pending"
    ERROR = "error"
    FAILURE = "failure"
    SUCCESS = "success"


HookAction = Callable[
    [str, Path, "EffectiveConfig", HookEvent], Tuple[Optional[ExecuteResult], str]
]
"""Performs the real build work for a hook.

Called as ``action(raw_input, result_path, config, event)`` and returns the
execution result plus the location of any output it produced. Raising is how
an action reports that it could not run at all.
"""


__all__ = ["ExecuteResult", "HookAction", "HookEvent", "HookState", "check_path_segment"]
