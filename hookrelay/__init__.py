"""Build-status relay for repository webhooks."""

from .config import ConfigError, EffectiveConfig, load_config
from .models import ExecuteResult, HookAction, HookEvent, HookState
from .orchestrator import HookOutcome, Orchestrator, classify, on_hook
from .stores import RecordingError, ResultRecorder

__all__ = [
    "ConfigError",
    "EffectiveConfig",
    "ExecuteResult",
    "HookAction",
    "HookEvent",
    "HookOutcome",
    "HookState",
    "Orchestrator",
    "RecordingError",
    "ResultRecorder",
    "classify",
    "load_config",
    "on_hook",
]
