"""Hook processing pipeline: notify, run the action, record, report."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import EffectiveConfig
from .logging import LoggerLike, hook_logger
from .models import ExecuteResult, HookAction, HookEvent, HookState
from .notify import Notifier
from .stores import RecordingError, ResultRecorder


@dataclass
class HookOutcome:
    """Result of processing a single hook."""

    state: HookState
    run_path: Path
    result: Optional[ExecuteResult] = None
    result_path: str = ""
    error: Optional[BaseException] = None


def classify(result: Optional[ExecuteResult], error: Optional[BaseException]) -> HookState:
    """Map an action outcome onto its terminal state."""
    if error is not None or result is None:
        return HookState.ERROR
    if result.exit_code != 0:
        return HookState.FAILURE
    return HookState.SUCCESS


class Orchestrator:
    """Coordinates notifications, the build action and audit recording for hooks."""

    def __init__(
        self,
        notifier: Notifier | None = None,
        recorder: ResultRecorder | None = None,
    ) -> None:
        self.notifier = notifier or Notifier()
        self.recorder = recorder or ResultRecorder()

    def on_hook(
        self,
        raw_input: str,
        config: EffectiveConfig,
        event: HookEvent,
        action: HookAction,
        logger: LoggerLike | None = None,
    ) -> HookOutcome:
        """Process one hook.

        A pending message goes out before the action runs. The event is then
        recorded under ``result_root/owner/repo/<run>/hook.json`` whatever the
        action did, and a single error, failure or success message follows.

        Only :class:`RecordingError` is raised; action and chat failures end
        up in the returned outcome and the log.
        """
        log = hook_logger(logger, event.owner, event.repo)
        log.info("processing %s hook", event.event_name or "unknown")

        self.notifier.notify(
            config.pending_template, config, event, state=HookState.PENDING, logger=log
        )

        try:
            run_path = self.recorder.allocate(config.result_root, event)
        except RecordingError as exc:
            log.error("unable to allocate a run directory: %s", exc)
            raise

        result: Optional[ExecuteResult] = None
        result_path = ""
        error: Optional[BaseException] = None
        try:
            result, result_path = action(raw_input, run_path, config, event)
        except Exception as exc:
            error = exc
            log.error("action raised %s: %s", type(exc).__name__, exc)
        else:
            if result is None:
                log.error("action returned no result")

        try:
            self.recorder.write_hook(run_path, event)
        except RecordingError as exc:
            log.error("unable to record hook: %s", exc)
            raise

        state = classify(result, error)
        if state is HookState.FAILURE and result is not None:
            log.info("build failure: exit code %d", result.exit_code)
        else:
            log.info("build %s", state.value)
        if result_path:
            log.debug("action output at %s", result_path)

        self.notifier.notify(
            config.template_for(state.value), config, event, state=state, logger=log
        )

        return HookOutcome(
            state=state,
            run_path=run_path,
            result=result,
            result_path=result_path or "",
            error=error,
        )


def on_hook(
    raw_input: str,
    config: EffectiveConfig,
    event: HookEvent,
    action: HookAction,
    logger: LoggerLike | None = None,
) -> HookOutcome:
    """Process one hook with the default notifier and recorder."""
    return Orchestrator().on_hook(raw_input, config, event, action, logger)


__all__ = ["HookOutcome", "Orchestrator", "classify", "on_hook"]
