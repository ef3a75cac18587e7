"""Tests for hookrelay.orchestrator."""

from __future__ import annotations

import json
import threading
from pathlib import Path

import pytest

from hookrelay.config import EffectiveConfig
from hookrelay.models import ExecuteResult, HookEvent, HookState
from hookrelay.notify import HipChatClient, Notifier
from hookrelay.orchestrator import Orchestrator, classify, on_hook
from hookrelay.stores import HOOK_FILE_NAME, RecordingError, ResultRecorder
from tests._fixtures.chat import RecordingSender


def _action(exit_code: int = 0, error: Exception | None = None):
    calls: list[tuple] = []

    def action(raw_input, result_path, config, event):
        calls.append((raw_input, result_path, config, event))
        if error is not None:
            raise error
        return ExecuteResult(exit_code=exit_code), str(result_path)

    action.calls = calls  # type: ignore[attr-defined]
    return action


def _orchestrator(sender: RecordingSender) -> Orchestrator:
    return Orchestrator(notifier=Notifier(HipChatClient(sender=sender)))


def _single_run(result_root: Path, owner: str, repo: str) -> Path:
    repo_results = result_root / owner / repo
    assert repo_results.is_dir(), f"{repo_results} was not created"
    runs = list(repo_results.iterdir())
    assert len(runs) == 1, "expected exactly one run directory"
    return runs[0]


@pytest.mark.parametrize(
    "exit_code,error,expected",
    [
        (0, None, HookState.SUCCESS),
        (1234, None, HookState.FAILURE),
        (-1, None, HookState.FAILURE),
        (0, RuntimeError("boom"), HookState.ERROR),
        (1234, RuntimeError("boom"), HookState.ERROR),
    ],
)
def test_classify(exit_code: int, error: Exception | None, expected: HookState) -> None:
    assert classify(ExecuteResult(exit_code=exit_code), error) is expected


def test_classify_missing_result_is_error() -> None:
    assert classify(None, None) is HookState.ERROR


def test_success_logs_pending_then_success(config, event, sender, log_buffer) -> None:
    logger, buffer = log_buffer

    outcome = _orchestrator(sender).on_hook("not-used", config, event, _action(0), logger)

    assert outcome.state is HookState.SUCCESS
    output = buffer.getvalue()
    assert "Acme" in output
    assert "build success" in output
    assert output.index("pending Acme") < output.index("hipchat success")
    assert sender.texts == ["pending Acme", "success "]
    assert sender.colors == ["yellow", "green"]


def test_failure_logs_failure_and_records(config, event, sender, log_buffer) -> None:
    logger, buffer = log_buffer

    outcome = _orchestrator(sender).on_hook("not-used", config, event, _action(1234), logger)

    assert outcome.state is HookState.FAILURE
    assert outcome.result is not None and outcome.result.exit_code == 1234
    output = buffer.getvalue()
    assert "Acme" in output
    assert "build failure" in output
    assert "exit code 1234" in output
    assert sender.colors == ["yellow", "red"]
    assert (_single_run(config.result_root, event.owner, event.repo) / HOOK_FILE_NAME).exists()


def test_error_logs_error_with_repo_and_records(config, event, sender, log_buffer) -> None:
    logger, buffer = log_buffer
    failure = RuntimeError("boom")

    outcome = _orchestrator(sender).on_hook(
        "not-used", config, event, _action(0, error=failure), logger
    )

    assert outcome.state is HookState.ERROR
    assert outcome.error is failure
    output = buffer.getvalue()
    assert "Acme" in output
    assert "error widget" in output
    assert "boom" in output
    assert sender.texts[-1] == "error widget"
    assert (_single_run(config.result_root, event.owner, event.repo) / HOOK_FILE_NAME).exists()


def test_action_returning_no_result_is_error(config, event, sender) -> None:
    outcome = _orchestrator(sender).on_hook(
        "not-used", config, event, lambda r, p, c, h: (None, ""), None
    )

    assert outcome.state is HookState.ERROR
    assert sender.texts[-1] == "error widget"


@pytest.mark.parametrize(
    "exit_code,error",
    [(0, None), (123, None), (0, RuntimeError("Bad Bad thing happened"))],
)
def test_results_directory_created_for_every_outcome(
    tmp_path: Path, exit_code: int, error: Exception | None
) -> None:
    config = EffectiveConfig(result_root=tmp_path)
    event = HookEvent(owner="Acme", repo="widget")

    outcome = on_hook("not-used", config, event, _action(exit_code, error), None)

    run = _single_run(tmp_path, "Acme", "widget")
    assert outcome.run_path == run
    assert [entry.name for entry in run.iterdir()] == [HOOK_FILE_NAME]


def test_hook_gets_recorded(tmp_path: Path) -> None:
    hook = HookEvent(owner="Acme", repo="widget", status_ref="fooooooooooooooooooo")

    on_hook("not-used", EffectiveConfig(result_root=tmp_path), hook, _action(0), None)

    hook_file = _single_run(tmp_path, "Acme", "widget") / HOOK_FILE_NAME
    parsed = json.loads(hook_file.read_text(encoding="utf-8"))
    assert parsed["Owner"] == hook.owner
    assert parsed["Repo"] == hook.repo
    assert parsed["StatusRef"] == hook.status_ref


def test_action_receives_run_directory_and_inputs(config, event, sender) -> None:
    action = _action(0)

    outcome = _orchestrator(sender).on_hook("payload", config, event, action, None)

    assert len(action.calls) == 1
    raw_input, result_path, passed_config, passed_event = action.calls[0]
    assert raw_input == "payload"
    assert result_path == outcome.run_path
    assert result_path.is_dir()
    assert passed_config is config
    assert passed_event is event
    assert outcome.result_path == str(outcome.run_path)


def test_pending_is_sent_before_action_runs(config, event, sender) -> None:
    seen_by_action: list[list[str]] = []

    def action(raw_input, result_path, cfg, hook):
        seen_by_action.append(list(sender.texts))
        return ExecuteResult(exit_code=0), ""

    _orchestrator(sender).on_hook("not-used", config, event, action, None)

    assert seen_by_action == [["pending Acme"]]


def test_chat_failures_do_not_change_outcome(config, event, log_buffer) -> None:
    logger, buffer = log_buffer
    sender = RecordingSender(fail=True)

    outcome = _orchestrator(sender).on_hook("not-used", config, event, _action(0), logger)

    assert outcome.state is HookState.SUCCESS
    assert len(sender.messages) == 2
    assert "Failed to deliver" in buffer.getvalue()
    assert (outcome.run_path / HOOK_FILE_NAME).exists()


def test_without_logger_still_records_and_notifies(config, event, sender) -> None:
    outcome = _orchestrator(sender).on_hook("not-used", config, event, _action(0), None)

    assert outcome.state is HookState.SUCCESS
    assert len(sender.messages) == 2
    assert (outcome.run_path / HOOK_FILE_NAME).exists()


def test_recording_error_propagates_and_skips_terminal_message(
    tmp_path: Path, config, event, sender
) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    broken = EffectiveConfig(
        pending_template=config.pending_template,
        hipchat_token=config.hipchat_token,
        hipchat_room=config.hipchat_room,
        result_root=blocker,
    )
    action = _action(0)

    with pytest.raises(RecordingError):
        _orchestrator(sender).on_hook("not-used", broken, event, action, None)

    assert sender.texts == ["pending Acme"]
    assert not action.calls


def test_hook_write_failure_propagates_after_action(config, event, sender) -> None:
    class FailingRecorder(ResultRecorder):
        def write_hook(self, run_path, event):
            raise RecordingError("disk full")

    orchestrator = Orchestrator(
        notifier=Notifier(HipChatClient(sender=sender)), recorder=FailingRecorder()
    )
    action = _action(0)

    with pytest.raises(RecordingError, match="disk full"):
        orchestrator.on_hook("not-used", config, event, action, None)

    assert len(action.calls) == 1
    assert sender.texts == ["pending Acme"]


def test_concurrent_hooks_for_same_repo_do_not_collide(config, sender) -> None:
    orchestrator = _orchestrator(sender)
    outcomes = []
    lock = threading.Lock()

    def worker(index: int) -> None:
        hook = HookEvent(owner="Acme", repo="widget", status_ref=f"ref-{index}")
        outcome = orchestrator.on_hook("not-used", config, hook, _action(index % 2), None)
        with lock:
            outcomes.append((index, outcome))

    threads = [threading.Thread(target=worker, args=(index,)) for index in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    run_paths = {outcome.run_path for _, outcome in outcomes}
    assert len(run_paths) == 8
    assert len(list((config.result_root / "Acme" / "widget").iterdir())) == 8
    for index, outcome in outcomes:
        parsed = json.loads((outcome.run_path / HOOK_FILE_NAME).read_text(encoding="utf-8"))
        assert parsed["StatusRef"] == f"ref-{index}"
    assert len(sender.messages) == 16


def test_templates_failing_at_render_time_do_not_stop_the_hook(config, event, sender, log_buffer) -> None:
    logger, buffer = log_buffer
    fragile = EffectiveConfig(
        pending_template="pending {{ Owner + 1 }}",
        success_template="success {{ 1 / 0 }}",
        hipchat_token=config.hipchat_token,
        hipchat_room=config.hipchat_room,
        result_root=config.result_root,
    )
    action = _action(0)

    outcome = _orchestrator(sender).on_hook("not-used", fragile, event, action, logger)

    assert outcome.state is HookState.SUCCESS
    assert len(action.calls) == 1
    assert (outcome.run_path / HOOK_FILE_NAME).exists()
    assert sender.texts == ["pending {{ Owner + 1 }}", "success {{ 1 / 0 }}"]
    output = buffer.getvalue()
    assert "TypeError" in output
    assert "ZeroDivisionError" in output


def test_null_byte_in_owner_surfaces_as_recording_error(config, sender) -> None:
    hook = HookEvent(owner="Ac\x00me", repo="widget")
    action = _action(0)

    with pytest.raises(RecordingError):
        _orchestrator(sender).on_hook("not-used", config, hook, action, None)

    assert not action.calls


def test_log_lines_name_the_hook_repository(config, event, sender, log_buffer) -> None:
    logger, buffer = log_buffer

    _orchestrator(sender).on_hook("not-used", config, event, _action(0), logger)

    lines = [line for line in buffer.getvalue().splitlines() if line]
    assert lines
    assert all("[Acme/widget]" in line for line in lines)
