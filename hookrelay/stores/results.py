"""On-disk audit records for processed hooks."""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import List, Optional

from ..models import HookEvent, check_path_segment

HOOK_FILE_NAME = "hook.json"
# mkdtemp creates 0o700; runs stay readable by operators and `hookrelay runs`.
RUN_DIR_MODE = 0o755


class RecordingError(RuntimeError):
    """Raised when an audit record cannot be written."""


@dataclass
class RunRecord:
    """A previously recorded run for a repository."""

    run_id: str
    path: Path
    event: Optional[HookEvent]


class ResultRecorder:
    """Stores one ``hook.json`` per processed hook under ``root/owner/repo/<run>``."""

    def record(self, result_root: Path | str, event: HookEvent) -> Path:
        """Allocate a fresh run directory and write the event into it."""
        run_path = self.allocate(result_root, event)
        self.write_hook(run_path, event)
        return run_path

    def allocate(self, result_root: Path | str, event: HookEvent) -> Path:
        """Create a new, uniquely named run directory for ``event``."""
        repo_dir = self.repo_dir(result_root, event.owner, event.repo)
        try:
            repo_dir.mkdir(parents=True, exist_ok=True)
            # mkdtemp creates the directory atomically, so concurrent hooks for
            # the same repository always get distinct runs.
            run_path = tempfile.mkdtemp(prefix=f"{_timestamp()}-", dir=repo_dir)
            os.chmod(run_path, RUN_DIR_MODE)
        except (OSError, ValueError) as exc:
            raise RecordingError(f"Unable to create run directory in {repo_dir}: {exc}") from exc
        return Path(run_path)

    def write_hook(self, run_path: Path, event: HookEvent) -> Path:
        hook_file = Path(run_path) / HOOK_FILE_NAME
        payload = json.dumps(event.to_dict(), indent=2, sort_keys=True, ensure_ascii=False)
        try:
            hook_file.write_text(payload + "\n", encoding="utf-8")
        except (OSError, TypeError, ValueError) as exc:
            raise RecordingError(f"Unable to write {hook_file}: {exc}") from exc
        return hook_file

    def list_runs(self, result_root: Path | str, owner: str, repo: str) -> List[RunRecord]:
        """Return recorded runs for a repository, newest first."""
        repo_dir = self.repo_dir(result_root, owner, repo)
        if not repo_dir.is_dir():
            return []
        runs: List[RunRecord] = []
        for entry in sorted(repo_dir.iterdir(), key=lambda item: item.name, reverse=True):
            if not entry.is_dir():
                continue
            runs.append(RunRecord(run_id=entry.name, path=entry, event=_load_event(entry)))
        return runs

    @staticmethod
    def repo_dir(result_root: Path | str, owner: str, repo: str) -> Path:
        for label, value in (("owner", owner), ("repo", repo)):
            try:
                check_path_segment(label, value)
            except ValueError as exc:
                raise RecordingError(str(exc)) from exc
        return Path(result_root) / owner / repo


def read_hook(run_path: Path) -> HookEvent:
    """Load the event stored in a run directory."""
    data = json.loads((Path(run_path) / HOOK_FILE_NAME).read_text(encoding="utf-8"))
    return HookEvent.from_dict(data)


def _load_event(run_path: Path) -> Optional[HookEvent]:
    try:
        return read_hook(run_path)
    except (OSError, ValueError):
        return None


def _timestamp() -> str:
    return datetime.now(UTC).strftime("%Y%m%dT%H%M%S%fZ")


__all__ = ["HOOK_FILE_NAME", "RecordingError", "ResultRecorder", "RunRecord", "read_hook"]
