"""Persistent stores for hookrelay."""

from .results import HOOK_FILE_NAME, RecordingError, ResultRecorder, RunRecord, read_hook

__all__ = ["HOOK_FILE_NAME", "RecordingError", "ResultRecorder", "RunRecord", "read_hook"]
