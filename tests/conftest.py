from __future__ import annotations

import io
import logging
import uuid
from pathlib import Path

import pytest

from hookrelay.config import EffectiveConfig
from hookrelay.models import HookEvent
from tests._fixtures.chat import RecordingSender


@pytest.fixture
def event() -> HookEvent:
    return HookEvent(owner="Acme", repo="widget", event_name="push")


@pytest.fixture
def config(tmp_path: Path) -> EffectiveConfig:
    """Config with single-word templates so assertions stay readable."""
    return EffectiveConfig(
        pending_template="pending {{ Owner }}",
        error_template="error {{ Repo }}",
        failure_template="failure {{ Target }}",
        success_template="success {{ UserName }}",
        hipchat_token="NOT_EMPTY",
        hipchat_room="NON_EMPTY",
        result_root=tmp_path / "results",
    )


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def log_buffer() -> tuple[logging.Logger, io.StringIO]:
    """A dedicated logger writing into an in-memory buffer."""
    buffer = io.StringIO()
    logger = logging.getLogger(f"hookrelay.tests.{uuid.uuid4().hex}")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    handler = logging.StreamHandler(buffer)
    handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    logger.addHandler(handler)
    yield logger, buffer
    logger.removeHandler(handler)
