"""Best-effort chat notifications for hook processing."""

from __future__ import annotations

from ..config import EffectiveConfig
from ..logging import LoggerLike, resolve_logger
from ..models import HookEvent, HookState
from .hipchat import HipChatClient, NotificationError
from .templates import TemplateRenderError, render_template

STATE_COLORS = {
    HookState.PENDING: "yellow",
    HookState.SUCCESS: "green",
    HookState.FAILURE: "red",
    HookState.ERROR: "gray",
}


class Notifier:
    """Renders state messages and sends them to the configured chat room.

    Delivery problems are logged and swallowed; a notification never changes
    how a hook is processed.
    """

    def __init__(self, client: HipChatClient | None = None) -> None:
        self.client = client or HipChatClient()

    def notify(
        self,
        template: str,
        config: EffectiveConfig,
        event: HookEvent,
        *,
        state: HookState = HookState.PENDING,
        logger: LoggerLike | None = None,
    ) -> bool:
        """Render ``template`` for ``event`` and deliver it. Returns True when sent."""
        log = resolve_logger(logger)
        message = self.render(template, event, logger=log)
        log.info("hipchat %s: %s", state.value, message)

        if not config.hipchat_room or not config.hipchat_token:
            log.debug(
                "Chat room or token missing for %s/%s; not sending %s message",
                event.owner,
                event.repo,
                state.value,
            )
            return False

        try:
            self.client.send(
                message,
                config.hipchat_room,
                config.hipchat_token,
                color=STATE_COLORS.get(state, "gray"),
            )
        except NotificationError as exc:
            log.warning("Failed to deliver %s message to chat: %s", state.value, exc)
            return False
        except Exception as exc:  # pragma: no cover - custom senders
            log.warning("Unexpected error delivering %s message to chat: %s", state.value, exc)
            return False
        return True

    @staticmethod
    def render(template: str, event: HookEvent, *, logger: LoggerLike | None = None) -> str:
        try:
            return render_template(template, event)
        except TemplateRenderError as exc:
            resolve_logger(logger).warning("%s; sending the template text unchanged", exc)
            return template


__all__ = ["Notifier", "STATE_COLORS"]
