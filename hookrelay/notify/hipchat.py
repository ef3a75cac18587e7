"""HipChat room notification client."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen


class NotificationError(RuntimeError):
    """Raised when a chat message could not be delivered."""


@dataclass
class ChatMessage:
    """A message bound for a single chat room."""

    text: str
    room: str
    token: str
    color: str = "yellow"
    notify: bool = False
    sender_name: str = "hookrelay"


class HipChatClient:
    """Posts room notifications to the HipChat v2 REST API."""

    DEFAULT_BASE_URL = "https://api.hipchat.com/v2"
    COLORS = {"yellow", "green", "red", "purple", "gray", "random"}

    def __init__(
        self,
        *,
        base_url: str | None = None,
        request_timeout: Optional[float] = 10.0,
        sender: Callable[[ChatMessage], None] | None = None,
    ) -> None:
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.request_timeout = request_timeout
        self._sender = sender or self._http_sender

    def send(self, text: str, room: str, token: str, *, color: str = "yellow") -> None:
        """Deliver ``text`` to ``room``; raises :class:`NotificationError` on failure."""
        if not room:
            raise NotificationError("No chat room configured")
        if not token:
            raise NotificationError("No chat token configured")
        message = ChatMessage(
            text=text,
            room=room,
            token=token,
            color=color if color in self.COLORS else "gray",
        )
        self._sender(message)

    def _http_sender(self, message: ChatMessage) -> None:
        endpoint = f"{self.base_url}/room/{quote(message.room, safe='')}/notification"
        payload = {
            "message": message.text,
            "color": message.color,
            "notify": message.notify,
            "message_format": "text",
            "from": message.sender_name,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {message.token}",
        }
        request = Request(
            endpoint,
            data=json.dumps(payload).encode("utf-8"),
            headers=headers,
            method="POST",
        )
        timeout = self.request_timeout or 10.0

        try:
            with urlopen(request, timeout=timeout) as response:  # type: ignore[arg-type]
                response.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message_text = detail.strip() or exc.reason
            raise NotificationError(
                f"HipChat notification failed with status {exc.code}: {message_text}"
            ) from exc
        except URLError as exc:
            raise NotificationError(f"HipChat notification failed: {exc.reason}") from exc
        except OSError as exc:
            raise NotificationError(f"HipChat notification failed: {exc}") from exc


__all__ = ["ChatMessage", "HipChatClient", "NotificationError"]
