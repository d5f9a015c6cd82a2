"""Minimal Telegram Bot API client: long polling and sending messages."""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import requests

API_ENDPOINT = "https://api.telegram.org/bot{token}/{method}"
_RETRY_DELAY_SECONDS = 3

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Update:
    """One incoming update; message and callback are the raw API objects."""

    update_id: int
    message: dict[str, Any] | None = None
    callback: dict[str, Any] | None = None


class TelegramClient:
    """Talks to the Bot API; construction checks the token with getMe."""

    def __init__(self, token: str, session: requests.Session | None = None) -> None:
        self._token = token
        self._session = session if session is not None else requests.Session()
        self.me = self._call("getMe")

    @classmethod
    def from_env(cls) -> "TelegramClient":
        """Build a client from the TELEGRAM_APITOKEN environment variable."""
        return cls(os.environ.get("TELEGRAM_APITOKEN", ""))

    def _call(
        self, method: str, params: dict[str, Any] | None = None, timeout: float | None = None
    ) -> Any:
        url = API_ENDPOINT.format(token=self._token, method=method)
        resp = self._session.post(url, json=params or {}, timeout=timeout)
        try:
            payload = resp.json()
        except ValueError as exc:
            raise RuntimeError(f"telegram {method}: bad response (status {resp.status_code})") from exc
        if not isinstance(payload, dict) or not payload.get("ok"):
            description = payload.get("description") if isinstance(payload, dict) else None
            raise RuntimeError(description or f"telegram {method}: status {resp.status_code}")
        return payload.get("result")

    def get_updates(self, offset: int = 0, timeout_seconds: int = 60) -> Iterator[Update]:
        """Long-poll for updates forever, retrying after failures."""
        while True:
            try:
                raw = self._call(
                    "getUpdates",
                    {"offset": offset, "timeout": timeout_seconds},
                    timeout=timeout_seconds + 10,
                )
            except (requests.RequestException, RuntimeError) as exc:
                _log.warning(
                    "failed to get updates, retrying in %d seconds: %s", _RETRY_DELAY_SECONDS, exc
                )
                time.sleep(_RETRY_DELAY_SECONDS)
                continue
            for item in raw or []:
                update_id = item.get("update_id", 0)
                if update_id >= offset:
                    offset = update_id + 1
                yield Update(update_id, item.get("message"), item.get("callback_query"))

    def send_message(self, chat_id: int, text: str, markup: Any = None) -> None:
        params: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if markup is not None:
            params["reply_markup"] = markup
        self._call("sendMessage", params)