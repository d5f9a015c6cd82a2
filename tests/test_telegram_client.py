import json
from itertools import islice
from unittest.mock import patch

import pytest
import responses

from cryptoalert.telegram_client import TelegramClient, Update

BOT_TOKEN = "token"
BASE = f"https://api.telegram.org/bot{BOT_TOKEN}"
ME = {"ok": True, "result": {"id": 1, "is_bot": True, "username": "alert_bot"}}


def _client(rsps):
    rsps.add(responses.POST, f"{BASE}/getMe", json=ME)
    return TelegramClient(BOT_TOKEN)


def test_construction_calls_get_me():
    with responses.RequestsMock() as rsps:
        client = _client(rsps)
        assert client.me["username"] == "alert_bot"
        assert rsps.calls[0].request.url == f"{BASE}/getMe"


def test_invalid_token_raises():
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.POST,
            f"{BASE}/getMe",
            json={"ok": False, "description": "Unauthorized"},
            status=401,
        )
        with pytest.raises(RuntimeError, match="Unauthorized"):
            TelegramClient(BOT_TOKEN)


def test_from_env_uses_token(monkeypatch):
    monkeypatch.setenv("TELEGRAM_APITOKEN", BOT_TOKEN)
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, f"{BASE}/getMe", json=ME)
        client = TelegramClient.from_env()
        assert client.me["id"] == 1


def test_send_message_without_markup():
    with responses.RequestsMock() as rsps:
        client = _client(rsps)
        rsps.add(responses.POST, f"{BASE}/sendMessage", json={"ok": True, "result": {}})
        text = "hello"
        client.send_message(42, text, None)
        body = json.loads(rsps.calls[-1].request.body)
        assert body == {"chat_id": 42, "text": text}


def test_send_message_with_markup():
    with responses.RequestsMock() as rsps:
        client = _client(rsps)
        rsps.add(responses.POST, f"{BASE}/sendMessage", json={"ok": True, "result": {}})
        markup = {"keyboard": [[{"text": "a"}]]}
        client.send_message(42, "hello", markup)
        body = json.loads(rsps.calls[-1].request.body)
        assert body["reply_markup"] == markup


def test_send_message_error_raises():
    with responses.RequestsMock() as rsps:
        client = _client(rsps)
        rsps.add(
            responses.POST,
            f"{BASE}/sendMessage",
            json={"ok": False, "description": "Bad Request: chat not found"},
            status=400,
        )
        with pytest.raises(RuntimeError, match="chat not found"):
            client.send_message(1, "x", None)


def test_get_updates_yields_and_advances_offset():
    with responses.RequestsMock() as rsps:
        client = _client(rsps)
        message = {"message_id": 1, "chat": {"id": 42}, "text": "/start"}
        callback = {"id": "cb", "data": "x"}
        rsps.add(
            responses.POST,
            f"{BASE}/getUpdates",
            json={"ok": True, "result": [{"update_id": 5, "message": message}]},
        )
        rsps.add(
            responses.POST,
            f"{BASE}/getUpdates",
            json={"ok": True, "result": [{"update_id": 6, "callback_query": callback}]},
        )
        updates = list(islice(client.get_updates(0, 1), 2))
        assert updates == [Update(5, message, None), Update(6, None, callback)]
        second_body = json.loads(rsps.calls[2].request.body)
        assert second_body == {"offset": 6, "timeout": 1}


@patch("cryptoalert.telegram_client.time.sleep")
def test_get_updates_retries_after_error(sleep):
    with responses.RequestsMock() as rsps:
        client = _client(rsps)
        rsps.add(
            responses.POST,
            f"{BASE}/getUpdates",
            json={"ok": False, "description": "Bad Gateway"},
            status=502,
        )
        rsps.add(
            responses.POST,
            f"{BASE}/getUpdates",
            json={"ok": True, "result": [{"update_id": 9, "message": {"chat": {"id": 1}}}]},
        )
        (update,) = list(islice(client.get_updates(0, 1), 1))
        assert update.update_id == 9
        sleep.assert_called_once_with(3)