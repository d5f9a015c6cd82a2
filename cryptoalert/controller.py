"""Telegram conversation handling for price-alert subscriptions."""

from __future__ import annotations

import logging
import re
import string
import threading
from typing import Any

from cryptoalert.dto import Subscription, Token

_log = logging.getLogger(__name__)

BUTTON_SUBSCRIBE = "➕ Подписаться"
BUTTON_UNSUBSCRIBE = "➖ Отписаться"
BUTTON_CHANGE = "✏️ Изменить цену"
BUTTON_LIST = "📋 Список"
BUTTON_CURRENCIES = "🌐 Валюты"
BUTTON_ANALYTICS = "〽 Аналитика"

_NOT_FOUND = "subscription not found"
_CURRENCY_CHUNK = 20
_INT_RE = re.compile(r"[+-]?[0-9]+")

_PROMPTS = {
    BUTTON_SUBSCRIBE: "Введите через пробел: Название Символ Цена",
    BUTTON_UNSUBSCRIBE: "Введите ID подписки для удаления:",
    BUTTON_CHANGE: "Введите: ID Новая_цена",
    BUTTON_ANALYTICS: "Введите символ валюты (например: BTC):",
}


def is_alpha(s: str) -> bool:
    """True when every character is an ASCII letter (vacuously true for '')."""
    return all(ch in string.ascii_letters for ch in s)


def _parse_int(text: str) -> int | None:
    return int(text) if _INT_RE.fullmatch(text) else None


def _parse_float(text: str) -> float | None:
    if not text.isascii() or "_" in text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _build_keyboard() -> dict[str, Any]:
    rows = [
        [BUTTON_SUBSCRIBE, BUTTON_UNSUBSCRIBE],
        [BUTTON_CHANGE, BUTTON_LIST],
        [BUTTON_CURRENCIES, BUTTON_ANALYTICS],
    ]
    return {
        "keyboard": [[{"text": label} for label in row] for row in rows],
        "resize_keyboard": True,
        "one_time_keyboard": False,
    }


class TelegramController:
    """Turns chat messages into subscription actions and runs price monitors."""

    def __init__(
        self, client, currency_analytics, sub_mgr, monitor_svc, notifier, currency_mgr
    ) -> None:
        self._client = client
        self._analytics = currency_analytics
        self._sub_mgr = sub_mgr
        self._monitor_svc = monitor_svc
        self._notifier = notifier
        self._currency_mgr = currency_mgr
        self.keyboard = _build_keyboard()
        self._monitors: dict[int, threading.Event] = {}
        self._lock = threading.Lock()

    def start(self) -> None:
        """Restore monitors for stored subscriptions, then serve updates."""
        self.restore_all_subscriptions()
        for upd in self._client.get_updates(0, 60):
            if upd.message is None:
                continue
            chat_id = upd.message["chat"]["id"]
            self.handle_text(chat_id, upd.message.get("text", ""))

    def _send(self, chat_id: int, text: str, markup: Any = None) -> None:
        try:
            self._client.send_message(chat_id, text, markup)
        except Exception as exc:  # a failed reply must not stop the bot
            _log.warning("send_message to %s failed: %s", chat_id, exc)

    def _user_subscriptions(self, user_id: str) -> list[Subscription]:
        try:
            return list(self._sub_mgr.list_subscriptions(user_id))
        except Exception:
            return []

    def handle_text(self, chat_id: int, text: str) -> None:
        """React to one incoming text message from the given chat."""
        user_id = str(chat_id)
        if text == "/start":
            self._send(chat_id, "Добро пожаловать! Выберите действие:", self.keyboard)
        elif text in _PROMPTS:
            self._send(chat_id, _PROMPTS[text])
        elif text == BUTTON_LIST:
            self._send_list(chat_id, user_id)
        elif text == BUTTON_CURRENCIES:
            self._send_currencies(chat_id)
        else:
            self._handle_free_text(chat_id, user_id, text)

    def _send_list(self, chat_id: int, user_id: str) -> None:
        subs = self._user_subscriptions(user_id)
        if not subs:
            self._send(chat_id, "Нет активных подписок.")
            return
        lines = [
            f"{s.id}: {s.token.name} ({s.token.symbol}) → {s.token.threshold:.2f}" for s in subs
        ]
        self._send(chat_id, "\n".join(lines))

    def _send_currencies(self, chat_id: int) -> None:
        try:
            currencies = list(self._currency_mgr.list())
        except Exception:
            self._send(chat_id, "Ошибка получения списка валют")
            return
        for start in range(0, len(currencies), _CURRENCY_CHUNK):
            self._send(chat_id, "\n".join(currencies[start : start + _CURRENCY_CHUNK]))

    def _handle_free_text(self, chat_id: int, user_id: str, text: str) -> None:
        parts = text.split()

        if len(parts) == 1 and is_alpha(text):
            try:
                trend = self._analytics.get_daily_trend(text.upper())
            except Exception:
                trend = "❌ Не удалось получить данные"
            self._send(chat_id, trend)
            return

        if len(parts) == 3:
            price = _parse_float(parts[2])
            if price is not None and is_alpha(parts[0]) and is_alpha(parts[1]):
                self._subscribe(chat_id, user_id, parts[0], parts[1], price)
                return

        if len(parts) == 1:
            sub_id = _parse_int(parts[0])
            if sub_id is not None:
                self._unsubscribe(chat_id, user_id, sub_id)
                return

        if len(parts) == 2:
            sub_id = _parse_int(parts[0])
            price = _parse_float(parts[1])
            if sub_id is not None and price is not None:
                self._update(chat_id, user_id, sub_id, price)
                return

        self._send(chat_id, "Неизвестная команда. Нажмите /start.")

    def _subscribe(self, chat_id: int, user_id: str, name: str, symbol: str, price: float) -> None:
        print(f"Trying to subscribe: {name} {symbol} {price:.2f}")
        try:
            found = self.currency_exists(symbol)
        except Exception as exc:
            print(f"Currency check error: {exc}")
            self._send(chat_id, "❌ Ошибка проверки валюты")
            return
        print(f"Currency exists: {found}")
        if not found:
            self._send(chat_id, "❌ Валюта не найдена")
            return
        try:
            self._sub_mgr.subscribe(user_id, name, symbol, price)
        except Exception:
            self._send(chat_id, "❌ Ошибка создания подписки")
            return
        subs = self._user_subscriptions(user_id)
        if not subs:
            return
        new_sub = subs[-1]
        self.start_monitoring(new_sub.id, new_sub.token, user_id)
        self._send(chat_id, f"✅ Подписка #{new_sub.id} создана")

    def _unsubscribe(self, chat_id: int, user_id: str, sub_id: int) -> None:
        try:
            self._sub_mgr.unsubscribe(user_id, sub_id)
        except Exception as exc:
            if str(exc) == _NOT_FOUND:
                self._send(chat_id, "❌ Подписка не найдена")
            else:
                self._send(chat_id, "❌ Ошибка удаления")
            return
        self._send(chat_id, "✅ Подписка удалена.")
        self.cancel_monitoring(sub_id)

    def _update(self, chat_id: int, user_id: str, sub_id: int, price: float) -> None:
        try:
            self._sub_mgr.update_subscription(user_id, sub_id, price)
        except Exception as exc:
            if str(exc) == _NOT_FOUND:
                self._send(chat_id, "❌ Подписка не найдена")
            else:
                self._send(chat_id, "❌ Ошибка обновления")
            return
        self._send(chat_id, "✅ Цена обновлена.")
        self.cancel_monitoring(sub_id)
        updated = next((s for s in self._user_subscriptions(user_id) if s.id == sub_id), None)
        if updated is not None:
            self.start_monitoring(sub_id, updated.token, user_id)

    def start_monitoring(self, sub_id: int, token: Token, user_id: str) -> None:
        """Run the monitor for one subscription in a background thread."""
        stop = threading.Event()
        with self._lock:
            previous = self._monitors.get(sub_id)
            self._monitors[sub_id] = stop
        if previous is not None:
            previous.set()

        def notify(msg: str) -> None:
            self._notifier.notify(user_id, msg)

        threading.Thread(
            target=self._monitor_svc.monitor_token,
            args=(stop, token, notify),
            name=f"monitor-{sub_id}",
            daemon=True,
        ).start()

    def cancel_monitoring(self, sub_id: int) -> None:
        """Signal the monitor of a subscription to stop, if one is running."""
        with self._lock:
            stop = self._monitors.pop(sub_id, None)
        if stop is not None:
            stop.set()

    def restore_all_subscriptions(self) -> None:
        try:
            subs = list(self._sub_mgr.list_all_subscriptions())
        except Exception as exc:
            print(f"Ошибка восстановления подписок: {exc}")
            return
        for sub in subs:
            self.start_monitoring(sub.id, sub.token, sub.user_id)

    def currency_exists(self, symbol: str) -> bool:
        """True when the symbol is among the listed currencies, ignoring case."""
        wanted = symbol.upper().casefold()
        return any(currency.casefold() == wanted for currency in self._currency_mgr.list())