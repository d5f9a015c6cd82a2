"""Coinbase public price API client and repository adapters."""

from __future__ import annotations

from typing import Any

import requests

from cryptoalert.logger import JsonLogger, new_logger

SPOT_URL = "https://api.coinbase.com/v2/prices/{}-USD/spot"
EXCHANGE_RATES_URL = "https://api.coinbase.com/v2/exchange-rates"
HISTORIC_URL = "https://api.coinbase.com/v2/prices/{}-USD/historic?period=day"


class CoinbaseAPIError(Exception):
    """The API answered with an error status or without usable data."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


def _parse_float(text: Any) -> float:
    if not isinstance(text, str) or text != text.strip() or "_" in text:
        raise ValueError(f"invalid number: {text!r}")
    return float(text)


def _data_section(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValueError("unexpected response shape")
    data = payload.get("data") or {}
    if not isinstance(data, dict):
        raise ValueError("unexpected response shape")
    return data


class CoinbaseClient:
    """Fetches spot prices, listed currencies and daily price history."""

    def __init__(
        self, log: JsonLogger | None = None, session: requests.Session | None = None
    ) -> None:
        self._log = log if log is not None else new_logger()
        self._session = session if session is not None else requests.Session()

    def _fetch_data(self, url: str, op: str) -> dict[str, Any]:
        self._log.debug(f"Coinbase.{op}: request", url=url)
        try:
            resp = self._session.get(url)
        except requests.RequestException as exc:
            self._log.error(f"Coinbase.{op}: request failed", err=exc)
            raise
        with resp:
            if resp.status_code != 200:
                raise CoinbaseAPIError(
                    f"API returned status {resp.status_code}", status=resp.status_code
                )
            try:
                return _data_section(resp.json())
            except ValueError as exc:
                self._log.error(f"Coinbase.{op}: decode failed", err=exc)
                raise

    def get_price(self, symbol: str) -> float:
        data = self._fetch_data(SPOT_URL.format(symbol.upper()), "GetPrice")
        amount = data.get("amount", "")
        try:
            price = _parse_float(amount)
        except ValueError as exc:
            self._log.error("Coinbase.GetPrice: parse failed", amount=amount, err=exc)
            raise
        self._log.info("Coinbase.GetPrice: got price", symbol=symbol, price=price)
        return price

    def list(self) -> list[str]:
        data = self._fetch_data(EXCHANGE_RATES_URL, "GetAllCurrencies")
        rates = data.get("rates") or {}
        symbols = [sym for sym in rates if len(sym) <= 5 and sym != "USD"]
        self._log.info("Coinbase.GetAllCurrencies: got currency list", count=len(symbols))
        return symbols

    def get_daily_prices(self, symbol: str) -> list[float]:
        data = self._fetch_data(HISTORIC_URL.format(symbol.upper()), "GetDailyPrices")
        entries = data.get("prices") or []
        if not entries:
            msg = f"no historic data for {symbol}"
            self._log.warn("Coinbase.GetDailyPrices:", warning=msg)
            raise CoinbaseAPIError(msg)
        prices = []
        for entry in entries:
            raw = entry.get("price", "") if isinstance(entry, dict) else ""
            try:
                prices.append(_parse_float(raw))
            except ValueError as exc:
                self._log.warn("Coinbase.GetDailyPrices: parse failed", price=raw, err=exc)
        self._log.info(
            "Coinbase.GetDailyPrices: got historic prices", symbol=symbol, count=len(prices)
        )
        return prices


class CryptoRepositoryAdapter:
    """Price source backed by a Coinbase client."""

    def __init__(self, client: CoinbaseClient) -> None:
        self._client = client

    def get_price(self, symbol: str) -> float:
        return self._client.get_price(symbol)

    def get_daily_prices(self, symbol: str) -> list[float]:
        return self._client.get_daily_prices(symbol)


class CurrencyRepositoryAdapter:
    """Currency list source backed by a Coinbase client."""

    def __init__(self, client: CoinbaseClient) -> None:
        self._client = client

    def list_currencies(self) -> list[str]:
        return self._client.list()