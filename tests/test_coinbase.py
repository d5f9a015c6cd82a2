import io
import json

import pytest
import requests
import responses

from cryptoalert.coinbase import (
    EXCHANGE_RATES_URL,
    CoinbaseAPIError,
    CoinbaseClient,
    CryptoRepositoryAdapter,
    CurrencyRepositoryAdapter,
)
from cryptoalert.logger import JsonLogger

SPOT_BTC = "https://api.coinbase.com/v2/prices/BTC-USD/spot"
HISTORIC_BTC = "https://api.coinbase.com/v2/prices/BTC-USD/historic?period=day"


@pytest.fixture
def mocked():
    with responses.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def log_stream():
    return io.StringIO()


@pytest.fixture
def client(log_stream):
    return CoinbaseClient(JsonLogger(log_stream), requests.Session())


def _levels(stream):
    return [json.loads(line)["level"] for line in stream.getvalue().splitlines()]


def test_get_price_uppercases_symbol(mocked, client):
    mocked.add(responses.GET, SPOT_BTC, json={"data": {"amount": "123.45"}})
    assert client.get_price("btc") == 123.45


def test_get_price_error_status(mocked, client):
    mocked.add(responses.GET, SPOT_BTC, status=404, json={})
    with pytest.raises(CoinbaseAPIError, match="API returned status 404") as info:
        client.get_price("BTC")
    assert info.value.status == 404


def test_get_price_bad_amount(mocked, client, log_stream):
    mocked.add(responses.GET, SPOT_BTC, json={"data": {"amount": "abc"}})
    with pytest.raises(ValueError):
        client.get_price("BTC")
    assert "error" in _levels(log_stream)


def test_get_price_bad_json(mocked, client):
    mocked.add(responses.GET, SPOT_BTC, body="not json")
    with pytest.raises(ValueError):
        client.get_price("BTC")


def test_get_price_connection_error(mocked, client, log_stream):
    mocked.add(responses.GET, SPOT_BTC, body=requests.ConnectionError("boom"))
    with pytest.raises(requests.ConnectionError):
        client.get_price("BTC")
    assert _levels(log_stream) == ["error"]


def test_list_filters_long_symbols_and_usd(mocked, client):
    rates = {"BTC": "0.1", "USD": "1", "ETH": "0.2", "TOOLONG": "3"}
    mocked.add(responses.GET, EXCHANGE_RATES_URL, json={"data": {"currency": "USD", "rates": rates}})
    assert sorted(client.list()) == ["BTC", "ETH"]


def test_list_error_status(mocked, client):
    mocked.add(responses.GET, EXCHANGE_RATES_URL, status=500, json={})
    with pytest.raises(CoinbaseAPIError):
        client.list()


def test_daily_prices_skips_unparseable(mocked, client, log_stream):
    prices = [
        {"time": "t1", "price": "1.5"},
        {"time": "t2", "price": "bad"},
        {"time": "t3", "price": "2.5"},
    ]
    mocked.add(responses.GET, HISTORIC_BTC, json={"data": {"prices": prices}})
    assert client.get_daily_prices("btc") == [1.5, 2.5]
    assert "warn" in _levels(log_stream)


def test_daily_prices_empty_raises(mocked, client):
    mocked.add(responses.GET, HISTORIC_BTC, json={"data": {"prices": []}})
    with pytest.raises(CoinbaseAPIError, match="no historic data for btc"):
        client.get_daily_prices("btc")


class _StubClient:
    def get_price(self, symbol):
        return {"BTC": 10.0}[symbol]

    def get_daily_prices(self, symbol):
        return [1.0, 2.0] if symbol == "BTC" else []

    def list(self):
        return ["BTC", "ETH"]


def test_crypto_adapter_delegates():
    adapter = CryptoRepositoryAdapter(_StubClient())
    assert adapter.get_price("BTC") == 10.0
    assert adapter.get_daily_prices("BTC") == [1.0, 2.0]


def test_currency_adapter_delegates():
    adapter = CurrencyRepositoryAdapter(_StubClient())
    assert adapter.list_currencies() == ["BTC", "ETH"]