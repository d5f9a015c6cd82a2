"""Components for a Telegram cryptocurrency price-alert bot: logging, subscription stores, Coinbase and Telegram clients, and chat handling."""

__version__ = "0.1.0"