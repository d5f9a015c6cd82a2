# cryptoalert

Building blocks for a Telegram bot that tracks cryptocurrency prices and
tells subscribers when a coin reaches the price they asked for.

## Modules

- `cryptoalert.logger` — `JsonLogger(stream, level)` writes one JSON object
  per line with `level` (`debug`, `info`, `warn`, `error`), `time`, `msg` and
  any keyword arguments passed to `debug()`, `info()`, `warn()` or `error()`.
  Records below the logger's level are dropped. `new_logger()` returns one
  writing to standard output at info level.
- `cryptoalert.dto` — the frozen dataclasses `Token` (`name`, `symbol`,
  `threshold`) and `Subscription` (`id`, `user_id`, `token`, `created_at`,
  `updated_at`), the row type `SubscriptionDTO` with `to_domain()`, the
  reverse conversion `from_domain(sub)`, and `SubscriptionNotFoundError`
  (a `LookupError`).
- `cryptoalert.inmemory_repo` — `InMemorySubscriptionRepo`, a thread-safe
  store kept in a dict; ids start at 1.
- `cryptoalert.sql_repo` — `SubscriptionRepository(engine, log)`, the same
  operations on a `subscriptions` table through an SQLAlchemy engine. The
  table is described by `SUBSCRIPTIONS` in the metadata object `METADATA`.
- `cryptoalert.coinbase` — `CoinbaseClient(log, session)` for the Coinbase
  public price API, and the wrappers `CryptoRepositoryAdapter`
  (`get_price`, `get_daily_prices`) and `CurrencyRepositoryAdapter`
  (`list_currencies`).
- `cryptoalert.telegram_client` — `TelegramClient` and the `Update`
  dataclass for the Telegram Bot API.
- `cryptoalert.controller` — `TelegramController`, which turns chat
  messages into subscription actions and runs one monitor thread per
  subscription, plus the helper `is_alpha(s)`.

## Subscriptions

Both repositories offer the same operations:

| method | effect |
| --- | --- |
| `add(sub)` | store a subscription; returns it with its id and timestamps set |
| `remove(user_id, sub_id)` | delete one of the user's subscriptions |
| `update(user_id, sub_id, new_threshold)` | change its target price and `updated_at` |
| `list(user_id)` | the user's subscriptions |
| `list_all()` | every subscription |

Removing or updating a subscription that does not exist, or that belongs to
another user, raises `SubscriptionNotFoundError`. The SQL repository uses
the message `subscription not found`; the in-memory one uses
`подписка не найдена`. The SQL repository returns lists ordered by id.

```python
from cryptoalert.dto import Subscription, Token
from cryptoalert.inmemory_repo import InMemorySubscriptionRepo

repo = InMemorySubscriptionRepo()
sub = repo.add(Subscription(user_id="12345", token=Token("Bitcoin", "BTC", 30000.0)))
repo.update("12345", sub.id, 31000.0)
for s in repo.list("12345"):
    print(s.id, s.token.symbol, s.token.threshold)
```

The SQL repository does not create its table; do that yourself, for
example with `METADATA.create_all(engine)`:

```python
from sqlalchemy import create_engine

from cryptoalert.sql_repo import METADATA, SubscriptionRepository

engine = create_engine("sqlite:///alerts.db")
METADATA.create_all(engine)
repo = SubscriptionRepository(engine)
```

## Prices

```python
import requests

from cryptoalert.coinbase import CoinbaseClient
from cryptoalert.logger import new_logger

client = CoinbaseClient(new_logger(), requests.Session())
print(client.get_price("btc"))          # current USD spot price
print(client.get_daily_prices("eth"))   # today's price history
print(sorted(client.list())[:10])       # currency symbols
```

- `get_price(symbol)` returns the USD spot price as a float.
- `list()` returns the symbols from the exchange-rates endpoint that are at
  most five characters long, excluding `USD`.
- `get_daily_prices(symbol)` returns the day's prices; entries that do not
  parse are logged and skipped, and an empty history raises
  `CoinbaseAPIError`.

A non-200 answer raises `CoinbaseAPIError` with the code in `status`.
Network failures propagate as `requests` exceptions; bodies that cannot be
decoded raise `ValueError`.

## Telegram

`TelegramClient(token, session)` calls `getMe` on construction (stored as
`me`) and raises `RuntimeError` when the API refuses the token.
`TelegramClient.from_env()` reads the token from `TELEGRAM_APITOKEN`.
`get_updates(offset, timeout_seconds)` is a generator that long-polls
forever, advancing the offset and retrying three seconds after a failure.
`send_message(chat_id, text, markup)` sends a message, with optional reply
markup.

## Chat handling

`TelegramController.start()` restarts monitors for every stored
subscription, then passes each incoming message to `handle_text(chat_id,
text)`. The chat id, as a string, is the user id. `/start` replies with a
keyboard (`keyboard` attribute) of six buttons: subscribe, unsubscribe,
change price, list, currencies and analytics. The list button shows the
user's subscriptions; the currencies button sends the currency list in
messages of 20 lines; the other buttons reply with a prompt. Other text is
read as follows:

- a single word of ASCII letters — the daily trend for that symbol;
- `Name SYMBOL price` — subscribe, after checking that the symbol is a
  listed currency, e.g. `Bitcoin BTC 30000`;
- `ID` — remove subscription `ID` and stop its monitor;
- `ID price` — change the target price and restart its monitor.

Anything else gets an "unknown command" reply.

## What the package does not do

There is no command or entry point that starts a bot. `TelegramController`
does not contain the alerting logic itself: it is given, and calls, these
collaborators, which the package does not supply:

- `currency_analytics.get_daily_trend(symbol)` returning a message text;
- `sub_mgr.subscribe(user_id, name, symbol, price)`, `unsubscribe(user_id,
  sub_id)`, `update_subscription(user_id, sub_id, price)`,
  `list_subscriptions(user_id)` and `list_all_subscriptions()`;
- `monitor_svc.monitor_token(stop_event, token, notify)`, run in a daemon
  thread until the `threading.Event` is set;
- `notifier.notify(user_id, message)`;
- `currency_mgr.list()` returning currency symbols.

The repositories and Coinbase adapters above can back such collaborators,
but wiring them together, price comparison and sending alerts are left to
the caller.