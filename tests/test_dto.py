from datetime import datetime

from cryptoalert.dto import (
    Subscription,
    SubscriptionDTO,
    SubscriptionNotFoundError,
    Token,
    from_domain,
)


def _sample():
    return Subscription(
        id=7,
        user_id="42",
        token=Token(name="Bitcoin", symbol="BTC", threshold=30000.0),
        created_at=datetime(2024, 1, 1, 12, 0),
        updated_at=datetime(2024, 1, 2, 12, 0),
    )


def test_from_domain_flattens_token():
    dto = from_domain(_sample())
    assert dto.token_name == "Bitcoin"
    assert dto.token_symbol == "BTC"
    assert dto.threshold == 30000.0
    assert dto.id == 7
    assert dto.user_id == "42"


def test_round_trip_preserves_subscription():
    sub = _sample()
    assert from_domain(sub).to_domain() == sub


def test_to_domain_builds_token():
    dto = SubscriptionDTO(id=1, user_id="u", token_name="Ether", token_symbol="ETH", threshold=2.5)
    sub = dto.to_domain()
    assert sub.token == Token("Ether", "ETH", 2.5)
    assert sub.created_at is None


def test_not_found_error_default_message():
    err = SubscriptionNotFoundError()
    assert "subscription not found" in str(err)


def test_not_found_error_is_lookup_error():
    err = SubscriptionNotFoundError("gone")
    assert issubclass(SubscriptionNotFoundError, LookupError)
    assert str(err) == "gone"