"""Subscription domain objects and their database row form."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


class SubscriptionNotFoundError(LookupError):
    """Raised when a subscription does not exist for the given user."""

    def __init__(self, message: str = "subscription not found") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class Token:
    name: str = ""
    symbol: str = ""
    threshold: float = 0.0


@dataclass(frozen=True)
class Subscription:
    id: int = 0
    user_id: str = ""
    token: Token = field(default_factory=Token)
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class SubscriptionDTO:
    """A subscription as stored in the subscriptions table."""

    id: int = 0
    user_id: str = ""
    token_name: str = ""
    token_symbol: str = ""
    threshold: float = 0.0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_domain(self) -> Subscription:
        return Subscription(
            id=self.id,
            user_id=self.user_id,
            token=Token(name=self.token_name, symbol=self.token_symbol, threshold=self.threshold),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


def from_domain(sub: Subscription) -> SubscriptionDTO:
    """Flatten a domain subscription into its row form."""
    return SubscriptionDTO(
        id=sub.id,
        user_id=sub.user_id,
        token_name=sub.token.name,
        token_symbol=sub.token.symbol,
        threshold=sub.token.threshold,
        created_at=sub.created_at,
        updated_at=sub.updated_at,
    )