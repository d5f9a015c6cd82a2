"""Subscription store backed by an SQL database."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    delete,
    exists,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from cryptoalert.dto import Subscription, SubscriptionDTO, SubscriptionNotFoundError, from_domain
from cryptoalert.logger import JsonLogger, new_logger

METADATA = MetaData()

SUBSCRIPTIONS = Table(
    "subscriptions",
    METADATA,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", String, nullable=False),
    Column("token_name", String, nullable=False),
    Column("token_symbol", String, nullable=False),
    Column("threshold", Float, nullable=False),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)


class SubscriptionRepository:
    """Reads and writes rows of the subscriptions table."""

    def __init__(self, engine: Engine, log: JsonLogger | None = None) -> None:
        self._engine = engine
        self._log = log if log is not None else new_logger()

    def add(self, sub: Subscription) -> Subscription:
        """Insert a subscription and return it with its new id and timestamps."""
        now = datetime.now()
        dto = from_domain(sub)
        dto.created_at = now
        dto.updated_at = now
        values = asdict(dto)
        del values["id"]
        try:
            with self._engine.begin() as conn:
                result = conn.execute(insert(SUBSCRIPTIONS).values(**values))
                dto.id = result.inserted_primary_key[0]
        except SQLAlchemyError as exc:
            self._log.error("SubscriptionRepository.Add: insert failed", err=exc)
            raise
        return dto.to_domain()

    def _exists(self, user_id: str, sub_id: int) -> bool:
        query = select(
            exists().where(SUBSCRIPTIONS.c.id == sub_id, SUBSCRIPTIONS.c.user_id == user_id)
        )
        with self._engine.connect() as conn:
            return bool(conn.execute(query).scalar())

    def remove(self, user_id: str, sub_id: int) -> None:
        if not self._exists(user_id, sub_id):
            raise SubscriptionNotFoundError()
        with self._engine.begin() as conn:
            result = conn.execute(
                delete(SUBSCRIPTIONS).where(
                    SUBSCRIPTIONS.c.id == sub_id, SUBSCRIPTIONS.c.user_id == user_id
                )
            )
            if result.rowcount == 0:
                raise SubscriptionNotFoundError()

    def update(self, user_id: str, sub_id: int, new_threshold: float) -> None:
        if not self._exists(user_id, sub_id):
            raise SubscriptionNotFoundError()
        with self._engine.begin() as conn:
            conn.execute(
                update(SUBSCRIPTIONS)
                .where(SUBSCRIPTIONS.c.id == sub_id, SUBSCRIPTIONS.c.user_id == user_id)
                .values(threshold=new_threshold, updated_at=datetime.now())
            )

    def _select(self, query) -> list[Subscription]:
        with self._engine.connect() as conn:
            rows = conn.execute(query.order_by(SUBSCRIPTIONS.c.id)).all()
        return [SubscriptionDTO(**dict(row._mapping)).to_domain() for row in rows]

    def list(self, user_id: str) -> list[Subscription]:
        return self._select(select(SUBSCRIPTIONS).where(SUBSCRIPTIONS.c.user_id == user_id))

    def list_all(self) -> list[Subscription]:
        return self._select(select(SUBSCRIPTIONS))