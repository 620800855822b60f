"""Relational transaction store backed by SQLAlchemy.

Usage
-----
store = SQLTransactionStore("sqlite:///transaction.db")
store.save(record)

The ``transactions`` table carries a unique index on ``transaction_id``; the
database, not the application, decides whether a notification was already
recorded.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterator, List

from sqlalchemy import DateTime, Integer, Numeric, String, Text, create_engine, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from ..models.core import TransactionRecord
from ..utils.error_handler import DuplicateTransaction, PersistenceFailure
from .base import TransactionStore


logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class TransactionRow(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    transaction_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    recipient: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    balance_after: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    fee: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    reason: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)

    def to_record(self) -> TransactionRecord:
        return TransactionRecord(
            transaction_id=self.transaction_id,
            amount=_to_decimal_2(self.amount),
            recipient=self.recipient,
            timestamp=self.timestamp,
            balance_after=_to_decimal_2(self.balance_after),
            fee=_to_decimal_2(self.fee),
            category=self.category,
            reason=self.reason or "",
        )


def _to_decimal_2(raw) -> Decimal:
    return Decimal(str(raw)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _is_unique_violation(error: IntegrityError) -> bool:
    # SQLite: "UNIQUE constraint failed"; PostgreSQL: "duplicate key value violates unique constraint"
    message = str(error.orig).lower()
    return "unique" in message or "duplicate" in message


class SQLTransactionStore(TransactionStore):
    """Stores transactions in any database SQLAlchemy can reach"""

    def __init__(self, database_url: str, *, create_schema: bool = True):
        if not database_url:
            raise ValueError("database_url is required")
        self.database_url = database_url
        self.engine = create_engine(database_url, pool_pre_ping=True)
        self._session_maker = sessionmaker(bind=self.engine, expire_on_commit=False, class_=Session)
        if create_schema:
            Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Provide a transactional scope around a series of operations."""
        session = self._session_maker()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def save(self, record: TransactionRecord) -> None:
        row = TransactionRow(
            transaction_id=record.transaction_id,
            amount=record.amount,
            recipient=record.recipient,
            timestamp=record.timestamp,
            balance_after=record.balance_after,
            fee=record.fee,
            category=record.category,
            reason=record.reason,
        )
        try:
            with self.session_scope() as session:
                session.add(row)
        except IntegrityError as e:
            if _is_unique_violation(e):
                raise DuplicateTransaction(record.transaction_id) from e
            raise PersistenceFailure(str(e.orig), record.transaction_id) from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to save transaction {record.transaction_id}: {e}")
            raise PersistenceFailure(str(e), record.transaction_id) from e

    def find_by_category(self, category: str) -> List[TransactionRecord]:
        stmt = (
            select(TransactionRow)
            .where(TransactionRow.category == category.strip().lower())
            .order_by(TransactionRow.timestamp.desc())
        )
        return self._fetch(stmt)

    def sum_amount_by_category(self) -> Dict[str, Decimal]:
        stmt = select(TransactionRow.category, func.sum(TransactionRow.amount)).group_by(TransactionRow.category)
        try:
            with self.session_scope() as session:
                rows = session.execute(stmt).all()
        except SQLAlchemyError as e:
            raise PersistenceFailure(str(e), operation="get category summary") from e
        return {category: _to_decimal_2(total) for category, total in rows}

    def all_transactions(self) -> List[TransactionRecord]:
        return self._fetch(select(TransactionRow).order_by(TransactionRow.timestamp.desc()))

    def _fetch(self, stmt) -> List[TransactionRecord]:
        try:
            with self.session_scope() as session:
                return [row.to_record() for row in session.scalars(stmt)]
        except SQLAlchemyError as e:
            raise PersistenceFailure(str(e), operation="get transactions") from e

    def dispose(self) -> None:
        """Release pooled connections"""
        self.engine.dispose()
