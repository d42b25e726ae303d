"""SQLAlchemy-backed transaction source for the holdings calculation."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from app.models import TransactionRecord
from asset_manager.models import HoldingFilters, Transaction


def _to_domain(record: TransactionRecord) -> Transaction:
    return Transaction(
        id=str(record.id),
        date=record.date,
        asset_type=record.asset_type,
        symbol=record.symbol,
        name=record.name or "",
        transaction_type=record.transaction_type,
        quantity=record.quantity,
        price=record.price,
        amount=record.amount,
        fee=record.fee,
        tax=record.tax,
        currency=record.currency,
        note=record.note,
    )


class SqlTransactionRepository:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get_all(self, filters: HoldingFilters) -> list[Transaction]:
        stmt = select(TransactionRecord).order_by(TransactionRecord.date, TransactionRecord.id)
        if filters.asset_type is not None:
            stmt = stmt.where(TransactionRecord.asset_type == filters.asset_type)
        if filters.symbol:
            stmt = stmt.where(TransactionRecord.symbol == filters.symbol)
        with self._session_factory() as session:
            return [_to_domain(record) for record in session.execute(stmt).scalars()]

    def add(self, transaction: Transaction) -> Transaction:
        record = TransactionRecord(
            date=transaction.date,
            asset_type=transaction.asset_type,
            symbol=transaction.symbol,
            name=transaction.name,
            transaction_type=transaction.transaction_type,
            quantity=transaction.quantity,
            price=transaction.price,
            amount=transaction.amount or transaction.price * transaction.quantity,
            fee=transaction.fee,
            tax=transaction.tax,
            currency=transaction.currency,
            note=transaction.note,
        )
        with self._session_factory() as session:
            session.add(record)
            session.commit()
            return _to_domain(record)


__all__ = ["SqlTransactionRepository"]
