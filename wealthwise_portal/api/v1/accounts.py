"""Dashboard reads - client profile, balance snapshots, ledger and net balance"""

import logging
from typing import NoReturn
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wealthwise_portal.api.v1.schemas import (
    BalanceItem,
    BalancesResponse,
    ClientSchema,
    CurrentBalanceResponse,
    TransactionItem,
    TransactionsResponse,
)
from wealthwise_portal.api.dependencies import get_client_context
from wealthwise_portal.domain.exceptions import InvalidRecordError
from wealthwise_portal.domain.models import ClientContext
from wealthwise_portal.infrastructure.database.ledger import BalanceQuery
from wealthwise_portal.infrastructure.database.repositories import BalanceRepository, TransactionRepository
from wealthwise_portal.infrastructure.database.session import get_db

router = APIRouter()


@router.get("/me", response_model=ClientSchema)
def get_me(context: ClientContext = Depends(get_client_context)):
    """Profile of the signed-in client"""
    return ClientSchema.from_record(context.client)


@router.get("/balances", response_model=BalancesResponse)
def get_balances(
    context: ClientContext = Depends(get_client_context),
    db: Session = Depends(get_db),
):
    """
    Balance snapshot history, newest first.

    Returns:
        Snapshots plus their total
    """
    try:
        balances = BalanceRepository(db).get_balances_by_client(context.client.id)
    except (SQLAlchemyError, InvalidRecordError) as e:
        _store_unavailable(db, "balances", e)

    return BalancesResponse(
        client_id=context.client.id,
        total_balance=round(sum(b.balance for b in balances), 2),
        balances=[BalanceItem.from_record(b) for b in balances],
    )


@router.get("/balance", response_model=CurrentBalanceResponse)
def get_current_balance(
    context: ClientContext = Depends(get_client_context),
    db: Session = Depends(get_db),
):
    """Net ledger balance used by the campaign form; null when the store fails"""
    balance = BalanceQuery(db)(context.client.id)
    return CurrentBalanceResponse(
        client_id=context.client.id,
        balance=balance,
        display_balance=balance if balance is not None else 0.0,
    )


@router.get("/transactions", response_model=TransactionsResponse)
def get_transactions(
    limit: int = Query(100, ge=1, le=500),
    context: ClientContext = Depends(get_client_context),
    db: Session = Depends(get_db),
):
    """Transaction history, newest first"""
    try:
        transactions = TransactionRepository(db).get_transactions_by_client(context.client.id, limit=limit)
    except (SQLAlchemyError, InvalidRecordError) as e:
        _store_unavailable(db, "transactions", e)

    return TransactionsResponse(
        client_id=context.client.id,
        transactions=[TransactionItem.from_record(t) for t in transactions],
    )


def _store_unavailable(db: Session, collection: str, error: Exception) -> NoReturn:
    db.rollback()
    logging.error(f"Error fetching {collection}: {error}")
    raise HTTPException(status_code=503, detail="Data store unavailable")
