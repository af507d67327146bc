# backend/app/routers/transactions.py
"""
Transaction management endpoints.

Provides CRUD operations for buy/sell/reinvestment transactions within a
holding, plus an atomic batch create.

Every write is checked against the holding's full timeline: no sell may
take the running unit balance below zero, including sells dated after a
back-dated edit.
"""

import logging
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import func, select
from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import CurrentUser, get_owned_holding, get_owned_transaction
from app.middleware.rate_limit import limiter
from app.models import Holding, Transaction, TransactionType
from app.schemas.pagination import PaginationMeta
from app.schemas.transactions import (
    TransactionBatchCreate,
    TransactionBatchResponse,
    TransactionCreate,
    TransactionListResponse,
    TransactionResponse,
)
from app.services.constants import MAX_LIST_LIMIT, RATE_LIMIT_WRITE
from app.services.valuation.calculators import ACQUISITION_TYPES
from app.services.valuation.money import ensure_utc

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Transactions"])


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def validate_sell_quantities(
    holding: Holding,
    candidates: Iterable[tuple[int | None, TransactionCreate]],
    removed: frozenset[int] = frozenset(),
) -> None:
    """
    Replay the holding's timeline with the candidate writes applied and
    reject the first sell that exceeds the units held at that point.

    Args:
        holding: Holding being written to
        candidates: (transaction_id, data) pairs. A known id replaces that
                    transaction, None means a new one.
        removed: Ids of transactions about to be deleted

    Raises:
        HTTPException 400: If any sell would oversell
    """
    candidates = list(candidates)
    replaced = {txn_id for txn_id, _ in candidates if txn_id is not None} | removed

    # (date, existing-before-new, id or batch position) matches replay order
    timeline: list[tuple[tuple, TransactionType, Decimal, datetime]] = []
    for txn in holding.transactions:
        if txn.id in replaced:
            continue
        date = ensure_utc(txn.transaction_date)
        timeline.append(((date, 0, txn.id), txn.transaction_type, txn.quantity, date))

    for position, (txn_id, data) in enumerate(candidates):
        date = ensure_utc(data.transaction_date)
        order = (date, 0, txn_id) if txn_id is not None else (date, 1, position)
        timeline.append((order, data.transaction_type, data.quantity, date))

    timeline.sort(key=lambda entry: entry[0])

    balance = Decimal("0")
    for _, txn_type, quantity, date in timeline:
        if txn_type in ACQUISITION_TYPES:
            balance += quantity
        elif txn_type == TransactionType.SELL:
            if quantity > balance:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Cannot sell {quantity} units of {holding.investment.code}. "
                           f"Only {balance} units held as of {date.date()}."
                )
            balance -= quantity


def _commit_or_400(db: Session, action: str) -> None:
    try:
        db.commit()
    except (IntegrityError, DataError) as e:
        db.rollback()
        logger.error(f"Transaction {action} failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid data: one or more values violate database constraints."
        )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "/holdings/{holding_id}/transactions",
    response_model=TransactionListResponse,
    summary="List transactions of a holding",
    response_description="Transactions, newest first"
)
def list_transactions(
        holding_id: int,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
        transaction_type: TransactionType | None = Query(
            default=None,
            description="Filter by transaction type (BUY/SELL/REINVESTMENT)"
        ),
        # Pagination
        skip: int = Query(default=0, ge=0, description="Number of records to skip"),
        limit: int = Query(default=100, ge=1, le=MAX_LIST_LIMIT, description="Maximum records to return"),
) -> TransactionListResponse:
    """
    Results are ordered by date (newest first), then by id.
    """
    holding = get_owned_holding(db, holding_id, current_user)

    query = select(Transaction).where(Transaction.holding_id == holding.id)
    if transaction_type is not None:
        query = query.where(Transaction.transaction_type == transaction_type)

    query = query.order_by(Transaction.transaction_date.desc(), Transaction.id.desc())

    total = db.scalar(select(func.count()).select_from(query.subquery()))
    transactions = db.scalars(query.offset(skip).limit(limit)).all()

    return TransactionListResponse(
        items=[TransactionResponse.model_validate(t) for t in transactions],
        pagination=PaginationMeta.create(total=total, skip=skip, limit=limit),
    )


@router.post(
    "/holdings/{holding_id}/transactions",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a transaction",
    response_description="The created transaction"
)
@limiter.limit(RATE_LIMIT_WRITE)
def create_transaction(
        request: Request,  # Required for rate limiter
        holding_id: int,
        data: TransactionCreate,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
) -> Transaction:
    """
    Record a buy, sell or reinvestment.

    For SELL transactions, you cannot sell more units than you hold at
    that date.
    """
    holding = get_owned_holding(db, holding_id, current_user)

    if data.transaction_type == TransactionType.SELL:
        validate_sell_quantities(holding, [(None, data)])

    transaction = Transaction(holding_id=holding.id, **data.model_dump())
    db.add(transaction)
    _commit_or_400(db, "create")
    db.refresh(transaction)

    logger.info(
        f"Transaction {transaction.id} ({transaction.transaction_type.value}) "
        f"recorded on holding {holding.id}"
    )
    return transaction


@router.post(
    "/holdings/{holding_id}/transactions/batch",
    response_model=TransactionBatchResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record several transactions atomically",
)
@limiter.limit(RATE_LIMIT_WRITE)
def create_transactions_batch(
        request: Request,  # Required for rate limiter
        holding_id: int,
        data: TransactionBatchCreate,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
) -> TransactionBatchResponse:
    """
    Create multiple transactions in a single request.

    **Atomic Behavior:** If ANY transaction fails validation, NONE are
    created. Sells are checked in date order against the running balance,
    including buys earlier in the same batch.
    """
    holding = get_owned_holding(db, holding_id, current_user)

    validate_sell_quantities(holding, [(None, t) for t in data.transactions])

    new_transactions = [
        Transaction(holding_id=holding.id, **t.model_dump())
        for t in data.transactions
    ]
    db.add_all(new_transactions)
    _commit_or_400(db, "batch create")

    for txn in new_transactions:
        db.refresh(txn)

    logger.info(f"Batch of {len(new_transactions)} transactions recorded on holding {holding.id}")
    return TransactionBatchResponse(
        created_count=len(new_transactions),
        transactions=[TransactionResponse.model_validate(t) for t in new_transactions],
    )


@router.get(
    "/transactions/{transaction_id}",
    response_model=TransactionResponse,
    summary="Get a transaction by ID",
)
def get_transaction(
        transaction_id: int,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
) -> Transaction:
    return get_owned_transaction(db, transaction_id, current_user)


@router.put(
    "/transactions/{transaction_id}",
    response_model=TransactionResponse,
    summary="Replace a transaction",
)
@limiter.limit(RATE_LIMIT_WRITE)
def update_transaction(
        request: Request,  # Required for rate limiter
        transaction_id: int,
        data: TransactionCreate,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
) -> Transaction:
    """
    Replace every field of a transaction.

    Rejected with **400** if the edit would leave any sell in the holding
    exceeding the units held at its date.
    """
    transaction = get_owned_transaction(db, transaction_id, current_user)

    validate_sell_quantities(transaction.holding, [(transaction.id, data)])

    for field, value in data.model_dump().items():
        setattr(transaction, field, value)

    _commit_or_400(db, "update")
    db.refresh(transaction)
    return transaction


@router.delete(
    "/transactions/{transaction_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a transaction",
)
@limiter.limit(RATE_LIMIT_WRITE)
def delete_transaction(
        request: Request,  # Required for rate limiter
        transaction_id: int,
        db: Annotated[Session, Depends(get_db)],
        current_user: CurrentUser,
) -> None:
    """
    Delete a transaction.

    Deleting a buy that a later sell depends on is rejected with **400**.
    """
    transaction = get_owned_transaction(db, transaction_id, current_user)
    holding = transaction.holding

    if transaction.transaction_type in ACQUISITION_TYPES:
        validate_sell_quantities(holding, [], removed=frozenset({transaction.id}))

    db.delete(transaction)
    db.commit()
    logger.info(f"Transaction {transaction_id} deleted")
    return None
