"""Ledger verification endpoints."""

import datetime as dt
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field

from sieledger.api.dependencies import get_current_user_id, get_db
from sieledger.database.base import Database
from sieledger.domain.entities import LedgerRow, Verification
from sieledger.domain.errors import NotFoundError, verification_not_found
from sieledger.domain.ledger import LedgerService

router = APIRouter(prefix="/api/verifications", tags=["Verifications"])


class VerificationRowIn(BaseModel):
    account: str = Field(min_length=1)
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")
    description: Optional[str] = None


class VerificationIn(BaseModel):
    date: dt.date
    description: str = ""
    series: str = Field(default="A", min_length=1, max_length=10)
    number: Optional[int] = Field(default=None, ge=1)
    rows: list[VerificationRowIn]


def verification_to_json(verification: Verification) -> dict:
    return {
        "id": verification.id,
        "series": verification.series,
        "number": verification.number,
        "date": verification.date.isoformat(),
        "description": verification.description,
        "isLocked": verification.is_locked,
        "rows": [
            {
                "account": row.account,
                "debit": float(row.debit),
                "credit": float(row.credit),
                "description": row.description,
            }
            for row in verification.rows
        ],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def create_verification(
    payload: VerificationIn,
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
):
    rows = [
        LedgerRow(
            account=row.account,
            debit=row.debit,
            credit=row.credit,
            description=row.description,
        )
        for row in payload.rows
    ]
    verification_id = LedgerService(db).post_verification(
        user_id,
        date=payload.date,
        description=payload.description,
        rows=rows,
        series=payload.series,
        number=payload.number,
    )
    return {"id": verification_id}


@router.get("")
def list_verifications(
    start: Optional[dt.date] = Query(None),
    end: Optional[dt.date] = Query(None),
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
):
    verifications = LedgerService(db).list_verifications(user_id, start, end)
    return {"verifications": [verification_to_json(v) for v in verifications]}


@router.get("/{verification_id}")
def get_verification(
    verification_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
):
    verification = LedgerService(db).get_verification(user_id, verification_id)
    if verification is None:
        raise NotFoundError(verification_not_found(verification_id))
    return verification_to_json(verification)


@router.delete("/{verification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_verification(
    verification_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
):
    LedgerService(db).delete_verification(user_id, verification_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
