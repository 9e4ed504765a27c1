"""Monthly close endpoints."""

from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from sieledger.api.dependencies import get_current_user_id, get_db
from sieledger.api.errors import error_response
from sieledger.config.logging import get_logger
from sieledger.database.base import Database
from sieledger.domain.entities import MonthlySummary
from sieledger.domain.errors import DomainError
from sieledger.domain.monthly_close import MonthlyCloseService, lock_message

logger = get_logger(__name__)

router = APIRouter(prefix="/api/monthly-close", tags=["Monthly close"])


class MonthlyCloseRequest(BaseModel):
    year: int = Field(ge=1900, le=2100)
    month: int = Field(ge=1, le=12)
    action: Literal["close", "reopen"]


def summary_to_json(summary: MonthlySummary) -> dict:
    return {
        "month": summary.month,
        "year": summary.year,
        "period": summary.period,
        "label": summary.label,
        "verificationCount": summary.verification_count,
        "revenue": float(summary.revenue),
        "expenses": float(summary.expenses),
        "result": float(summary.result),
        "status": summary.status.value,
    }


@router.get("")
def list_months(
    year: Optional[int] = Query(None, ge=1900, le=2100),
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
):
    year = year or date.today().year
    try:
        summaries = MonthlyCloseService(db).get_monthly_summaries(user_id, year)
    except DomainError:
        raise
    except Exception:
        logger.exception("monthly_summaries_failed", user_id=user_id, year=year)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch")

    return {"summaries": [summary_to_json(s) for s in summaries], "year": year}


@router.post("")
def update_month(
    payload: MonthlyCloseRequest,
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
):
    locked = payload.action == "close"
    try:
        affected = MonthlyCloseService(db).set_month_locked(
            user_id, payload.year, payload.month, locked=locked
        )
    except DomainError:
        raise
    except Exception:
        logger.exception(
            "monthly_close_failed",
            user_id=user_id,
            year=payload.year,
            month=payload.month,
            action=payload.action,
        )
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to update")

    return {
        "success": True,
        "message": lock_message(payload.year, payload.month, locked, affected),
        "affectedCount": affected,
    }
