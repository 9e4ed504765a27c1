"""SIE import and export endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from fastapi.responses import Response

from sieledger.api.dependencies import get_app_settings, get_current_user_id, get_db
from sieledger.api.errors import error_response
from sieledger.config.logging import get_logger
from sieledger.config.settings import Settings
from sieledger.database.base import Database
from sieledger.domain.entities import ImportReport
from sieledger.domain.errors import DomainError
from sieledger.domain.sie_export import SieExportService, sie_filename
from sieledger.domain.sie_import import SieImportService
from sieledger.domain.sie_parser import decode_sie_bytes

logger = get_logger(__name__)

router = APIRouter(prefix="/api/sie", tags=["SIE"])

MIN_EXPORT_YEAR = 1900
MAX_EXPORT_YEAR = 2100


def import_report_to_json(report: ImportReport) -> dict:
    stats = report.stats
    body = {
        "success": True,
        "stats": {
            "verifications": stats.verifications,
            "accounts": stats.accounts,
            "balances": stats.balances,
            "transactionsInserted": stats.transactions_inserted,
            "accountBalancesInserted": stats.account_balances_inserted,
            "period": stats.period,
        },
    }
    if report.errors:
        body["errors"] = list(report.errors)
    if report.warnings:
        body["warnings"] = [
            {"line": warning.line_number, "reason": warning.reason}
            for warning in report.warnings
        ]
    if report.unbalanced:
        body["unbalanced"] = list(report.unbalanced)
    return body


@router.post("/import")
def import_sie(
    file: Optional[UploadFile] = File(None),
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
):
    if file is None:
        return error_response(status.HTTP_400_BAD_REQUEST, "No file provided")

    try:
        content = decode_sie_bytes(file.file.read())
        report = SieImportService(db).import_sie(content, user_id)
    except DomainError:
        raise
    except Exception:
        logger.exception("sie_import_failed", user_id=user_id, filename=file.filename)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to parse SIE file")

    return import_report_to_json(report)


def _parse_year(value: Optional[str]) -> Optional[int]:
    try:
        year = int(value or "")
    except ValueError:
        return None
    if not MIN_EXPORT_YEAR <= year <= MAX_EXPORT_YEAR:
        return None
    return year


@router.get("/export")
def export_sie(
    year: Optional[str] = Query(None),
    include_opening_balances: str = Query("true", alias="includeOpeningBalances"),
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    if not year:
        return error_response(status.HTTP_400_BAD_REQUEST, "Missing required parameter: year")
    parsed_year = _parse_year(year)
    if parsed_year is None:
        return error_response(status.HTTP_400_BAD_REQUEST, "Invalid year parameter")

    try:
        content = SieExportService(db).export_year(
            user_id,
            parsed_year,
            company_name=settings.company_name,
            org_number=settings.org_number,
            include_balances=include_opening_balances.lower() != "false",
        )
    except DomainError:
        raise
    except Exception:
        logger.exception("sie_export_failed", user_id=user_id, year=parsed_year)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    filename = sie_filename(settings.org_number, parsed_year)
    return Response(
        content=content.encode("iso-8859-1", errors="replace"),
        media_type="text/plain; charset=iso-8859-1",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
