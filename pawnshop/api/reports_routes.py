from fastapi import APIRouter, Query, Depends, HTTPException, Request, status
from fastapi.responses import Response
from typing import Dict, Any
import base64
import logging

from pawnshop.api.dependencies import get_report_service, get_settings
from pawnshop.core.auth_dependencies import get_current_user
from pawnshop.core.config import Settings
from pawnshop.repositories import in_memory_repositories
from pawnshop.services.report_service import ReportService, parse_report_type

router = APIRouter(prefix="/reports", tags=["Reports"], dependencies=[Depends(get_current_user)])
dev_router = APIRouter(prefix="/dev", tags=["Development"])

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/monthly")
async def monthly_report(service: ReportService = Depends(get_report_service)) -> Dict[str, Any]:
    report = await service.get_monthly_report()
    return {"report": report}


@router.get("")
async def filtered_reports(
    type: str = Query("monthly", description="daily, monthly or yearly"),
    service: ReportService = Depends(get_report_service),
) -> Dict[str, Any]:
    reports = await service.get_filtered_reports(type)
    return {"reports": reports}


@router.get("/export")
async def export_reports(
    type: str = Query("monthly", description="daily, monthly or yearly"),
    service: ReportService = Depends(get_report_service),
):
    report_type = parse_report_type(type)
    content = await service.export_reports_xlsx(report_type)

    # The spreadsheet travels base64 encoded, as API gateways expect for binary bodies
    return Response(
        content=base64.b64encode(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f"attachment; filename=report-{report_type.value}.xlsx",
            "Content-Transfer-Encoding": "base64",
        },
    )


# Replaces the in-memory stores with empty ones; refused when an external store is configured
@dev_router.post("/reset")
async def reset_repositories(request: Request, settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    if not settings.USE_IN_MEMORY_DB:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Reset is only available for the in-memory store")

    request.app.state.repositories = in_memory_repositories()
    await request.app.state.otp_store.clear()
    logger.warning("In-memory repositories reset")
    return {"message": "Repositories reset successfully"}
