import logging
from typing import Callable, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel

from app.api.deps import get_current_user, get_portfolio_service, http_error
from app.domain.errors import PortfolioError
from app.domain.models import UserContext
from app.reports.portfolio_report import (
    PDF_FILENAME,
    PDF_MEDIA_TYPE,
    XLSX_FILENAME,
    XLSX_MEDIA_TYPE,
    render_pdf,
    render_xlsx,
)
from app.services.portfolio_service import PortfolioService

logger = logging.getLogger(__name__)
router = APIRouter()


class ReportRequest(BaseModel):
    user_name: Optional[str] = None


async def _render(
    renderer: Callable,
    filename: str,
    media_type: str,
    payload: Optional[ReportRequest],
    user: UserContext,
    service: PortfolioService,
) -> Response:
    funds = await service.list_funds(user)
    user_name = (payload.user_name if payload and payload.user_name else user.display_name) or ""

    try:
        content = renderer(funds, user_name)
    except PortfolioError as e:
        raise http_error(e)
    except Exception as e:
        logger.error(f"Failed to generate {filename}: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate report")

    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post(
    "/pdf",
    summary="Portfolio report (PDF)",
    description="Snapshot of all funds with total value",
)
async def pdf_report(
    payload: Optional[ReportRequest] = Body(default=None),
    user: UserContext = Depends(get_current_user),
    service: PortfolioService = Depends(get_portfolio_service),
):
    return await _render(render_pdf, PDF_FILENAME, PDF_MEDIA_TYPE, payload, user, service)


@router.post(
    "/xlsx",
    summary="Portfolio report (XLSX)",
    description="Summary and per-fund sheets",
)
async def xlsx_report(
    payload: Optional[ReportRequest] = Body(default=None),
    user: UserContext = Depends(get_current_user),
    service: PortfolioService = Depends(get_portfolio_service),
):
    return await _render(render_xlsx, XLSX_FILENAME, XLSX_MEDIA_TYPE, payload, user, service)
