"""Sales and traffic statistics endpoints

Read-only views over the report collection: entries for a date range,
entries for a set of ASINs, and three summary totals. Every route requires
an authenticated principal; results come from the cached
``SalesAndTrafficService`` held on the application state."""
import datetime
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from typing import Annotated, Any, Dict, List

from ..auth.context import get_current_principal
from .schemas import TotalStatistics, UnitsAndSalesTotal
from .service import SalesAndTrafficService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/stats",
    tags=["Sales and Traffic"],
    dependencies=[Depends(get_current_principal)],
)


def get_report_service(request: Request) -> SalesAndTrafficService:
    return request.app.state.report_service


ReportService = Annotated[SalesAndTrafficService, Depends(get_report_service)]


@router.get("/dates", response_model=List[Dict[str, Any]])
async def get_statistics_by_date_range(
    service: ReportService,
    start_date: Annotated[datetime.date, Query(alias="startDate", description="First day (YYYY-MM-DD), inclusive")],
    end_date: Annotated[datetime.date, Query(alias="endDate", description="Last day (YYYY-MM-DD), inclusive")],
):
    return await service.find_by_date_range(start_date, end_date)


@router.get("/asins", response_model=List[Dict[str, Any]])
async def get_statistics_by_asins(
    service: ReportService,
    asins: Annotated[List[str], Query(description="ASINs, repeated or comma separated")] = [],
):
    # Accept both ?asins=A&asins=B and ?asins=A,B
    asin_list = [a.strip() for value in asins for a in value.split(",") if a.strip()]
    if not asin_list:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="At least one ASIN is required",
        )
    return await service.find_by_asin(asin_list)


@router.get("/total/units-and-sales", response_model=UnitsAndSalesTotal)
async def get_units_ordered_and_sales_total(service: ReportService):
    return await service.find_units_ordered_and_amount_total()


@router.get("/total/dates", response_model=TotalStatistics)
async def get_total_statistics_by_dates(service: ReportService):
    return await service.find_total_statistics_by_dates()


@router.get("/total/asins", response_model=TotalStatistics)
async def get_total_statistics_by_asins(service: ReportService):
    return await service.find_total_statistics_by_asins()
