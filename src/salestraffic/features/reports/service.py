"""
Sales and Traffic Service Module

Read-only statistics over the report collection. Each query loads the one
nested collection it needs from the repository, runs the matching steps from
``pipelines`` and caches the result in its own region. A cache miss costs
exactly one repository call; a hit costs none. Cached results are not
invalidated when the collection changes.
"""

import asyncio
import datetime
import logging
from typing import Any, Dict, List

from ...core.cache import CacheManager, asin_list_key, cached, date_range_key
from . import pipelines
from .repository import ReportRepository
from .schemas import TotalStatistics, UnitsAndSalesTotal

logger = logging.getLogger(__name__)


class SalesAndTrafficService:
    def __init__(
        self,
        repository: ReportRepository,
        cache_manager: CacheManager,
        demo_delay_seconds: float = 0,
    ):
        self.repository = repository
        self.cache_manager = cache_manager
        self.demo_delay_seconds = demo_delay_seconds

    @cached("findByDateRangeCache", key=date_range_key)
    async def find_by_date_range(
        self, start_date: datetime.date, end_date: datetime.date
    ) -> List[Dict[str, Any]]:
        """
        Date entries between two dates, both inclusive, newest first.

        Args:
            start_date: First day of the range.
            end_date: Last day of the range.

        Returns:
            The matching ``salesAndTrafficByDate`` entries as stored.
        """
        reports = await self.repository.fetch(pipelines.BY_DATE)
        entries = pipelines.unwind(reports, pipelines.BY_DATE)
        entries = pipelines.filter_by_date_range(entries, start_date, end_date)
        return pipelines.sort_by_date_desc(entries)

    @cached("findByAsinCache", key=asin_list_key)
    async def find_by_asin(self, asins: List[str]) -> List[Dict[str, Any]]:
        """
        One ``salesAndTrafficByAsin`` entry per requested ASIN.

        Requested identifiers with no stored entry are absent from the
        result. When storage holds several entries for an ASIN, the first
        one wins.
        """
        reports = await self.repository.fetch(pipelines.BY_ASIN)
        entries = pipelines.unwind(reports, pipelines.BY_ASIN)
        return pipelines.first_per_asin(entries, asins)

    @cached("totalUnitsAndSalesCache")
    async def find_units_ordered_and_amount_total(self) -> UnitsAndSalesTotal:
        """Units ordered and ordered product sales summed over all ASIN entries."""
        if self.demo_delay_seconds:
            # Load-test demo only: makes the cache hit visible in latency
            await asyncio.sleep(self.demo_delay_seconds)

        reports = await self.repository.fetch(pipelines.BY_ASIN)
        entries = pipelines.unwind(reports, pipelines.BY_ASIN)
        totals = pipelines.sum_fields(entries, pipelines.UNITS_AND_SALES_FIELDS)
        if totals is None:
            totals = pipelines.zero_totals(pipelines.UNITS_AND_SALES_FIELDS)
        return UnitsAndSalesTotal(**totals)

    @cached("totalStatsByDatesCache")
    async def find_total_statistics_by_dates(self) -> TotalStatistics:
        reports = await self.repository.fetch(pipelines.BY_DATE)
        entries = pipelines.unwind(reports, pipelines.BY_DATE)
        return self._total_statistics(entries, pipelines.DATE_TOTAL_FIELDS)

    @cached("totalStatsByAsinsCache")
    async def find_total_statistics_by_asins(self) -> TotalStatistics:
        reports = await self.repository.fetch(pipelines.BY_ASIN)
        entries = pipelines.unwind(reports, pipelines.BY_ASIN)
        return self._total_statistics(entries, pipelines.ASIN_TOTAL_FIELDS)

    @staticmethod
    def _total_statistics(entries, fields) -> TotalStatistics:
        totals = pipelines.sum_fields(entries, fields)
        if totals is None:
            logger.info("No report entries to aggregate, returning zero totals")
            totals = pipelines.zero_totals(fields)
        return TotalStatistics(**totals)
