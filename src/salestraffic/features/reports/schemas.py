"""Sales and Traffic Report API Schemas

Response shapes for the statistics endpoints:

1. Units ordered and sales amount total
2. Four-metric totals by date and by ASIN

Entry lists (by date, by ASIN) are returned as the stored sub-documents
unchanged, so they have no schema of their own. Summary fields keep the
camelCase names of the report documents."""
from pydantic import BaseModel
from typing import Union

Metric = Union[int, float]


class UnitsAndSalesTotal(BaseModel):
    totalUnitsOrdered: Metric = 0
    totalSalesAmount: Metric = 0


class TotalStatistics(BaseModel):
    totalUnitsOrdered: Metric = 0
    totalSalesAmount: Metric = 0
    totalSessions: Metric = 0
    totalPageViews: Metric = 0
