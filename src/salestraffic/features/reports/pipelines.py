"""Aggregation steps over report documents.

A report document holds two nested collections, ``salesAndTrafficByDate``
and ``salesAndTrafficByAsin``. Every query is a composition of the steps
below: unwind one collection, filter or group it, then sum or reshape.
All functions are pure and operate on plain dicts.
"""
import datetime
from decimal import Decimal
from numbers import Number
from typing import Any, Dict, Iterable, List, Mapping, Optional

from bson import Decimal128

BY_DATE = "salesAndTrafficByDate"
BY_ASIN = "salesAndTrafficByAsin"

DATE_FIELD = "date"
ASIN_FIELD = "parentAsin"

# Output field -> dotted path inside one unwound entry
DATE_TOTAL_FIELDS = {
    "totalUnitsOrdered": "salesByDate.unitsOrdered",
    "totalSalesAmount": "salesByDate.orderedProductSales.amount",
    "totalSessions": "trafficByDate.sessions",
    "totalPageViews": "trafficByDate.pageViews",
}

ASIN_TOTAL_FIELDS = {
    "totalUnitsOrdered": "salesByAsin.unitsOrdered",
    "totalSalesAmount": "salesByAsin.orderedProductSales.amount",
    "totalSessions": "trafficByAsin.sessions",
    "totalPageViews": "trafficByAsin.pageViews",
}

UNITS_AND_SALES_FIELDS = {
    "totalUnitsOrdered": "salesByAsin.unitsOrdered",
    "totalSalesAmount": "salesByAsin.orderedProductSales.amount",
}


def get_path(document: Mapping[str, Any], path: str) -> Any:
    value: Any = document
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def unwind(reports: Iterable[Mapping[str, Any]], field: str) -> List[Dict[str, Any]]:
    """Flatten the list stored under ``field`` of every report.

    Reports where the field is missing or empty contribute nothing; a
    non-list value is treated as a single entry.
    """
    entries = []
    for report in reports:
        value = report.get(field)
        if value is None:
            continue
        if isinstance(value, list):
            entries.extend(value)
        else:
            entries.append(value)
    return entries


def filter_by_date_range(
    entries: Iterable[Mapping[str, Any]],
    start_date: datetime.date,
    end_date: datetime.date,
) -> List[Mapping[str, Any]]:
    """Keep entries whose date string lies in [start, end], both inclusive.

    Dates are compared as strings against the ISO form of the bounds, which
    matches calendar order for ``YYYY-MM-DD`` values.
    """
    start, end = start_date.isoformat(), end_date.isoformat()
    return [
        entry for entry in entries
        if isinstance(entry.get(DATE_FIELD), str) and start <= entry[DATE_FIELD] <= end
    ]


def parse_entry_date(value: str) -> datetime.datetime:
    parsed = datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def sort_by_date_desc(entries: Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    return sorted(entries, key=lambda entry: parse_entry_date(entry[DATE_FIELD]), reverse=True)


def first_per_asin(entries: Iterable[Mapping[str, Any]], asins: Iterable[str]) -> List[Mapping[str, Any]]:
    """One entry per requested ASIN, the first one found in storage order."""
    wanted = set(asins)
    seen = {}
    for entry in entries:
        asin = entry.get(ASIN_FIELD)
        if asin in wanted and asin not in seen:
            seen[asin] = entry
    return list(seen.values())


def _as_number(value: Any) -> Number:
    # Booleans are ints in Python but never metrics
    if isinstance(value, Decimal128):
        return value.to_decimal()
    if isinstance(value, Number) and not isinstance(value, bool):
        return value
    return 0


def _add(total: Number, value: Number) -> Number:
    # Decimal and float do not mix; fall back to float for such totals
    if isinstance(total, Decimal) and isinstance(value, float):
        return float(total) + value
    if isinstance(total, float) and isinstance(value, Decimal):
        return total + float(value)
    return total + value


def sum_fields(entries: Iterable[Mapping[str, Any]], fields: Mapping[str, str]) -> Optional[Dict[str, Number]]:
    """Group all entries into one document of sums.

    Returns None when there is nothing to group, so callers can substitute
    their zero-valued default. Missing or non-numeric values add nothing;
    BSON ``Decimal128`` values are summed as ``Decimal``.
    """
    totals: Optional[Dict[str, Number]] = None
    for entry in entries:
        if totals is None:
            totals = {name: 0 for name in fields}
        for name, path in fields.items():
            totals[name] = _add(totals[name], _as_number(get_path(entry, path)))
    return totals


def zero_totals(fields: Mapping[str, str]) -> Dict[str, int]:
    return {name: 0 for name in fields}
