"""Sales and traffic statistics over stored report documents.

Read-only, cached aggregation queries over the ``report`` collection:
entries by date range, entries by ASIN, and summary totals. Access requires
an authenticated principal.
"""
