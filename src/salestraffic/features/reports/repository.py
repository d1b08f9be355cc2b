"""Read access to the report collection."""
import logging
from typing import Any, Dict, List, Protocol

from motor.motor_asyncio import AsyncIOMotorCollection

logger = logging.getLogger(__name__)


class ReportRepository(Protocol):
    async def fetch(self, field: str) -> List[Dict[str, Any]]:
        """Return every report projected to ``field``. One call, one round trip."""
        ...


class MongoReportRepository:
    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def fetch(self, field: str) -> List[Dict[str, Any]]:
        cursor = self.collection.find({}, {field: 1, "_id": 0})
        reports = await cursor.to_list(length=None)
        logger.debug(f"Fetched {len(reports)} report(s) from {self.collection.name} for {field}")
        return reports

    async def count(self) -> int:
        return await self.collection.count_documents({})

    async def insert_many(self, reports: List[Dict[str, Any]]) -> int:
        """Bulk load used by the CLI; the HTTP service never writes."""
        if not reports:
            return 0
        result = await self.collection.insert_many(reports)
        return len(result.inserted_ids)
