"""
STOCKNOTE - SQL Snapshot Store
SnapshotStore backed by the price_snapshots table.
"""
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import async_sessionmaker

from stocknote.data.cache.store import SnapshotStore
from stocknote.data.models import PriceSnapshot
from stocknote.db.schema import PriceSnapshotRecord
from stocknote.utils.logger import get_logger

logger = get_logger("snapshot_store")


class SqlSnapshotStore(SnapshotStore):
    """Writes replace all price fields of the row in one transaction."""

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    @staticmethod
    def _to_snapshot(record: PriceSnapshotRecord) -> PriceSnapshot:
        return PriceSnapshot(
            symbol=record.symbol,
            price=record.price,
            change=record.change,
            change_percent=record.change_percent,
            fetched_on=record.fetched_on,
        )

    async def get(self, user_id: str, symbol: str) -> Optional[PriceSnapshot]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(PriceSnapshotRecord).where(
                    PriceSnapshotRecord.user_id == user_id,
                    PriceSnapshotRecord.symbol == symbol,
                )
            )
            record = result.scalar_one_or_none()
            return self._to_snapshot(record) if record else None

    async def put(self, user_id: str, snapshot: PriceSnapshot) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    select(PriceSnapshotRecord).where(
                        PriceSnapshotRecord.user_id == user_id,
                        PriceSnapshotRecord.symbol == snapshot.symbol,
                    )
                )
                record = result.scalar_one_or_none()
                if record is None:
                    record = PriceSnapshotRecord(user_id=user_id, symbol=snapshot.symbol)
                    session.add(record)
                record.price = snapshot.price
                record.change = snapshot.change
                record.change_percent = snapshot.change_percent
                record.fetched_on = snapshot.fetched_on
        logger.debug("snapshot_persisted", user_id=user_id, symbol=snapshot.symbol)

    async def count(self) -> int:
        async with self._session_factory() as session:
            result = await session.execute(select(func.count()).select_from(PriceSnapshotRecord))
            return int(result.scalar_one())
