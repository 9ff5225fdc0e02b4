"""
STOCKNOTE - Database Schema Design
SQLAlchemy model for cached price snapshots.
"""
from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Float, Integer, String, UniqueConstraint
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class PriceSnapshotRecord(Base):
    """Last known quote per (user, symbol)."""
    __tablename__ = "price_snapshots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    symbol = Column(String(20), nullable=False)
    price = Column(Float)
    change = Column(Float)
    change_percent = Column(Float)
    fetched_on = Column(Date)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        UniqueConstraint("user_id", "symbol", name="uq_snapshot_user_symbol"),
    )


async def init_db(db_url: str, echo: bool = False) -> async_sessionmaker:
    """Initialize database, create all tables and return a session factory."""
    engine = create_async_engine(db_url, echo=echo)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
