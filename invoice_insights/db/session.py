"""Database engine setup.

The analytics engine only reads from the store; sessions are opened per request
and closed after the snapshot has been materialised.
"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from invoice_insights.core.config import settings

raw_url = settings.DATABASE_URL or "sqlite:///:memory:"

if raw_url.startswith("sqlite"):
    # In-memory SQLite needs a single shared connection to keep its tables alive.
    sqlite_options: dict = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in raw_url:
        sqlite_options["poolclass"] = StaticPool
    engine = create_engine(raw_url, future=True, **sqlite_options)
else:
    engine = create_engine(
        raw_url,
        future=True,
        pool_size=5,
        max_overflow=10,
        pool_recycle=3600,  # Recycle connections after 1 hour
        pool_pre_ping=True,
    )
SessionLocal = sessionmaker(bind=engine, class_=Session, expire_on_commit=False, autoflush=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
