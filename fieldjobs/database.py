"""SQLAlchemy engine, session factory and the request-scoped session dependency"""

import logging
import time

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from . import config

logger = logging.getLogger(__name__)


def engine_options(url: str) -> dict:
    """SQLite uses its own pool classes, which reject the sizing options."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_size": config.DB_POOL_SIZE,
        "max_overflow": config.DB_MAX_OVERFLOW,
    }


def log_slow_queries(engine: Engine, threshold_seconds: float) -> None:
    """Warn about statements slower than ``threshold_seconds``"""

    @event.listens_for(engine, "before_cursor_execute")
    def before_cursor_execute(conn, _cursor, _statement, _parameters, _context, _executemany):
        conn.info.setdefault("query_start_time", []).append(time.time())

    @event.listens_for(engine, "after_cursor_execute")
    def after_cursor_execute(conn, _cursor, statement, _parameters, _context, _executemany):
        total = time.time() - conn.info["query_start_time"].pop(-1)
        if total > threshold_seconds:
            logger.warning(f"🐌 Slow query ({total:.2f}s): {statement[:200]}...")


engine = create_engine(config.DATABASE_URL, echo=False, **engine_options(config.DATABASE_URL))
if config.DB_SLOW_QUERY_THRESHOLD > 0:
    log_slow_queries(engine, config.DB_SLOW_QUERY_THRESHOLD)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
