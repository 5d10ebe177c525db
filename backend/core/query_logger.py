# backend/core/query_logger.py

import logging
import time
from typing import Any, Dict

from sqlalchemy import event
from sqlalchemy.engine import Engine

from core.config import get_settings

logger = logging.getLogger("sqlalchemy.engine")
query_logger = logging.getLogger("query_performance")

settings = get_settings()


class QueryLogger:
    """Counts statements and reports the slow ones"""

    def __init__(self, slow_query_threshold: float):
        self.slow_query_threshold = slow_query_threshold
        self.query_stats: Dict[str, Any] = {
            "total_queries": 0,
            "slow_queries": 0,
            "total_time": 0.0,
        }

    def record(self, statement: str, elapsed: float):
        self.query_stats["total_queries"] += 1
        self.query_stats["total_time"] += elapsed

        if elapsed > self.slow_query_threshold:
            self.query_stats["slow_queries"] += 1
            query_logger.warning(
                f"SLOW QUERY ({elapsed:.3f}s): {statement[:200]}..."
            )

    def snapshot(self) -> Dict[str, Any]:
        stats = dict(self.query_stats)
        stats["total_time"] = round(stats["total_time"], 3)
        return stats


# Singleton instance
query_logger_instance = QueryLogger(settings.slow_query_threshold_seconds)


def setup_query_logging(engine: Engine):
    """
    Attach timing listeners to an engine.

    Only active when LOG_SQL_QUERIES is enabled.
    """
    if not settings.log_sql_queries:
        return

    @event.listens_for(engine, "before_cursor_execute")
    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_start_time", []).append(time.perf_counter())
        logger.debug("Start Query: %s", statement)

    @event.listens_for(engine, "after_cursor_execute")
    def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        elapsed = time.perf_counter() - conn.info["query_start_time"].pop(-1)
        query_logger_instance.record(statement, elapsed)
        logger.debug("Query Complete in %.3fs", elapsed)
