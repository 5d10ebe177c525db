"""
Application startup validation and initialization.

Checks that the database is reachable and that secrets are not left at
their development defaults, then prepares development databases.
"""

import logging
from typing import List, Tuple

from sqlalchemy import text

from core.config import settings, DEV_ADMIN_PASSWORD, DEV_DELETE_PASSWORD
from core.database import engine, Base, SessionLocal
from modules.delivery.services.delivery_zone_service import seed_default_zones

logger = logging.getLogger(__name__)


class StartupValidator:
    """Validates application startup requirements"""

    def __init__(self):
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def check_database_connection(self) -> bool:
        """Check database connectivity"""
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1")).fetchone()
            logger.info("Database connection successful")
            return True
        except Exception as e:
            self.errors.append(f"Database connection failed: {str(e)}")
            return False

    def check_secrets(self) -> bool:
        """Warn about development passwords outside production"""
        if settings.admin_password == DEV_ADMIN_PASSWORD:
            self.warnings.append("ADMIN_PASSWORD is using the development default")
        if settings.order_delete_password == DEV_DELETE_PASSWORD:
            self.warnings.append("ORDER_DELETE_PASSWORD is using the development default")
        return True

    def run(self) -> Tuple[bool, List[str]]:
        self.check_database_connection()
        self.check_secrets()

        for warning in self.warnings:
            logger.warning(warning)
        for error in self.errors:
            logger.error(error)

        return not self.errors, self.warnings


def run_startup_checks() -> Tuple[bool, List[str]]:
    return StartupValidator().run()


async def prepare_development_database() -> None:
    """Create tables and seed delivery zones; production relies on Alembic"""
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        await seed_default_zones(db)
    finally:
        db.close()
