"""Startup validation: fail fast on bad configuration or an unmigrated database."""
import logging
from typing import Set

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

from momentum.db import engine
from momentum.settings import settings

logger = logging.getLogger(__name__)

REQUIRED_TABLES = (
    "users",
    "sessions",
    "goals",
    "roadmap_steps",
    "tasks",
    "daily_schedules",
    "daily_reviews",
)


def validate_settings() -> None:
    """
    Validate settings for the current ENV.

    Raises:
        ValueError: If required settings are missing or invalid
    """
    logger.info(f"Validating settings for ENV={settings.ENV}")

    settings.validate_required_for_env()
    settings.validate_generator_config()

    logger.info("Settings validation passed")


def missing_tables(bind: Engine) -> Set[str]:
    """Required tables that do not exist on the given engine or connection."""
    existing = set(inspect(bind).get_table_names())
    return set(REQUIRED_TABLES) - existing


def validate_database() -> None:
    """
    Validate the database connection and required tables.

    Raises:
        ValueError: If tables are missing
        SQLAlchemyError: If the database is unreachable
    """
    logger.info("Validating database connection...")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection successful")

        missing = missing_tables(engine)
        if missing:
            raise ValueError(
                f"Missing required database tables: {', '.join(sorted(missing))}. "
                "Run migrations with: alembic upgrade head"
            )

        logger.info(f"All required tables present: {', '.join(REQUIRED_TABLES)}")

    except Exception as e:
        logger.error(f"Database validation failed: {e}")
        raise


def run_startup_validation() -> None:
    """
    Run all startup validations.

    Raises:
        Exception: If any validation fails
    """
    logger.info("Starting application startup validation")

    try:
        validate_settings()
        validate_database()
    except Exception as e:
        logger.error(f"Startup validation failed: {e}")
        logger.error("Application will not start until this is resolved.")
        raise

    logger.info("All startup validations passed")
