#!/usr/bin/env python3
"""
Run database migrations with error handling and logging.
Can be called directly or as part of the startup process.
"""
import sys
from pathlib import Path

# Add this directory to the path so the shiftboard package resolves
sys.path.insert(0, str(Path(__file__).parent))

import logging
from alembic.config import Config
from alembic import command
from alembic.util import CommandError
from sqlalchemy.exc import SQLAlchemyError

from shiftboard.core.config import settings

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def run_migrations():
    """Run Alembic migrations to head revision."""
    try:
        logger.info("Starting database migrations...")
        logger.info(f"Database URL: {settings.DATABASE_URL[:20]}...")  # Partial URL only

        alembic_cfg = Config(str(Path(__file__).parent / "alembic.ini"))
        command.upgrade(alembic_cfg, "head")

        logger.info("Migrations completed successfully")
        return 0
    except (CommandError, SQLAlchemyError) as e:
        logger.error(f"Migration failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    exit_code = run_migrations()
    sys.exit(exit_code)
