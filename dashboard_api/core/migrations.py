"""Database migration utilities.

``dashboard-migrate`` upgrades the configured database to the latest
revision before the API is started.
"""

from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory

from dashboard_api.config import settings
from dashboard_api.logging_config import get_logger, setup_logging

logger = get_logger(__name__)

# Repository root, where alembic.ini and migrations/ live
_APP_ROOT = Path(__file__).resolve().parent.parent.parent


def get_alembic_config() -> Config:
    """Load alembic.ini with script_location pinned to the repo's migrations/.

    Raises:
        FileNotFoundError: If alembic.ini is missing
    """
    alembic_ini = _APP_ROOT / "alembic.ini"
    if not alembic_ini.exists():
        raise FileNotFoundError(f"alembic.ini not found at {alembic_ini}")

    config = Config(str(alembic_ini))
    config.set_main_option("script_location", str(_APP_ROOT / "migrations"))
    return config


def get_head_revision() -> str | None:
    """Latest revision known to the migration scripts."""
    script = ScriptDirectory.from_config(get_alembic_config())
    return script.get_current_head()


def run_migrations() -> None:
    """Upgrade the database to the latest revision."""
    head = get_head_revision()
    logger.info("Running database migrations...", target_revision=head)
    try:
        command.upgrade(get_alembic_config(), "head")
    except Exception:
        logger.exception("Database migration failed", target_revision=head)
        raise
    logger.info("Database migrations completed successfully", revision=head)


def main() -> None:
    """Console entry point for ``dashboard-migrate``."""
    setup_logging(
        log_format=settings.log_format,
        log_level=settings.log_level,
        service_name=settings.service_name,
    )
    run_migrations()
