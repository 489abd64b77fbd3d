"""Library entry point: logging setup and service container factory"""
import logging
from typing import Optional

from extflex import config
from extflex.services.container import ServiceContainer
from extflex.storage.base import KeyValueStore
from extflex.storage.json_file_store import JsonFileStore
from extflex.storage.memory_store import InMemoryStore
from extflex.utils.datetime_helpers import Clock

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging in the standard format"""
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, (level or config.LOG_LEVEL).upper())
    )


def create_store() -> KeyValueStore:
    """Build the store selected by EXTFLEX_STORE_BACKEND"""
    if config.STORE_BACKEND == "json":
        logger.info(f"Using JSON file store in {config.DATA_PATH}")
        return JsonFileStore()
    logger.info("Using in-memory store (nothing is persisted)")
    return InMemoryStore()


async def create_container(
    store: Optional[KeyValueStore] = None,
    clock: Optional[Clock] = None,
) -> ServiceContainer:
    """
    Validate configuration and build a ready-to-use container

    Runs the one-time legacy key migration and the on-open streak check.

    Args:
        store: Store to use (default: built from configuration)
        clock: Clock shared by every service (default: system time)

    Returns:
        ServiceContainer
    """
    config.validate_config()

    container = ServiceContainer(store=store or create_store(), clock=clock)
    await container.exercise_log_service.migrate_legacy_storage()
    await container.streak_service.validate_streak()

    logger.info("Progression engine ready")
    return container
