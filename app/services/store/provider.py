import logging

from app.config import ConfigDatabase, ConfigStorage
from app.db.db import Database
from app.services.store.db_store import DbResourceStore
from app.services.store.in_memory_store import InMemoryResourceStore
from app.services.store.resource_store import ResourceStore

logger = logging.getLogger(__name__)


class ResourceStoreProvider:
    """
    Factory class to create the resource store based on the provided configuration.

    - If persistent storage is enabled, use the relational database.
    - Otherwise keep everything in memory until the process stops.
    """

    def __init__(self, storage_config: ConfigStorage, database_config: ConfigDatabase) -> None:
        self.__storage_config = storage_config
        self.__database_config = database_config
        self.database: Database | None = None

    def create(self) -> ResourceStore:
        if not self.__storage_config.use_db_storage:
            logger.info("Creating in-memory resource store")
            return InMemoryResourceStore()

        logger.info("Creating database resource store")
        self.database = Database(
            dsn=self.__database_config.dsn,
            pool_size=self.__database_config.pool_size,
            max_overflow=self.__database_config.max_overflow,
            pool_pre_ping=self.__database_config.pool_pre_ping,
            pool_recycle=self.__database_config.pool_recycle,
        )
        if self.__database_config.create_tables:
            self.database.generate_tables()

        return DbResourceStore(self.database)
