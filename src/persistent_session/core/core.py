from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, cast
from urllib.parse import urlparse

import structlog
from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import ConfigurationError as MongoConfigurationError
from pymongo.errors import PyMongoError

from persistent_session.config import Config
from persistent_session.errors import ConfigurationError

if TYPE_CHECKING:
    from persistent_session.core.modules.identity.service import IdentityService
    from persistent_session.core.modules.record.service import RecordService

logger = structlog.get_logger(__name__)


class Service:
    """Base class for services with direct database access."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]], config: Config) -> None:
        self.database = database
        self.config = config
        self._core: Core | None = None

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""

    @property
    def core(self) -> Core:
        """Get the core application context."""
        if self._core is None:
            raise RuntimeError("Core not set for service")
        return self._core

    def set_core(self, core: Core) -> None:
        """Set the core application context."""
        self._core = core


class Services:
    """Service registry that automatically discovers and initializes services."""

    identity: IdentityService
    record: RecordService

    def __init__(self, database: AsyncDatabase[dict[str, Any]], config: Config) -> None:
        """Initialize all services automatically using service configuration."""
        self._services: list[Service] = []

        # Service configuration: (attribute_name, module_path, class_name)
        service_configs = [
            ("identity", "persistent_session.core.modules.identity.service", "IdentityService"),
            ("record", "persistent_session.core.modules.record.service", "RecordService"),
        ]

        for attr_name, module_path, class_name in service_configs:
            module = importlib.import_module(module_path)
            service_class = cast(type[Service], getattr(module, class_name))
            service_instance = service_class(database, config)
            setattr(self, attr_name, service_instance)
            self._services.append(service_instance)

    def set_core(self, core: Core) -> None:
        """Set core reference for all services."""
        for service in self._services:
            service.set_core(core)

    async def start_all(self) -> None:
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        for service in self._services:
            await service.on_stop()


def database_name(database_url: str) -> str:
    """Extract the database name from the path of a MongoDB URL."""
    name = urlparse(database_url).path.lstrip("/")
    if not name:
        raise ConfigurationError(f"Database URL must include a database name: {database_url!r}")
    return name


class Core:
    """Container providing config, database, and all service instances.

    Pass ``database`` to run on an already constructed database handle; the Core then owns no client.
    """

    config: Config
    mongo_client: AsyncMongoClient[dict[str, Any]] | None
    database: AsyncDatabase[dict[str, Any]]
    services: Services

    def __init__(self, config: Config, database: AsyncDatabase[dict[str, Any]] | None = None) -> None:
        """Initialize core with config, MongoDB, and auto-register services."""
        self.config = config
        self.mongo_client = None
        if database is None:
            name = database_name(config.database_url)
            try:
                self.mongo_client = AsyncMongoClient(config.database_url, uuidRepresentation="standard")
            except MongoConfigurationError as exc:
                raise ConfigurationError(f"Invalid database URL: {exc}") from exc
            database = self.mongo_client.get_database(name)
        self.database = database
        self.services = Services(self.database, config)
        self.services.set_core(self)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        """Check the database is reachable, then start all services."""
        try:
            await self.database.command("ping")
        except PyMongoError as exc:
            raise ConfigurationError(f"Database is unreachable: {exc}") from exc
        logger.info("database_connected", database=self.database.name, collection=self.config.collection)
        await self.services.start_all()

    async def on_stop(self) -> None:
        """Stop services and close MongoDB connection on shutdown."""
        await self.services.stop_all()
        if self.mongo_client is not None:
            await self.mongo_client.aclose()
