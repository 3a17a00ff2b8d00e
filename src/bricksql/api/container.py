from typing import Optional

from bricksql.common.settings import Settings, settings as default_settings
from bricksql.connection import ConnectionConfig, ConnectionHandle, SqlAlchemyConnectionHandle
from bricksql.namespace import NamespaceResolver
from bricksql.query import QueryService
from bricksql.api.services import HealthService, ResourceService


class Container:
    """Owns the single connection handle and the services that borrow it."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        config: Optional[ConnectionConfig] = None,
        handle: Optional[ConnectionHandle] = None,
    ):
        self.settings = settings or default_settings
        self.config = config or ConnectionConfig.from_settings(self.settings)
        self.handle = handle or SqlAlchemyConnectionHandle(self.config, workers=self.settings.exec_workers)

        self.query = QueryService(self.handle, self.config, null_text=self.settings.null_text)
        self.resolver = NamespaceResolver(self.handle, timeout=self.config.statement_timeout)
        self.resources = ResourceService(self.resolver, default_catalog=self.config.catalog)
        self.health = HealthService(self.handle, timeout=self.config.statement_timeout)

    def dispose(self) -> None:
        self.handle.dispose()
