from fastapi import Depends, Request

from bricksql.query import QueryService
from bricksql.api.container import Container
from bricksql.api.services import HealthService, ResourceService


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_query_service(
    container: Container = Depends(get_container),
) -> QueryService:
    return container.query


def get_resource_service(
    container: Container = Depends(get_container),
) -> ResourceService:
    return container.resources


def get_health_service(
    container: Container = Depends(get_container),
) -> HealthService:
    return container.health
