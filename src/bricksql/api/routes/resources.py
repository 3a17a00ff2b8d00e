import json
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, Response
from fastapi.encoders import jsonable_encoder

from bricksql.common.errors import SerializationFailure
from bricksql.common.logger import get_logger
from bricksql.api.dependencies import get_resource_service
from bricksql.api.services import ResourceService

logger = get_logger("resources_route")

router = APIRouter()

ResourceSvc = Annotated[ResourceService, Depends(get_resource_service)]


def send_json(data: Any) -> Response:
    try:
        body = json.dumps(jsonable_encoder(data))
    except (TypeError, ValueError) as e:
        logger.error(f"Failed to serialize JSON: {e}")
        raise SerializationFailure("failed to marshal JSON") from e
    logger.debug(f"JSON sent: {body}")
    return Response(content=body, media_type="application/json")


@router.get("/resources/{path:path}")
def call_resource(
    path: str,
    request: Request,
    service: ResourceSvc,
):
    return send_json(service.call_resource(path, dict(request.query_params)))
