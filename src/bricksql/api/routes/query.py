from fastapi import APIRouter, Depends
from typing import Annotated

from bricksql.query import QueryService, QueryRequest, ResultFrame, BatchQueryRequest, BatchQueryResponse
from bricksql.api.dependencies import get_query_service

router = APIRouter()

QuerySvc = Annotated[QueryService, Depends(get_query_service)]


@router.post("/query", response_model=ResultFrame)
def execute_query(
    payload: QueryRequest,
    service: QuerySvc,
):
    return service.execute_query(payload)


@router.post("/query/batch", response_model=BatchQueryResponse)
def query_data(
    payload: BatchQueryRequest,
    service: QuerySvc,
):
    return service.query_data(payload.queries)
