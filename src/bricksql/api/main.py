import uuid
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bricksql.common.errors import BricksError, ErrorResponse
from bricksql.common.logger import get_logger, trace_context
from bricksql.api.container import Container
from bricksql.api.routes import query, health, resources

logger = get_logger("api")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def create_app(container_factory: Callable[[], Container] = Container) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        container = container_factory()
        app.state.container = container
        try:
            yield
        finally:
            container.dispose()

    app = FastAPI(
        title="BrickSQL API",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(query.router, prefix="/api/v1")
    app.include_router(health.router, prefix="/api/v1")
    app.include_router(resources.router, prefix="/api/v1")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # tighten for prod
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        with trace_context(request_id):
            response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(BricksError)
    async def bricks_error_handler(request: Request, exc: BricksError):
        logger.warning(f"{request.url.path} failed ({exc.error_code.value}): {exc.get_safe_message()}")
        return _error(exc.status_code, exc.get_safe_message())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = errors[0].get("msg", "invalid request") if errors else "invalid request"
        return _error(400, f"Invalid request payload: {detail}")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = "Invalid endpoint" if exc.status_code == 404 else str(exc.detail)
        return _error(exc.status_code, message)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.url.path}: {exc}")
        return _error(500, "Internal server error")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
