import os
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from online_judge.config import Config, logger
from online_judge.data.repositories import init_db, redis_client
from online_judge.errors import register_exception_handlers
from online_judge.presentation.routes import (
    auth_router,
    problem_router,
    submission_router,
    users_router,
)


http_logger = logger.getChild("http")

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        client_host = request.client.host if request.client else "unknown"
        http_logger.info(f"{request.method} {request.url.path} [{request_id}] from {client_host}")
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            http_logger.error(
                f"{request.method} {request.url.path} [{request_id}] failed after "
                f"{time.perf_counter() - start_time:.4f}s: {e}"
            )
            raise
        http_logger.info(
            f"{request.method} {request.url.path} [{request_id}] -> {response.status_code} "
            f"in {time.perf_counter() - start_time:.4f}s"
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


@asynccontextmanager
async def life_span(app: FastAPI):
    logger.info("Server is starting...")
    if os.environ.get("TESTING") != "True":
        try:
            await init_db()
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise
    else:
        logger.info("Skipping database initialization for tests")
    yield
    await redis_client.close()
    logger.info("Server has been stopped")


version = "v1"

app = FastAPI(
    title="Online Judge API",
    description="Accounts, verification codes, problems and submissions for the online judge",
    version=version,
    lifespan=life_span,
)

# Request logging
app.add_middleware(LoggingMiddleware)

# Exception handlers
register_exception_handlers(app)

# Routes
app.include_router(auth_router,       prefix=f"/api/{version}", tags=["auth"])
app.include_router(users_router,      prefix=f"/api/{version}", tags=["users"])
app.include_router(problem_router,    prefix=f"/api/{version}", tags=["problem"])
app.include_router(submission_router, prefix=f"/api/{version}", tags=["submission"])

logger.info(f"Application startup complete - API version: {version}")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=Config.API_SERVER_HOST, port=Config.API_SERVER_PORT)
