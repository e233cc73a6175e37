# api/core/middleware.py
import logging
import time
import uuid
from typing import Callable
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import AppSettings

logger = logging.getLogger("api.middleware")


async def log_requests_middleware(request: Request, call_next: Callable) -> Response:
    """
    Log each request with a short request ID and add the processing time
    header to the response.
    """
    request_id = uuid.uuid4().hex[:16]
    start_time = time.perf_counter()

    logger.info(
        f"Request started: {request.method} {request.url.path}",
        extra={"request_id": request_id, "method": request.method, "path": str(request.url.path)}
    )

    response = await call_next(request)

    process_time = (time.perf_counter() - start_time) * 1000
    response.headers["X-Process-Time-ms"] = f"{process_time:.2f}"
    response.headers["X-Request-ID"] = request_id

    logger.info(
        f"Request completed: {request.method} {request.url.path} {response.status_code}",
        extra={
            "request_id": request_id,
            "status_code": response.status_code,
            "process_time_ms": round(process_time, 2)
        }
    )
    return response


def setup_middleware(app: FastAPI, settings: AppSettings) -> None:
    """CORS for the configured origins, then per-request timing logs."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.middleware("http")(log_requests_middleware)
