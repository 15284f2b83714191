import logging
import time

from fastapi import FastAPI, Request

logger = logging.getLogger("http")


def register_middleware(app: FastAPI) -> None:
    """Attach app-level middleware."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        client_ip = request.client.host if request.client else None
        user_agent = request.headers.get("user-agent", "")[:100]
        logger.info(
            f"{request.method} {request.url.path}",
            extra={
                "type": "request",
                "method": request.method,
                "url": request.url.path,
                "ip": client_ip,
                "userAgent": user_agent,
            },
        )

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Process-Time"] = f"{duration_ms / 1000:.4f}"
        log = logger.warning if response.status_code >= 400 else logger.info
        log(
            f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.1f}ms)",
            extra={
                "type": "response",
                "method": request.method,
                "url": request.url.path,
                "statusCode": response.status_code,
                "userId": getattr(request.state, "user_id", None),
                "duration": round(duration_ms, 1),
            },
        )
        return response
