"""
Access Logging Middleware

Records every API request in api_access_logs for auditing, tags the response
with an X-Request-ID header and reports slow requests.
"""

import time
import uuid
import hashlib
from typing import Callable, Optional
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from teamtasks.db.session import SessionAsync
from teamtasks.logging import get_logger
from teamtasks.models.api_access_log import APIAccessLog

logger = get_logger("access")

SKIPPED_PATHS = ("/", "/health", "/docs", "/redoc", "/openapi.json")


class AccessLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all API access to database.

    Captures:
    - User context (user_id, team_id from the path)
    - Request details (endpoint, method, IP, user agent)
    - Performance metrics (duration, response size)
    - Request tracking (request_id, body hash)
    """

    def __init__(self, app: ASGIApp, enabled: bool = True, slow_threshold: float = 1.0):
        super().__init__(app)
        self.enabled = enabled
        self.slow_threshold = slow_threshold

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.enabled or request.url.path in SKIPPED_PATHS:
            return await call_next(request)

        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.time()

        # Only a digest of the body is kept
        request_body_hash = None
        if request.method in ("POST", "PUT", "PATCH"):
            try:
                body = await request.body()
                if body:
                    request_body_hash = hashlib.sha256(body).hexdigest()
            except Exception as e:
                logger.warning("Failed to read request body", error=str(e))

        response = await call_next(request)

        duration = time.time() - start_time
        duration_ms = int(duration * 1000)

        # Populated by get_current_user and the router during call_next
        user = getattr(request.state, "user", None)
        user_id = user.id if user else None
        team_id = self._team_id(request)

        logger.request(
            "API request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration=round(duration, 3),
            request_id=request_id,
        )
        if duration > self.slow_threshold:
            logger.slow(
                "Slow request",
                duration=round(duration, 3),
                threshold=self.slow_threshold,
                path=request.url.path,
            )

        await self._log_to_database(
            user_id=user_id,
            team_id=team_id,
            endpoint=request.url.path,
            method=request.method,
            status_code=response.status_code,
            ip_address=self._get_client_ip(request),
            user_agent=request.headers.get("user-agent", ""),
            request_id=request_id,
            duration_ms=duration_ms,
            request_body_hash=request_body_hash,
            response_size=int(response.headers.get("content-length", 0)),
        )

        response.headers["X-Request-ID"] = request_id
        return response

    @staticmethod
    def _team_id(request: Request) -> Optional[int]:
        value = request.path_params.get("team_id")
        try:
            return int(value) if value is not None else None
        except (TypeError, ValueError):
            return None

    def _get_client_ip(self, request: Request) -> str:
        """
        Extract client IP address from request.

        Checks X-Forwarded-For header first (for proxied requests),
        then falls back to direct client IP.
        """
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        if request.client:
            return request.client.host

        return "unknown"

    async def _log_to_database(self, **fields) -> None:
        """
        Insert one APIAccessLog row.

        Uses its own session so request handling is never affected; failures
        are logged and dropped.
        """
        try:
            async with SessionAsync() as db:
                db.add(APIAccessLog(**fields))
                await db.commit()
        except Exception:
            logger.error("Database access logging failed", request_id=fields.get("request_id"))
