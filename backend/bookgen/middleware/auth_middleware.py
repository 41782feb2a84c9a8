"""
Identity middleware - resolves the owner id per request and puts it on request.state
"""
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from bookgen.config import settings
from bookgen.logger import get_logger

logger = get_logger(__name__)

USER_ID_HEADER = "X-User-Id"
USER_ID_COOKIE = "user_id"


class AuthMiddleware(BaseHTTPMiddleware):
    """Identity middleware"""

    async def dispatch(self, request: Request, call_next):
        """
        Read the owner id from the X-User-Id header or the user_id cookie.

        Falls back to ``dev_user_id`` when configured; otherwise the request
        stays anonymous and owner-scoped endpoints answer 401.
        """
        user_id = (
            request.headers.get(USER_ID_HEADER)
            or request.cookies.get(USER_ID_COOKIE)
            or settings.dev_user_id
        )
        if user_id:
            user_id = user_id.strip()[:100] or None

        request.state.user_id = user_id
        if user_id is None:
            logger.debug(f"Anonymous request: {request.method} {request.url.path}")

        return await call_next(request)
