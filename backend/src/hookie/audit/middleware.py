"""Starlette/FastAPI middleware that binds an AuditContext per request."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from hookie.audit.context import AuditContext, reset_audit_context, set_audit_context


def build_audit_context(
    request: Request,
    user_header: str = "X-User-Id",
    user_type_header: str = "X-User-Type",
    tags: tuple[str, ...] = (),
) -> AuditContext:
    """Derive audit provenance from a request.

    The user comes from ``request.state.user_id`` (set by an upstream auth
    middleware) or the user header. The client IP is the first
    X-Forwarded-For hop, else the socket peer.
    """
    user_id = getattr(request.state, "user_id", None) or request.headers.get(user_header)
    forwarded = request.headers.get("X-Forwarded-For")
    client_host = request.client.host if request.client else None
    ip_address = (forwarded.split(",")[0].strip() if forwarded else None) or client_host
    return AuditContext(
        user_id=user_id,
        user_type=request.headers.get(user_type_header),
        ip_address=ip_address,
        user_agent=request.headers.get("User-Agent"),
        url=str(request.url),
        tags=tags,
    )


class AuditContextMiddleware(BaseHTTPMiddleware):
    """Binds the request's AuditContext for the duration of the request.

    Dispatcher calls made while handling the request pick it up through
    ``current_audit_context()``. The context is also exposed as
    ``request.state.audit_context``.
    """

    def __init__(
        self,
        app,
        user_header: str = "X-User-Id",
        user_type_header: str = "X-User-Type",
        tags: tuple[str, ...] = (),
    ):
        super().__init__(app)
        self._user_header = user_header
        self._user_type_header = user_type_header
        self._tags = tuple(tags)

    async def dispatch(self, request: Request, call_next) -> Response:
        context = build_audit_context(
            request, self._user_header, self._user_type_header, self._tags
        )
        request.state.audit_context = context
        token = set_audit_context(context)
        try:
            return await call_next(request)
        finally:
            reset_audit_context(token)
