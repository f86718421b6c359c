"""Client identity middleware."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from typing import Callable

from linkvault.common.headers import resolve_client_id


class ClientIdentityMiddleware(BaseHTTPMiddleware):
    """Store the rate-limit identity of the caller in ``request.state.client_id``."""

    def __init__(self, app, trust_forwarded_for: bool = False):
        super().__init__(app)
        self.trust_forwarded_for = trust_forwarded_for

    async def dispatch(self, request: Request, call_next: Callable):
        request.state.client_id = resolve_client_id(
            headers=request.headers,
            peer_host=request.client.host if request.client else None,
            trust_forwarded_for=self.trust_forwarded_for,
        )

        response = await call_next(request)
        return response
