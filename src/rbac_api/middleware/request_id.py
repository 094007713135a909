"""Request ID middleware."""

from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from rbac_api.utils.request_id import REQUEST_ID_HEADER, generate_request_id


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns every request an ID and echoes it in the response headers.

    The same ID is used as the correlation ID of error responses.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request.state.request_id = generate_request_id()
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request.state.request_id
        return response
