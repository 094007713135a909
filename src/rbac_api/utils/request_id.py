"""Request and correlation ID helpers."""

import uuid

from fastapi import Request

REQUEST_ID_HEADER = "X-Request-ID"


def generate_request_id() -> str:
    """Generate a unique ID used to correlate a request with its log lines.

    Returns:
        A UUID4 string.
    """
    return str(uuid.uuid4())


def get_request_id(request: Request) -> str:
    """Return the ID assigned to this request, generating one if absent.

    Args:
        request: Incoming request

    Returns:
        Request ID stored on ``request.state``
    """
    request_id = getattr(request.state, "request_id", None)
    if request_id is None:
        request_id = generate_request_id()
        request.state.request_id = request_id
    return request_id
