"""Security package."""

from rbac_api.security.auth import Operator, OperatorUser, get_current_user, require_operator
from rbac_api.security.rate_limit import AI_COMMAND_LIMIT, limiter

__all__ = [
    "AI_COMMAND_LIMIT",
    "Operator",
    "OperatorUser",
    "get_current_user",
    "limiter",
    "require_operator",
]
