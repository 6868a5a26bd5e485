"""Dashboard caller identity."""

from aws_chatops.auth.context import (
    RequestContext,
    get_request_context,
    get_request_context_optional,
    reset_request_context,
    set_request_context,
)

__all__ = [
    "RequestContext",
    "get_request_context",
    "get_request_context_optional",
    "reset_request_context",
    "set_request_context",
]
