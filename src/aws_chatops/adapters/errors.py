"""AWS error code extraction and mapping to command error kinds."""

from __future__ import annotations

from botocore.exceptions import BotoCoreError, ClientError

from aws_chatops.domain.commands import ErrorKind

# Codes not listed here map to AdapterFailure.
ERROR_CODE_KINDS: dict[str, ErrorKind] = {
    "BucketAlreadyOwnedByYou": ErrorKind.RESOURCE_CONFLICT,
    "NoSuchBucket": ErrorKind.RESOURCE_NOT_FOUND,
    "NotFound": ErrorKind.RESOURCE_NOT_FOUND,
    "404": ErrorKind.RESOURCE_NOT_FOUND,
    "InvalidInstanceID.NotFound": ErrorKind.RESOURCE_NOT_FOUND,
    "InvalidInstanceID.Malformed": ErrorKind.VALIDATION,
    "InvalidBucketName": ErrorKind.VALIDATION,
    "InvalidLocationConstraint": ErrorKind.VALIDATION,
}


def error_code(exc: BaseException) -> str:
    if isinstance(exc, ClientError):
        return str(exc.response.get("Error", {}).get("Code") or "Unknown")
    return type(exc).__name__


def error_message(exc: BaseException) -> str:
    if isinstance(exc, ClientError):
        message = exc.response.get("Error", {}).get("Message")
        if message:
            return str(message)
        status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        return f"HTTP {status}" if status else str(exc)
    return str(exc)


def describe_error(exc: BaseException) -> str:
    """Format a provider error as ``Code: Message`` for user-facing replies."""
    return f"{error_code(exc)}: {error_message(exc)}"


def aws_error_suffix(exc: BaseException) -> str:
    return f"AWS Error: `{describe_error(exc)}`"


def classify(exc: BaseException) -> ErrorKind:
    if isinstance(exc, (ClientError, BotoCoreError)):
        return ERROR_CODE_KINDS.get(error_code(exc), ErrorKind.ADAPTER_FAILURE)
    return ErrorKind.ADAPTER_FAILURE


# Raised while reading a response that lacks fields the adapters rely on.
MALFORMED_RESPONSE_ERRORS: tuple[type[Exception], ...] = (KeyError, TypeError, AttributeError)


def malformed_response_message(operation: str, exc: BaseException) -> str:
    return f"AWS returned an unexpected response for {operation}: `{describe_error(exc)}`"
