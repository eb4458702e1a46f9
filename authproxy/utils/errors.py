import json
import kubernetes_asyncio

_NOT_FOUND = "notfound"
_CONFLICT = "conflict"


class StoreError(Exception):
    """A read or write against the Kubernetes API failed."""

    def __init__(self, message: str, status: int = None):
        super().__init__(message)
        self.status = status


class NotFoundError(StoreError):
    """The requested object does not exist."""


class ConflictError(StoreError):
    """A write was rejected because the object changed since it was read."""


class UnknownWorkloadKindError(ValueError):
    """The workload selector names a kind that has no registered workload type."""

    def __init__(self, kind: str):
        super().__init__(f"Unknown kind for workload: {kind!r}")
        self.kind = kind


class LabelSelectorError(ValueError):
    """A label selector could not be converted to a selector string."""


def _reason(ex: kubernetes_asyncio.client.ApiException) -> str:
    try:
        return json.loads(ex.body).get("reason", "").lower()
    except (TypeError, ValueError, AttributeError):
        return ""


def not_found_error(ex: kubernetes_asyncio.client.ApiException) -> bool:
    if not isinstance(ex, kubernetes_asyncio.client.ApiException):
        return False
    return ex.status == 404 or _reason(ex) == _NOT_FOUND


def conflict_error(ex: kubernetes_asyncio.client.ApiException) -> bool:
    if not isinstance(ex, kubernetes_asyncio.client.ApiException):
        return False
    return ex.status == 409 or _reason(ex) == _CONFLICT


def convert_api_exception(ex: kubernetes_asyncio.client.ApiException) -> StoreError:
    """
    Convert kubernetes ApiException to a store error.

    Args:
        ex: The ApiException to convert

    Returns:
        NotFoundError for missing objects, ConflictError for stale writes,
        StoreError for everything else.
    """
    error_msg = f"Kubernetes API error ({ex.status}): {ex.reason}"
    try:
        if ex.body:
            body = json.loads(ex.body)
            if "message" in body:
                error_msg = f"{error_msg} - {body['message']}"
    except (json.JSONDecodeError, TypeError, AttributeError):
        pass

    if not_found_error(ex):
        return NotFoundError(error_msg, status=ex.status)
    if conflict_error(ex):
        return ConflictError(error_msg, status=ex.status)
    return StoreError(error_msg, status=ex.status)
