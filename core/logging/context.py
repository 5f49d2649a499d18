"""Thread-local context for log correlation.

HTTP requests carry a request ID; queue worker threads carry their worker
name instead, so every line a worker logs can be tied to its claims.
"""

import threading

_request_context = threading.local()


def set_request_id(request_id: str) -> None:
    """Store the request ID in thread-local storage."""
    _request_context.request_id = request_id


def get_request_id() -> str | None:
    """Retrieve the request ID from thread-local storage."""
    return getattr(_request_context, "request_id", None)


def clear_request_id() -> None:
    """Clear the request ID once the request completes."""
    if hasattr(_request_context, "request_id"):
        delattr(_request_context, "request_id")


def bind_worker(worker_name: str) -> None:
    """Tag the current thread as a queue worker."""
    _request_context.worker = worker_name


def get_worker() -> str | None:
    """Queue worker name of the current thread, if any."""
    return getattr(_request_context, "worker", None)
