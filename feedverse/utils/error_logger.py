"""
Structured error logging helpers.

Errors go through the standard logging tree, so the JSONL error handler set up
in ``feedverse/core/logging.py`` writes them to ``logs/errors/``.

Usage:
    from feedverse.utils.error_logger import log_error, log_feed_error

    log_error("feed_registry", error, operation="save", context={"count": 12})
    log_feed_error("album_resolver", feed_url, error, operation="resolve_scan")
"""

from typing import Any

from feedverse.core.logging import get_logger


def _extract_http_details(response: Any) -> dict[str, Any]:
    details: dict[str, Any] = {}
    if hasattr(response, "status_code"):
        details["status_code"] = response.status_code
    if hasattr(response, "url"):
        details["url"] = str(response.url)
    headers = getattr(response, "headers", None)
    if headers is not None:
        details["content_type"] = headers.get("content-type")
    text = getattr(response, "text", None)
    if isinstance(text, str):
        details["response_body"] = text[:1000]
    return details


def log_error(
    component: str,
    error: Exception,
    *,
    operation: str | None = None,
    context: dict[str, Any] | None = None,
    http_response: Any | None = None,
    item_id: str | int | None = None,
) -> None:
    """Log an exception with component/operation context.

    Args:
        component: Component name for identifying the source of errors.
        error: The exception that occurred.
        operation: Name of the operation that failed.
        context: Additional context data.
        http_response: HTTP response object (if applicable).
        item_id: ID of the item being processed (if applicable).
    """
    logger = get_logger(f"error.{component}")

    operation_str = f" during {operation}" if operation else ""
    item_str = f" (item: {item_id})" if item_id else ""

    logger.error(
        "%s error%s%s: %s",
        component,
        operation_str,
        item_str,
        error,
        exc_info=error,
        extra={
            "component": component,
            "operation": operation,
            "context_data": context,
            "http_details": _extract_http_details(http_response) if http_response else None,
            "item_id": item_id,
            "error_type": type(error).__name__,
            "error_message": str(error),
        },
    )


def log_http_error(
    component: str,
    url: str,
    *,
    response: Any | None = None,
    error: Exception | None = None,
    operation: str | None = None,
) -> None:
    """Log an HTTP failure; synthesizes an error from the status code when none is given."""
    if error is None:
        status_code = getattr(response, "status_code", "unknown")
        error = Exception(f"HTTP error for {url} (status: {status_code})")

    log_error(
        component,
        error,
        operation=operation or "http_request",
        context={"url": url},
        http_response=response,
    )


def log_feed_error(
    component: str,
    feed_url: str,
    error: Exception,
    *,
    feed_id: str | None = None,
    depth: int | None = None,
    operation: str | None = None,
) -> None:
    """Log a failure tied to one feed (parse, fetch or registry commit).

    Args:
        component: Component name for identifying the source of errors.
        feed_url: URL of the feed that failed.
        error: The exception that occurred.
        feed_id: Registry id of the feed, when it has one.
        depth: Crawl depth at which the feed was visited.
        operation: Name of the operation that failed.
    """
    context = {"feed_url": feed_url, "feed_id": feed_id, "depth": depth}
    log_error(
        component,
        error,
        operation=operation or "feed_processing",
        context={k: v for k, v in context.items() if v is not None},
        item_id=feed_id,
    )
