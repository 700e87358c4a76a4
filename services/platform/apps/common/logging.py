"""
Logging infrastructure for Arrears Platform.

- RunContextFilter: stamps the current billing run ID onto log records
- StructuredLogAdapter: structured context logging
- get_logger: adapter factory

UsageReconciliationService.reconcile_subscription generates a run ID for
its own call when none is set; outer billing runs set one to group the
subscriptions they process.

Usage:
    from apps.common.logging import get_logger, set_run_id

    set_run_id("run-2024-05-15")
    logger = get_logger(__name__, subscription_id=sub_id)
    logger.info("Reconciled usage", items=3)
"""

from __future__ import annotations

import logging
import threading
from typing import Any

# Thread-local storage for billing run context
_run_context = threading.local()


# =============================================================================
# RUN CONTEXT FUNCTIONS
# =============================================================================


def set_run_id(run_id: str) -> None:
    """Set the current billing run ID in thread-local storage."""
    _run_context.run_id = run_id


def get_run_id() -> str | None:
    """Get the current billing run ID from thread-local storage."""
    return getattr(_run_context, "run_id", None)


def clear_run_id() -> None:
    """Clear the billing run ID from thread-local storage."""
    _run_context.run_id = None


# =============================================================================
# RUN CONTEXT FILTER
# =============================================================================


class RunContextFilter(logging.Filter):
    """
    Add the billing run ID to log records.

    Runs for different subscriptions may share a process; the run ID lets
    their log lines be told apart.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "run_id"):
            record.run_id = getattr(_run_context, "run_id", None) or "-"  # type: ignore[attr-defined]
        return True


class StructuredLogAdapter(logging.LoggerAdapter):
    """
    Log adapter that adds structured context to all log messages.

    Usage:
        logger = StructuredLogAdapter(
            logging.getLogger(__name__),
            {"component": "billing"}
        )
        logger.info("Usage item emitted", amount="4")
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:  # type: ignore[override]
        """Process log message and add structured context"""
        # Merge extra context
        extra = kwargs.get("extra", {})
        extra.update(self.extra)

        # Add any keyword arguments as extra fields
        for key, value in list(kwargs.items()):
            if key not in ("exc_info", "stack_info", "stacklevel", "extra"):
                extra[key] = value
                del kwargs[key]

        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str, **context: Any) -> StructuredLogAdapter:
    """
    Get a structured logger with context.

    Args:
        name: Logger name (usually __name__)
        **context: Additional context to include in all log messages

    Returns:
        StructuredLogAdapter with context
    """
    return StructuredLogAdapter(logging.getLogger(name), context)
