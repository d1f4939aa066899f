"""
Observability facade for the Eligibility Service.
Bundles structured logging and metrics for request and business events.
"""

from typing import Optional

from .logging import get_logger, set_request_id, set_locale_context
from .metrics import MetricsCollector, get_metrics_collector


class ObservabilityManager:
    """Centralized observability manager for services."""

    def __init__(self, service_name: str, metrics: Optional[MetricsCollector] = None):
        self.service_name = service_name
        self.metrics = metrics or get_metrics_collector(service_name)
        self.logger = get_logger(f"{service_name}.observability")

    def trace_request(self, request_id: Optional[str] = None,
                      locale: Optional[str] = None):
        """Set up request context for correlated logging."""
        if request_id:
            set_request_id(request_id)
        set_locale_context(locale)

    def log_error(self, error_type: str, error_message: str, **kwargs):
        """Log error with full context."""
        self.logger.error(
            "Error occurred",
            error_type=error_type,
            error_message=error_message,
            **kwargs
        )
        self.metrics.record_error(error_type)

    def log_business_event(self, event_type: str, **kwargs):
        """Log business event with full context."""
        self.logger.info(
            "Business event",
            event_type=event_type,
            **kwargs
        )
        self.metrics.record_business_event(event_type)

    def measure_operation(self, operation_name: str, **labels):
        """Context manager to measure operation performance."""
        return self.metrics.time_operation(operation_name, **labels)


def get_observability_manager(service_name: str, **kwargs) -> ObservabilityManager:
    """Get an observability manager for a service."""
    return ObservabilityManager(service_name, **kwargs)
