"""
Shared utilities for the Eligibility Service.

This package aggregates common building blocks consumed by the service:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- observability: Logging + metrics facade for business events
- errors: Canonical error types and responses
- base_service: FastAPI application scaffold (health, metrics, error handlers)

Do not import from service packages into shared/.
"""
