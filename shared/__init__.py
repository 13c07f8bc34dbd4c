"""
Shared utilities for the Recipes API.

This package aggregates common building blocks consumed by the service:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- base_service: FastAPI application scaffolding (health, metrics, errors)
- test_helpers: Test data and in-memory store/cache fakes

Apart from test_helpers, do not import from service_* packages into shared/.
"""
