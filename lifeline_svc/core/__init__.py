"""
Core module for application configuration, logging, and shared utilities.

This module provides:
- config: Application configuration via pydantic-settings
- dependencies: FastAPI Depends() functions for services and repositories
- exceptions: Domain-specific exception classes with HTTP status codes
- datetime_utils: Normalization of store date values
- logging_config / middleware: Structured logging, request IDs and metrics

Submodules are imported directly (``from core.exceptions import ...``);
nothing is re-exported here so that repositories can import core utilities
without pulling in the dependency wiring that imports them back.
"""
