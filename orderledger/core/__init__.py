"""
Core application utilities for settings, logging and FastAPI dependencies.

This package provides:
- Application-level settings (separate from DB settings)
- Logging configuration with request/workspace context
- Dependency helpers (document store handle, service factories)
"""
