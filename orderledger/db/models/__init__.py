"""
ORM models backing the document store.

Importing this package ensures model classes are registered with the Base
metadata for Alembic and runtime usage.
"""

from .document import Document  # noqa: F401
