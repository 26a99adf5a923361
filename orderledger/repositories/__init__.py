"""
Repository layer for data access.

Repositories read documents from the injected DocumentStore and turn them into
schema objects. They never commit writes; batched writes belong to services.
"""
