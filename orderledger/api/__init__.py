"""HTTP layer: FastAPI application and route modules."""
