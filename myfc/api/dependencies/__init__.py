"""API dependencies for FastAPI dependency injection."""
