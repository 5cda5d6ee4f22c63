"""Server core: configuration and the FastAPI app factory."""
