"""FastAPI application: factory, lifespan and router registration."""
