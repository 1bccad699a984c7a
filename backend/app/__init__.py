"""LMS backend FastAPI application; the ASGI app lives in ``app.main``."""
