"""
FastAPI REST API Layer for tts-gateway.

This package defines all HTTP endpoints:
    - routes.py: POST /api/tts, GET /, GET /health, GET /metrics
    - schemas.py: Request Pydantic model
    - dependencies.py: FastAPI dependency injection
"""
