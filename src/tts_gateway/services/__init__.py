"""
tts-gateway Services Layer.

The orchestration layer between the HTTP/CLI surfaces and the provider
adapters.

Components:
    - gateway.py: SynthesisGateway (validation, dispatch, logging, metrics)
    - validators.py: Input validation functions

Errors raised here come from tts_gateway.errors.
"""
from .gateway import (
    SynthesisGateway,
    SynthesisResult,
    content_type_for,
    get_gateway_service,
    reset_gateway,
    shutdown_gateway,
)

__all__ = [
    "SynthesisGateway",
    "SynthesisResult",
    "content_type_for",
    "get_gateway_service",
    "reset_gateway",
    "shutdown_gateway",
]
