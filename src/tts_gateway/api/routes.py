"""
Gateway API Routes.

Endpoints:
    GET  /          - Static landing page (public/index.html)
    POST /api/tts   - Synthesize speech through the selected provider
    GET  /health    - Provider configuration status
    GET  /metrics   - Prometheus metrics (requires prometheus_client)

Request Flow:
    1. Generate unique request ID for tracing
    2. Convert the JSON body into a SynthesisRequest
    3. Call SynthesisGateway.synthesize()
    4. Return audio with Content-Type/Content-Length and tracing headers

Error Handling:
    All errors are returned as JSON ``{"error": "<message>"}``.

    HTTP status codes are mapped from GatewayError codes:
        - VALIDATION_ERROR -> 400 Bad Request
        - QUOTA_EXCEEDED -> 429 Too Many Requests
        - CONFIGURATION_ERROR, AUTHENTICATION_ERROR,
          PROVIDER_ERROR, INTERNAL_ERROR -> 500 Internal Server Error

Example Usage:
    curl -X POST http://localhost:3000/api/tts \\
        -H "Content-Type: application/json" \\
        -d '{"text": "Halo, apa kabar?", "apiMode": "standard"}' \\
        --output halo.mp3
"""
from __future__ import annotations

import uuid
from pathlib import Path

from fastapi import APIRouter, Depends, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse

from tts_gateway.api.dependencies import get_gateway
from tts_gateway.api.schemas import TTSRequest
from tts_gateway.core.logging import fail, get_logger, set_request_id, warn
from tts_gateway.errors import INTERNAL_MESSAGE, ErrorCode, GatewayError
from tts_gateway.services.gateway import SynthesisGateway

router = APIRouter()

_LOG = get_logger("tts-gateway.api")

INVALID_BODY_MESSAGE = "Invalid request body"
NOT_FOUND_MESSAGE = "Not found"

STATUS_MAP = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.CONFIGURATION_ERROR: 500,
    ErrorCode.AUTHENTICATION_ERROR: 500,
    ErrorCode.QUOTA_EXCEEDED: 429,
    ErrorCode.PROVIDER_ERROR: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}


def _error_response(error: GatewayError, request_id: str) -> JSONResponse:
    """Create the public JSON error response for a GatewayError."""
    return JSONResponse(
        status_code=STATUS_MAP.get(error.code, 500),
        content=error.to_dict(),
        headers={"X-Request-Id": request_id},
    )


@router.get("/", include_in_schema=False)
def index(gateway: SynthesisGateway = Depends(get_gateway)):
    """Serve the landing page, or 404 when it is not deployed."""
    page = Path(gateway.config.server.static_dir) / "index.html"
    if not page.is_file():
        return JSONResponse(status_code=404, content={"error": NOT_FOUND_MESSAGE})
    return FileResponse(page, media_type="text/html")


@router.post("/api/tts", response_class=Response)
def tts(
    req: TTSRequest,
    gateway: SynthesisGateway = Depends(get_gateway),
):
    """
    Synthesize text through the provider named by ``apiMode``.

    Returns:
        Response: Audio bytes with headers:
            - Content-Type: audio/wav (LINEAR16) or audio/mpeg
            - Content-Length: Size of the audio in bytes
            - X-Request-Id: Unique request identifier for tracing
            - X-Provider: Adapter that produced the audio

    Raises:
        400: Missing text, unknown apiMode, text too long
        429: Provider quota or rate limit exhausted
        500: Missing credentials, authentication or provider failure
    """
    rid = str(uuid.uuid4())[:12]
    set_request_id(rid)

    try:
        result = gateway.synthesize(req.to_synthesis_request(), rid)

        headers = {
            "X-Request-Id": rid,
            "X-Provider": result.provider,
        }
        return Response(content=result.audio_bytes, media_type=result.content_type, headers=headers)

    except GatewayError as e:
        return _error_response(e, rid)

    except Exception as e:
        # Log internally but don't expose details
        fail(_LOG, "unhandled_error", error=str(e), error_type=type(e).__name__)
        return JSONResponse(
            status_code=500,
            content={"error": INTERNAL_MESSAGE},
            headers={"X-Request-Id": rid},
        )


@router.get("/health")
def health(gateway: SynthesisGateway = Depends(get_gateway)):
    """
    Health check for load balancers and probes.

    Reports the default apiMode and whether each provider has the
    credentials it needs. Never includes secret values.
    """
    return gateway.get_health_info()


@router.get("/metrics")
def prometheus_metrics():
    """
    Prometheus metrics endpoint.

    Requires prometheus_client package. Returns placeholder text if unavailable.
    """
    from tts_gateway.core.metrics import metrics

    content, content_type = metrics.get_metrics_response()
    return Response(content=content, media_type=content_type)


async def invalid_body_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer malformed JSON bodies with the gateway's error shape."""
    warn(_LOG, "invalid_request_body", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(status_code=400, content={"error": INVALID_BODY_MESSAGE})
