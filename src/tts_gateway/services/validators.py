"""
Input Validation for the synthesis gateway.

Validation happens before any credential lookup or network call so that a
bad request never costs a provider round trip.

Validation Rules:
    - Text: Required, not blank, at most ``max_length`` characters
    - API mode: One of standard, managed-identity, commercial (plus the
      legacy aliases vertex and openai)
    - Language code / voice name: Optional, bounded length

All validators raise ValidationError; its message is returned verbatim to
the caller as ``{"error": message}``.
"""
from __future__ import annotations

from typing import Optional

from tts_gateway.core.config import API_MODES
from tts_gateway.errors import ValidationError

TEXT_REQUIRED_MESSAGE = "Text is required"

# Mode names used by the original browser front-end
MODE_ALIASES = {
    "vertex": "managed-identity",
    "managed_identity": "managed-identity",
    "openai": "commercial",
}


def validate_text(text: Optional[str], max_length: int = 5000) -> str:
    """
    Validate text input.

    Args:
        text: Input text
        max_length: Maximum allowed length

    Returns:
        The text, unchanged

    Raises:
        ValidationError: If the text is missing, blank or too long
    """
    if not text or not text.strip():
        raise ValidationError(TEXT_REQUIRED_MESSAGE)

    if len(text) > max_length:
        raise ValidationError(
            f"Text exceeds maximum length ({len(text)} > {max_length})",
            details={"length": len(text), "max_length": max_length},
        )

    return text


def validate_api_mode(mode: Optional[str], default: str = "standard") -> str:
    """
    Normalize an apiMode selector to its canonical adapter name.

    Examples:
        >>> validate_api_mode(None)
        'standard'
        >>> validate_api_mode("openai")
        'commercial'
    """
    if not mode:
        return default

    normalized = mode.strip().lower()
    normalized = MODE_ALIASES.get(normalized, normalized)
    if normalized not in API_MODES:
        raise ValidationError(
            f"Unsupported apiMode '{mode}'. Expected one of: {', '.join(API_MODES)}",
            details={"api_mode": mode},
        )
    return normalized


def validate_language_code(language_code: Optional[str], max_length: int = 35) -> Optional[str]:
    """
    Validate a BCP-47 style locale tag such as "id-ID".

    Returns:
        The tag, or None when not given.
    """
    if not language_code:
        return None

    if len(language_code) > max_length:
        raise ValidationError(
            f"Language code exceeds maximum length ({len(language_code)} > {max_length})",
        )
    return language_code


def validate_voice_name(voice_name: Optional[str], max_length: int = 100) -> Optional[str]:
    """Validate an optional provider voice identifier."""
    if not voice_name:
        return None

    if len(voice_name) > max_length:
        raise ValidationError(
            f"Voice name exceeds maximum length ({len(voice_name)} > {max_length})",
        )
    return voice_name
