"""
API Request Schema.

The gateway accepts camelCase JSON (the shape browser front-ends send) and
exposes snake_case attributes in Python.

Every field is optional at the schema level. A missing ``text`` is not a
schema failure: it is reported by the gateway validator as
``{"error": "Text is required"}`` so the message is the same whichever
apiMode was requested. Wrong field types (e.g. ``"text": 42``) fail schema
validation and are answered with ``{"error": "Invalid request body"}``.

Example Request:
    {
        "text": "Halo, apa kabar?",
        "apiMode": "standard",
        "languageCode": "id-ID",
        "voiceName": "id-ID-Chirp3-HD-Achernar",
        "audioEncoding": "MP3",
        "pitch": 0,
        "speakingRate": 1.1
    }
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from tts_gateway.core.config import Defaults
from tts_gateway.providers.base import SynthesisRequest


class TTSRequest(BaseModel):
    """
    Synthesis request schema for POST /api/tts.

    Attributes:
        text: Text to synthesize.
        api_mode: "standard", "managed-identity" or "commercial"
            (aliases "vertex" and "openai"). None uses the configured default.
        language_code: Locale tag; None uses the configured default.
        model_name: Provider voice model (Standard only).
        voice_name: Provider voice name.
        audio_encoding: "MP3" or "LINEAR16".
        pitch: Semitone shift; 0 keeps the provider default.
        speaking_rate: Speed multiplier; 1 keeps the provider default.
    """
    model_config = ConfigDict(populate_by_name=True)

    text: str | None = Field(default=None, description="Text to synthesize")
    api_mode: str | None = Field(default=None, alias="apiMode", description="Provider adapter")
    language_code: str | None = Field(default=None, alias="languageCode", description="Locale tag, e.g. 'id-ID'")
    model_name: str | None = Field(default=None, alias="modelName", description="Provider voice model")
    voice_name: str | None = Field(default=None, alias="voiceName", description="Provider voice name")
    audio_encoding: str | None = Field(default=None, alias="audioEncoding", description="MP3 or LINEAR16")
    pitch: float | None = Field(default=None, description="Pitch in semitones")
    speaking_rate: float | None = Field(default=None, alias="speakingRate", description="Speed multiplier")

    def to_synthesis_request(self) -> SynthesisRequest:
        """Convert to the gateway's request type; unset fields stay unset."""
        return SynthesisRequest(
            text=self.text or "",
            api_mode=self.api_mode or "",
            language_code=self.language_code or "",
            model_name=self.model_name,
            voice_name=self.voice_name,
            audio_encoding=self.audio_encoding or "",
            pitch=Defaults.PITCH if self.pitch is None else self.pitch,
            speaking_rate=Defaults.SPEAKING_RATE if self.speaking_rate is None else self.speaking_rate,
        )
