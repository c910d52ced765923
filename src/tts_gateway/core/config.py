"""
Configuration Management for tts-gateway.

This module provides centralized configuration handling with:
    - Default values (Defaults class)
    - Dataclass-based configuration objects
    - YAML file loading with environment variable overrides
    - Validation with meaningful error messages

Configuration Hierarchy (highest priority first):
    1. Environment variables (GOOGLE_TTS_API, OPENAI_API_KEY, ...)
    2. YAML config file (config/settings.yaml)
    3. Defaults class values

Provider credentials are read once, when settings are loaded, and never
mutated afterwards. A missing credential is not an error here: the adapter
that needs it raises ConfigurationError at request time.

Example settings.yaml:
    gateway:
      default_mode: standard
      default_language_code: id-ID

    http:
      timeout_s: 30

    providers:
      commercial:
        default_voice: nova

    logging:
      level: 2  # NORMAL
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
import os
import yaml


class ConfigValidationError(Exception):
    """
    Raised when configuration validation fails.

    This exception is thrown when a configuration value is outside
    acceptable bounds or of the wrong type.
    """
    pass


# Environment variables holding provider credentials
ENV_STANDARD_API_KEY = "GOOGLE_TTS_API"
ENV_OPENAI_API_KEY = "OPENAI_API_KEY"
ENV_GOOGLE_CREDENTIALS_JSON = "GOOGLE_APPLICATION_CREDENTIALS_JSON"
ENV_SETTINGS_PATH = "TTS_GATEWAY_SETTINGS"

# Canonical adapter names accepted by the gateway
API_MODES = ("standard", "managed-identity", "commercial")


class Defaults:
    """
    Centralized default configuration values.

    Sections:
        - Gateway: Request defaults and limits
        - HTTP: Outbound client behaviour
        - Server: Static page and CORS
        - Providers: Endpoints, models and voices per adapter
        - Logging: Log level
    """

    # ─────────────────────────────────────────────────────────────────────────
    # Gateway Request Defaults
    # ─────────────────────────────────────────────────────────────────────────
    API_MODE = "standard"
    LANGUAGE_CODE = "id-ID"
    AUDIO_ENCODING = "MP3"
    PITCH = 0.0
    SPEAKING_RATE = 1.0
    MAX_TEXT_CHARS = 5000           # Google TTS rejects inputs above 5000 bytes

    # ─────────────────────────────────────────────────────────────────────────
    # Outbound HTTP
    # ─────────────────────────────────────────────────────────────────────────
    HTTP_TIMEOUT_S: Optional[float] = None  # None = wait for the provider

    # ─────────────────────────────────────────────────────────────────────────
    # Server
    # ─────────────────────────────────────────────────────────────────────────
    STATIC_DIR = "public"
    CORS_ORIGINS = ["*"]

    # ─────────────────────────────────────────────────────────────────────────
    # Providers
    # ─────────────────────────────────────────────────────────────────────────
    GOOGLE_TTS_URL = "https://texttospeech.googleapis.com/v1/text:synthesize"
    MANAGED_MODEL_NAME = "gemini-2.5-flash-tts"
    CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
    OPENAI_SPEECH_URL = "https://api.openai.com/v1/audio/speech"
    OPENAI_MODEL = "gpt-4o-mini-tts"
    OPENAI_VOICE = "alloy"
    OPENAI_INSTRUCTIONS = (
        "Speak in Bahasa Indonesia.\n"
        "Voice Affect: Calm, composed, and reassuring; project quiet authority and confidence.\n"
        "Tone: Announcer, sincere, empathetic, and gently authoritative. Express genuine "
        "apology while conveying competence.\n"
        "Pacing: Steady and moderate; unhurried enough to communicate care, yet efficient "
        "enough to demonstrate professionalism.\n"
        "Emotion: Genuine empathy and understanding; speak with warmth.\n"
        "Pronunciation: Clear and precise.\n"
        "Pauses: Brief after commas, longer after period."
    )

    # ─────────────────────────────────────────────────────────────────────────
    # Logging
    # ─────────────────────────────────────────────────────────────────────────
    LOGGING_TEXT_PREVIEW_CHARS = 80     # Characters to show in text preview
    LOGGING_LEVEL = 2                   # 1=MINIMAL, 2=NORMAL, 3=VERBOSE, 4=DEBUG


@dataclass
class RequestDefaultsConfig:
    """Values applied to request fields the caller left out."""
    api_mode: str = Defaults.API_MODE
    language_code: str = Defaults.LANGUAGE_CODE
    audio_encoding: str = Defaults.AUDIO_ENCODING
    max_text_chars: int = Defaults.MAX_TEXT_CHARS


@dataclass
class HttpConfig:
    """Outbound HTTP client configuration."""
    timeout_s: Optional[float] = Defaults.HTTP_TIMEOUT_S


@dataclass
class ServerConfig:
    """Landing page and CORS configuration."""
    static_dir: str = Defaults.STATIC_DIR
    cors_origins: List[str] = field(default_factory=lambda: list(Defaults.CORS_ORIGINS))


@dataclass
class StandardProviderConfig:
    """Key-authenticated Google Cloud TTS."""
    url: str = Defaults.GOOGLE_TTS_URL
    api_key: Optional[str] = None


@dataclass
class ManagedProviderConfig:
    """
    Bearer-token Google Cloud TTS.

    credentials_json holds a service-account key blob; when absent the
    ambient Application Default Credentials are used.
    """
    url: str = Defaults.GOOGLE_TTS_URL
    model_name: str = Defaults.MANAGED_MODEL_NAME
    scopes: List[str] = field(default_factory=lambda: [Defaults.CLOUD_PLATFORM_SCOPE])
    credentials_json: Optional[str] = None


@dataclass
class CommercialProviderConfig:
    """OpenAI speech endpoint."""
    url: str = Defaults.OPENAI_SPEECH_URL
    model: str = Defaults.OPENAI_MODEL
    default_voice: str = Defaults.OPENAI_VOICE
    instructions: str = Defaults.OPENAI_INSTRUCTIONS
    api_key: Optional[str] = None


@dataclass
class LoggingConfig:
    """
    Logging configuration.

    Log levels:
        1 = MINIMAL: Startup, shutdown, critical errors only
        2 = NORMAL: Request lifecycle, provider errors (default)
        3 = VERBOSE: Outbound request details
        4 = DEBUG: Full payloads
    """
    text_preview_chars: int = Defaults.LOGGING_TEXT_PREVIEW_CHARS
    level: int = Defaults.LOGGING_LEVEL


@dataclass
class GatewayConfig:
    """
    Validated configuration for SynthesisGateway.

    Usage:
        settings = load_settings("config/settings.yaml")
        config = GatewayConfig.from_settings(settings)
        print(config.commercial.default_voice)  # Typed access
    """
    defaults: RequestDefaultsConfig = field(default_factory=RequestDefaultsConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    standard: StandardProviderConfig = field(default_factory=StandardProviderConfig)
    managed: ManagedProviderConfig = field(default_factory=ManagedProviderConfig)
    commercial: CommercialProviderConfig = field(default_factory=CommercialProviderConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "GatewayConfig":
        """
        Create GatewayConfig from Settings with validation.

        Args:
            settings: Raw Settings object loaded from YAML.

        Returns:
            Validated GatewayConfig instance.

        Raises:
            ConfigValidationError: If any value fails validation.
        """
        raw = settings.raw

        # ─────────────────────────────────────────────────────────────────────
        # Request defaults
        # ─────────────────────────────────────────────────────────────────────
        gateway_raw = raw.get("gateway", {}) or {}
        defaults = RequestDefaultsConfig(
            api_mode=str(gateway_raw.get("default_mode", Defaults.API_MODE)).strip().lower(),
            language_code=str(gateway_raw.get("default_language_code", Defaults.LANGUAGE_CODE)),
            audio_encoding=str(gateway_raw.get("default_audio_encoding", Defaults.AUDIO_ENCODING)),
            max_text_chars=int(gateway_raw.get("max_text_chars", Defaults.MAX_TEXT_CHARS)),
        )
        if defaults.api_mode not in API_MODES:
            raise ConfigValidationError(
                f"gateway.default_mode must be one of {', '.join(API_MODES)}, got {defaults.api_mode}"
            )
        cls._validate_positive("gateway.max_text_chars", defaults.max_text_chars)

        # ─────────────────────────────────────────────────────────────────────
        # HTTP client
        # ─────────────────────────────────────────────────────────────────────
        http_raw = raw.get("http", {}) or {}
        timeout_raw = http_raw.get("timeout_s", Defaults.HTTP_TIMEOUT_S)
        http = HttpConfig(timeout_s=float(timeout_raw) if timeout_raw is not None else None)
        if http.timeout_s is not None:
            cls._validate_positive("http.timeout_s", http.timeout_s)

        # ─────────────────────────────────────────────────────────────────────
        # Server
        # ─────────────────────────────────────────────────────────────────────
        server_raw = raw.get("server", {}) or {}
        origins = server_raw.get("cors_origins", Defaults.CORS_ORIGINS)
        if isinstance(origins, str):
            origins = [o.strip() for o in origins.split(",") if o.strip()]
        server = ServerConfig(
            static_dir=str(server_raw.get("static_dir", Defaults.STATIC_DIR)),
            cors_origins=list(origins),
        )

        # ─────────────────────────────────────────────────────────────────────
        # Providers
        # ─────────────────────────────────────────────────────────────────────
        providers_raw = raw.get("providers", {}) or {}

        standard_raw = providers_raw.get("standard", {}) or {}
        standard = StandardProviderConfig(
            url=str(standard_raw.get("url", Defaults.GOOGLE_TTS_URL)),
            api_key=standard_raw.get("api_key") or None,
        )

        managed_raw = providers_raw.get("managed_identity", {}) or {}
        scopes = managed_raw.get("scopes") or [Defaults.CLOUD_PLATFORM_SCOPE]
        managed = ManagedProviderConfig(
            url=str(managed_raw.get("url", Defaults.GOOGLE_TTS_URL)),
            model_name=str(managed_raw.get("model_name", Defaults.MANAGED_MODEL_NAME)),
            scopes=[str(s) for s in scopes],
            credentials_json=managed_raw.get("credentials_json") or None,
        )

        commercial_raw = providers_raw.get("commercial", {}) or {}
        commercial = CommercialProviderConfig(
            url=str(commercial_raw.get("url", Defaults.OPENAI_SPEECH_URL)),
            model=str(commercial_raw.get("model", Defaults.OPENAI_MODEL)),
            default_voice=str(commercial_raw.get("default_voice", Defaults.OPENAI_VOICE)),
            instructions=str(commercial_raw.get("instructions") or Defaults.OPENAI_INSTRUCTIONS),
            api_key=commercial_raw.get("api_key") or None,
        )

        # ─────────────────────────────────────────────────────────────────────
        # Logging configuration
        # ─────────────────────────────────────────────────────────────────────
        logging_raw = raw.get("logging", {}) or {}
        log_level_raw = logging_raw.get("level", Defaults.LOGGING_LEVEL)

        # Handle string log levels (e.g., "INFO", "DEBUG")
        if isinstance(log_level_raw, str):
            level_map = {
                "MINIMAL": 1, "1": 1,
                "NORMAL": 2, "INFO": 2, "2": 2,
                "VERBOSE": 3, "3": 3,
                "DEBUG": 4, "TRACE": 4, "4": 4,
            }
            log_level = level_map.get(log_level_raw.upper(), Defaults.LOGGING_LEVEL)
        else:
            log_level = int(log_level_raw)

        logging_cfg = LoggingConfig(
            text_preview_chars=int(logging_raw.get("text_preview_chars", Defaults.LOGGING_TEXT_PREVIEW_CHARS)),
            level=log_level,
        )
        cls._validate_non_negative("logging.text_preview_chars", logging_cfg.text_preview_chars)
        cls._validate_range("logging.level", logging_cfg.level, 1, 4)

        return cls(
            defaults=defaults,
            http=http,
            server=server,
            standard=standard,
            managed=managed,
            commercial=commercial,
            logging=logging_cfg,
        )

    @staticmethod
    def _validate_positive(name: str, value: int | float) -> None:
        """Validate that a value is positive (> 0)."""
        if value <= 0:
            raise ConfigValidationError(f"{name} must be positive, got {value}")

    @staticmethod
    def _validate_non_negative(name: str, value: int | float) -> None:
        """Validate that a value is non-negative (>= 0)."""
        if value < 0:
            raise ConfigValidationError(f"{name} must be non-negative, got {value}")

    @staticmethod
    def _validate_range(name: str, value: int | float, min_val: int | float, max_val: int | float) -> None:
        """Validate that a value is within a range [min_val, max_val]."""
        if not (min_val <= value <= max_val):
            raise ConfigValidationError(f"{name} must be between {min_val} and {max_val}, got {value}")


@dataclass(frozen=True)
class Settings:
    """
    Immutable settings container loaded from YAML.

    This is the raw settings object before validation. Use
    get_gateway_config() to get the validated GatewayConfig.

    Attributes:
        raw: Dictionary of raw configuration values.
    """
    raw: Dict[str, Any]

    def get_gateway_config(self) -> GatewayConfig:
        """
        Get validated GatewayConfig from these settings.

        Raises:
            ConfigValidationError: If validation fails.
        """
        return GatewayConfig.from_settings(self)


def _apply_env_overrides(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Copy provider credentials from the process environment into raw."""
    providers = raw.get("providers") or {}
    raw["providers"] = providers
    overrides = (
        (ENV_STANDARD_API_KEY, "standard", "api_key"),
        (ENV_OPENAI_API_KEY, "commercial", "api_key"),
        (ENV_GOOGLE_CREDENTIALS_JSON, "managed_identity", "credentials_json"),
    )
    for env_name, section, key in overrides:
        value = os.getenv(env_name)
        if value:
            section_raw = providers.get(section) or {}
            section_raw[key] = value
            providers[section] = section_raw
    return raw


def load_settings(path: Optional[str] = "config/settings.yaml", missing_ok: bool = True) -> Settings:
    """
    Load settings from a YAML configuration file.

    Environment variable overrides:
        - GOOGLE_TTS_API: providers.standard.api_key
        - OPENAI_API_KEY: providers.commercial.api_key
        - GOOGLE_APPLICATION_CREDENTIALS_JSON: providers.managed_identity.credentials_json

    Args:
        path: Path to the YAML configuration file. None skips the file.
        missing_ok: Fall back to defaults when the file does not exist.

    Returns:
        Settings object with loaded configuration.

    Raises:
        FileNotFoundError: If the file doesn't exist and missing_ok is False.
    """
    raw: Dict[str, Any] = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            with p.open("r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        elif not missing_ok:
            raise FileNotFoundError(f"settings file not found: {p.resolve()}")

    return Settings(raw=_apply_env_overrides(raw))


def settings_path() -> str:
    """Settings file location, overridable via TTS_GATEWAY_SETTINGS."""
    return os.getenv(ENV_SETTINGS_PATH, "config/settings.yaml")
