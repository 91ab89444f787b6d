"""Payload field names and constructors shared by the server and the page.

The page posts form data and reads JSON objects back; these helpers keep
both sides agreeing on field names.
"""

# ── Page → Server ───────────────────────────────────────────────────

TRANSCRIPT_FIELD = "transcript"
SESSION_COOKIE = "session_id"

# ── Server → Page ───────────────────────────────────────────────────

TEXT = "text"
LANGUAGE = "language"
DETECTED_LANGUAGE = "detectedLanguage"
ERROR = "error"
STATUS = "status"

STATUS_SESSION_CLEARED = "session_cleared"

ERROR_NO_TRANSCRIPT = "No transcript provided"
ERROR_PROCESSING_FAILED = "Processing failed"


def make_reply(text: str, language: str, detected_language: str) -> dict:
    return {
        TEXT: text,
        LANGUAGE: language,
        DETECTED_LANGUAGE: detected_language,
    }


def make_error(message: str) -> dict:
    return {ERROR: message}


def make_session_cleared() -> dict:
    return {STATUS: STATUS_SESSION_CLEARED}


def make_settings(mode: str, speech_config: dict) -> dict:
    """Settings the page needs before its first recording."""
    return {
        "mode": mode,
        "speech": {
            "rate": speech_config.get("rate", 0.9),
            "pitch": speech_config.get("pitch", 1.0),
            "defaultLocale": speech_config.get("default_locale", "de-DE"),
            "delayMs": speech_config.get("delay_ms", 100),
        },
    }
