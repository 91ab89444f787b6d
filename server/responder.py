"""Turns one user utterance into a spoken-language reply.

Detects the utterance language, asks the generation provider for a reply
with the session's history, and falls back to a canned apology when the
provider fails. Provider errors never reach the caller.
"""

import logging
from typing import Protocol

from shared import protocol
from server.assistant.language import GERMAN, ENGLISH, detect_language
from server.assistant.metrics import MetricsLogger
from server.assistant.session import Session
from server.assistant.telemetry import utterance_metrics_payload, generation_metrics_payload
from server.llm.prompt import MODE_BILINGUAL, MODE_GERMAN_ONLY, build_prompt, clean_for_speech, get_template

log = logging.getLogger(__name__)

FALLBACK_MESSAGES: dict[str, str] = {
    ENGLISH: "Sorry, I had a small problem. Could you say that again?",
    GERMAN: "Entschuldigung, ich hatte ein kleines Problem. Können Sie das noch einmal sagen?",
}


class TextGenerator(Protocol):
    """Anything that turns a prompt into ``{"text": ..., ...}``."""

    def generate(self, prompt: str) -> dict:
        ...


class ConversationResponder:
    """Produces replies for a conversation mode using a text generator."""

    def __init__(self, llm: TextGenerator, metrics: MetricsLogger, config: dict):
        self._llm = llm
        self._metrics = metrics

        conversation_cfg = config.get("conversation", {})
        self._mode = conversation_cfg.get("mode", MODE_BILINGUAL)
        self._template = get_template(self._mode)

        metrics_cfg = config.get("metrics", {})
        self._log_transcripts = metrics_cfg.get("log_transcripts", False)
        self._log_llm_text = metrics_cfg.get("log_llm_text", False)

    @property
    def mode(self) -> str:
        return self._mode

    def respond(self, utterance: str, session: Session) -> dict:
        """Return ``{"text", "language", "detectedLanguage"}`` for *utterance*."""
        detected = detect_language(utterance)
        reply_language = GERMAN if self._mode == MODE_GERMAN_ONLY else detected
        utterance_payload = utterance_metrics_payload(
            utterance, detected, include_text=self._log_transcripts
        )

        prompt = build_prompt(self._template, session.get_messages(), utterance)
        try:
            result = self._llm.generate(prompt)
            text = clean_for_speech(result["text"])
            if not text:
                raise ValueError("reply is empty after speech cleanup")
        except Exception as e:
            log.error("Reply generation failed for session %s: %s", session.id, e, exc_info=True)
            self._metrics.log(
                "response_fallback",
                session=session.id,
                error=type(e).__name__,
                **utterance_payload,
            )
            return protocol.make_reply(FALLBACK_MESSAGES[reply_language], reply_language, detected)

        session.add_user_message(utterance)
        session.add_assistant_message(text)

        log.info("Reply (%s, %.2fs): '%s'", detected, result.get("elapsed_s", 0.0), text[:80])
        self._metrics.log(
            "response_complete",
            session=session.id,
            reply_language=reply_language,
            **utterance_payload,
            **generation_metrics_payload({**result, "text": text}, include_text=self._log_llm_text),
        )
        return protocol.make_reply(text, reply_language, detected)
