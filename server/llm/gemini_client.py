"""HTTP client for the Gemini generateContent API."""

import logging
import os
import random
import time

import requests

log = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-1.5-flash"


class GeminiError(RuntimeError):
    """The provider answered but produced no usable reply."""


class GeminiClient:
    """Blocking client for single-prompt text generation."""

    def __init__(self, llm_config: dict):
        self._model = llm_config.get("model", DEFAULT_MODEL)
        self._api_base = llm_config.get("api_base", DEFAULT_API_BASE).rstrip("/")
        try:
            self._temperature = float(llm_config.get("temperature", 0.7))
        except (TypeError, ValueError):
            self._temperature = 0.7
        self._max_output_tokens = llm_config.get("max_output_tokens")
        try:
            self._timeout = float(llm_config.get("timeout_s", 30))
        except (TypeError, ValueError):
            self._timeout = 30.0
        try:
            max_retries = int(llm_config.get("max_retries", 0))
        except (TypeError, ValueError):
            max_retries = 0
        self._max_retries = max(0, max_retries)
        try:
            retry_base_delay_s = float(llm_config.get("retry_base_delay_s", 0.25))
        except (TypeError, ValueError):
            retry_base_delay_s = 0.25
        self._retry_base_delay_s = max(0.05, retry_base_delay_s)

        self._api_key = os.environ.get("GEMINI_API_KEY", "")
        if not self._api_key:
            log.warning("GEMINI_API_KEY not set, every reply will be the fallback")

    @property
    def model(self) -> str:
        return self._model

    def _url(self) -> str:
        return f"{self._api_base}/models/{self._model}:generateContent"

    def _headers(self) -> dict:
        return {
            "x-goog-api-key": self._api_key,
            "Content-Type": "application/json",
        }

    def _payload(self, prompt: str) -> dict:
        generation_config = {"temperature": self._temperature}
        if self._max_output_tokens:
            generation_config["maxOutputTokens"] = int(self._max_output_tokens)
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }

    def generate(self, prompt: str) -> dict:
        """Send *prompt* and return the reply.

        Returns dict with keys: text, model, elapsed_s
        """
        payload = self._payload(prompt)
        t0 = time.monotonic()
        attempts = self._max_retries + 1

        for attempt in range(attempts):
            try:
                resp = requests.post(
                    self._url(),
                    headers=self._headers(),
                    json=payload,
                    timeout=self._timeout,
                )
                if resp.status_code >= 400:
                    if self._should_retry_status(resp.status_code) and attempt < attempts - 1:
                        log.warning("Gemini returned HTTP %d, retrying", resp.status_code)
                        self._sleep_before_retry(attempt)
                        continue
                    resp.raise_for_status()

                text = self._extract_text(resp.json())
                return {
                    "text": text.strip(),
                    "model": self._model,
                    "elapsed_s": time.monotonic() - t0,
                }

            except requests.RequestException as exc:
                retryable = True
                if isinstance(exc, requests.HTTPError):
                    status = exc.response.status_code if exc.response is not None else None
                    retryable = bool(status and self._should_retry_status(status))
                if (not retryable) or (attempt >= attempts - 1):
                    raise
                log.warning("Gemini request failed (%s), retrying", exc)
                self._sleep_before_retry(attempt)

        raise RuntimeError("Gemini generate failed without exception")

    @staticmethod
    def _extract_text(data: dict) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            reason = (data.get("promptFeedback") or {}).get("blockReason", "no candidates")
            raise GeminiError(f"Gemini returned no reply ({reason})")

        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts)
        if not text.strip():
            reason = candidates[0].get("finishReason", "empty")
            raise GeminiError(f"Gemini returned an empty reply ({reason})")
        return text

    def _should_retry_status(self, status_code: int) -> bool:
        return status_code == 429 or status_code >= 500

    def _sleep_before_retry(self, attempt: int) -> None:
        base = self._retry_base_delay_s * (2 ** attempt)
        jitter = random.uniform(0.0, base * 0.25)
        time.sleep(base + jitter)
