"""Instruction templates, history rendering and speech cleanup."""

import re

BILINGUAL_TEMPLATE = """
You are a friendly, patient conversation partner who helps with language learning.
You automatically detect the language the user is speaking and respond in the same language.

IMPORTANT INSTRUCTIONS:
- If the user speaks German, respond in German like a native speaker
- If the user speaks English, respond in English naturally
- Maintain the same conversational tone regardless of language
- Be encouraging and helpful with language learning
- Ask follow-up questions to keep conversations flowing
- Gently correct mistakes when appropriate
- Adapt to the user's language level

Previous conversation:
{history}

User said: {input}

Response:"""

GERMAN_ONLY_TEMPLATE = """
Du bist ein freundlicher, geduldiger Gesprächspartner, der beim Deutschlernen hilft.
Antworte immer auf Deutsch, auch wenn der Nutzer eine andere Sprache verwendet.

WICHTIGE ANWEISUNGEN:
- Sprich natürlich wie ein Muttersprachler
- Halte deine Antworten kurz, sie werden vorgelesen
- Sei ermutigend und hilfsbereit
- Stelle Rückfragen, damit das Gespräch weitergeht
- Korrigiere Fehler behutsam, wenn es passt
- Passe dich dem Sprachniveau des Nutzers an

Bisheriges Gespräch:
{history}

Nutzer sagte: {input}

Antwort:"""

MODE_BILINGUAL = "bilingual"
MODE_GERMAN_ONLY = "german_only"

_TEMPLATES: dict[str, str] = {
    MODE_BILINGUAL: BILINGUAL_TEMPLATE,
    MODE_GERMAN_ONLY: GERMAN_ONLY_TEMPLATE,
}

_SPEAKER_PREFIXES: dict[str, str] = {
    "user": "Human",
    "assistant": "AI",
}


def get_template(mode: str) -> str:
    """Return the instruction template for a conversation mode."""
    try:
        return _TEMPLATES[mode]
    except KeyError:
        raise ValueError(
            f"Unknown conversation mode '{mode}'. Supported: {', '.join(_TEMPLATES)}."
        ) from None


def format_history(messages: list[dict]) -> str:
    """Render history as ``Human: ...`` / ``AI: ...`` lines."""
    lines = []
    for message in messages:
        prefix = _SPEAKER_PREFIXES.get(message["role"], message["role"])
        lines.append(f"{prefix}: {message['content']}")
    return "\n".join(lines)


def build_prompt(template: str, history: list[dict], user_text: str) -> str:
    # str.replace keeps braces inside user text or history intact
    return template.replace("{history}", format_history(history)).replace("{input}", user_text)


def clean_for_speech(text: str) -> str:
    """Strip markdown and links that speech synthesis would read aloud."""
    text = re.sub(r'\[([^\]]+)\]\([^)]+\)', r'\1', text)
    text = re.sub(r'https?://\S+', '', text)
    text = re.sub(r'`{1,3}([^`]*)`{1,3}', r'\1', text)
    text = re.sub(r'\*{1,3}(?=\w)([^*\n]+?)(?<=\S)\*{1,3}', r'\1', text)
    text = re.sub(r'(?<!\w)_{1,2}([^_]+)_{1,2}(?!\w)', r'\1', text)
    text = re.sub(r'^#{1,6}\s+', '', text, flags=re.MULTILINE)
    text = re.sub(r'^\s*(?:[-*•]|\d+[.)])\s+', '', text, flags=re.MULTILINE)
    text = re.sub(r'[ \t]+\n', '\n', text)
    text = re.sub(r'\n{2,}', '\n', text)
    text = re.sub(r'[ \t]{2,}', ' ', text)
    text = re.sub(r'\s+([,.;:!?])', r'\1', text)
    return text.strip()
