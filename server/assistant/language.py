"""Language helpers: German/English guessing and speech locales."""

import re

GERMAN = "de"
ENGLISH = "en"
SUPPORTED_LANGUAGES = (GERMAN, ENGLISH)

_SPEECH_LOCALES: dict[str, str] = {
    GERMAN: "de-DE",
    ENGLISH: "en-US",
}

_DE_CHARS = re.compile(r"[äöüßÄÖÜ]")

_DE_WORDS = re.compile(
    r"\b(ich|du|er|sie|es|wir|ihr|der|die|das|ein|eine|und|oder|aber|mit|"
    r"von|zu|in|auf|für|ist|sind|war|waren|haben|hat|hatte|hatten|werden|"
    r"wird|wurde|wurden|können|kann|konnte|konnten|müssen|muss|musste|"
    r"mussten|sollen|soll|sollte|sollten|wollen|will|wollte|wollten|"
    r"dürfen|darf|durfte|durften)\b",
    re.IGNORECASE,
)

_EN_WORDS = re.compile(
    r"\b(i|you|he|she|it|we|they|the|a|an|and|or|but|with|from|to|in|on|"
    r"for|is|are|was|were|have|has|had|will|would|can|could|should|shall|"
    r"must|may|might|do|does|did|get|got|go|went|come|came|see|saw|know|"
    r"knew|think|thought|take|took|give|gave|make|made)\b",
    re.IGNORECASE,
)


def detect_language(text: str) -> str:
    """Guess whether *text* is German or English.

    Umlauts and ß win outright. Otherwise German needs strictly more
    function-word matches than English; a tie with matches on both sides
    goes to English, and text without any known word goes to German.
    """
    if _DE_CHARS.search(text):
        return GERMAN

    german_matches = len(_DE_WORDS.findall(text))
    english_matches = len(_EN_WORDS.findall(text))

    if german_matches > english_matches:
        return GERMAN
    if english_matches > 0:
        return ENGLISH
    return GERMAN


def speech_locale(language: str | None) -> str:
    """Return the browser speech locale for a language tag."""
    return _SPEECH_LOCALES.get((language or "").lower(), _SPEECH_LOCALES[GERMAN])
