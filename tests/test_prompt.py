import pytest

from server.llm.prompt import (
    BILINGUAL_TEMPLATE,
    GERMAN_ONLY_TEMPLATE,
    build_prompt,
    clean_for_speech,
    format_history,
    get_template,
)


def test_templates_have_history_and_input_placeholders() -> None:
    for template in (BILINGUAL_TEMPLATE, GERMAN_ONLY_TEMPLATE):
        assert template.count("{history}") == 1
        assert template.count("{input}") == 1


def test_get_template_by_mode() -> None:
    assert get_template("bilingual") is BILINGUAL_TEMPLATE
    assert get_template("german_only") is GERMAN_ONLY_TEMPLATE


def test_get_template_unknown_mode() -> None:
    with pytest.raises(ValueError, match="klingon"):
        get_template("klingon")


def test_format_history_uses_speaker_prefixes() -> None:
    history = [
        {"role": "user", "content": "Hallo"},
        {"role": "assistant", "content": "Hallo! Wie geht's?"},
    ]
    assert format_history(history) == "Human: Hallo\nAI: Hallo! Wie geht's?"


def test_format_empty_history() -> None:
    assert format_history([]) == ""


def test_build_prompt_fills_placeholders() -> None:
    prompt = build_prompt(
        BILINGUAL_TEMPLATE,
        [{"role": "user", "content": "Hi"}, {"role": "assistant", "content": "Hello!"}],
        "How are you?",
    )

    assert "Previous conversation:\nHuman: Hi\nAI: Hello!" in prompt
    assert "User said: How are you?" in prompt
    assert "{history}" not in prompt
    assert "{input}" not in prompt


def test_build_prompt_keeps_braces_in_user_text() -> None:
    prompt = build_prompt(BILINGUAL_TEMPLATE, [], "what does {input} mean")
    assert "User said: what does {input} mean" in prompt


def test_clean_strips_markdown_emphasis_and_headings() -> None:
    text = "## Tipp\n**Super**, das war *fast* richtig!"
    assert clean_for_speech(text) == "Tipp\nSuper, das war fast richtig!"


def test_clean_strips_links_and_urls() -> None:
    text = "Schau mal [hier](https://example.com) oder https://example.org nach."
    cleaned = clean_for_speech(text)

    assert "https://" not in cleaned
    assert cleaned.startswith("Schau mal hier oder")


def test_clean_strips_list_markers() -> None:
    text = "Beispiele:\n- der Hund\n- die Katze\n1. das Haus"
    assert clean_for_speech(text) == "Beispiele:\nder Hund\ndie Katze\ndas Haus"


def test_clean_keeps_plain_text() -> None:
    assert clean_for_speech("  I'm fine, thanks! And you?  ") == "I'm fine, thanks! And you?"


def test_clean_keeps_arithmetic_asterisks() -> None:
    assert clean_for_speech("3 * 4 * 5 = 60") == "3 * 4 * 5 = 60"


def test_clean_url_only_reply_is_empty() -> None:
    assert clean_for_speech("https://www.dw.com/de/deutsch-lernen") == ""
