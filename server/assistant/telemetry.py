"""Privacy-aware payloads for conversation metrics events."""


def utterance_metrics_payload(utterance: str, detected_language: str, include_text: bool = False) -> dict:
    """Describe the user's utterance, with the text only when allowed."""
    payload = {
        "detected_language": detected_language,
        "utterance_chars": len(utterance),
    }
    if include_text:
        payload["utterance"] = utterance
    return payload


def generation_metrics_payload(result: dict, include_text: bool = False) -> dict:
    """Describe a provider result, with the reply text only when allowed."""
    payload = {
        "model": result.get("model"),
        "elapsed_s": result.get("elapsed_s"),
        "reply_chars": len(result.get("text", "")),
    }
    if include_text:
        payload["reply"] = result.get("text", "")
    return payload
