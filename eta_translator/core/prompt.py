"""
Prompt used for every provider attempt.

The user text is placed after the instructions as a double-quoted value.
It is not escaped or filtered beyond that: the text is attacker controlled,
so a model may still follow instructions embedded in it (prompt injection).
The structured-output schema sent with the prompt limits what can come back
to the three result fields.
"""

from eta_translator.core.data_models.translation import TranslationRequest

SYSTEM_PROMPT = """
You are a professional Vietnamese-English translator with cultural awareness.
- Detect the language if not provided.
- Polish grammar and clarity in source language.
- Translate into target language naturally.
- Vietnamese output must respect tone (e.g., "ạ", "ơi"), hierarchy (e.g., anh, chị, em), and indirect politeness.
- Avoid robotic literal translations. Embrace Vietnamese circular storytelling, face-saving expressions, and natural cadence.
Return only JSON:
{
  "inputLanguage": "<iso>",
  "improved": "<polished>",
  "translation": "<translated>"
}
""".strip()


def build_prompt(request: TranslationRequest, system_prompt: str = SYSTEM_PROMPT) -> str:
    return (
        f"{system_prompt}\n\n"
        f"SOURCE: {request.source}\n"
        f"TARGET: {request.target}\n\n"
        f'TEXT: "{request.text}"'
    )
