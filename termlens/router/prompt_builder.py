# router/prompt_builder.py

_CLASSIFY_SYSTEM = """\
    You are an expert academic text analyzer specializing in identifying
    ambiguous terminology across disciplines.

    --- TASK ---
    Identify ALL words or short phrases in the text you receive that may have
    multiple meanings across different academic fields.

    For each ambiguous term, provide:
    1. The term itself, copied EXACTLY as it appears in the text
    2. A brief context snippet ({context_words} words) showing where it appears
    3. At least {min_meanings} possible meanings from different academic fields
    4. Your best guess at the intended meaning in this context
    5. A confidence score (integer 0-100) for your interpretation

    --- OUTPUT FORMAT (STRICT) ---
    Return EXACTLY one valid JSON object and nothing else.
    No markdown. No ```json fences. No extra commentary.

    {{
      "terms": [
        {{
          "term": "string",
          "context": "string",
          "possible_meanings": [
            {{"field": "string", "definition": "string"}}
          ],
          "likely_intended_meaning": "string",
          "confidence": 0
        }}
      ]
    }}

    If the text has no ambiguous terms, return {{"terms": []}}.
    """

_CONTEXT_WORDS_DEFAULT = "20-30"
_MIN_MEANINGS_DEFAULT  = 2


def build_classify_prompt(
    min_meanings:  int = _MIN_MEANINGS_DEFAULT,
    context_words: str = _CONTEXT_WORDS_DEFAULT,
) -> str:
    """
    Construye el system prompt del clasificador de términos.

    La ventana a analizar NO va aquí: viaja como mensaje de usuario
    en la llamada al modelo. Esto mantiene separadas las instrucciones
    del contenido y mejora la adherencia al formato en todos los modelos.
    """
    if min_meanings < 2:
        raise ValueError("Un término ambiguo necesita al menos 2 significados")

    return _CLASSIFY_SYSTEM.format(
        min_meanings  = min_meanings,
        context_words = context_words or _CONTEXT_WORDS_DEFAULT,
    )


def build_window_message(window_text: str) -> str:
    """Mensaje de usuario: solo el texto delimitado, sin instrucciones."""
    return f"Text to analyze:\n<text>\n{window_text}\n</text>"
