# termlens/processor/sanitizer.py
import re

# Controles ASCII salvo \t (0x09), \n (0x0A) y \r (0x0D)
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_WHITESPACE_RE    = re.compile(r"\s+")


def sanitize_text(text: str) -> str:
    """
    Elimina bytes nulos y caracteres de control, y colapsa todo el
    espacio en blanco a un único espacio.
    """
    if not text:
        return ""
    cleaned = _CONTROL_CHARS_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def sanitize_text_preserve_formatting(text: str) -> str:
    """Igual que sanitize_text pero conserva saltos de línea y tabulaciones."""
    if not text:
        return ""
    return _CONTROL_CHARS_RE.sub("", text).strip()
