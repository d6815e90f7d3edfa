# termlens/router/response_parser.py
import json
import logging
import re
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

# ```json [...] ``` o ``` {...} ```
_FENCED_RE = re.compile(r"```(?:json)?\s*([\[{].*?[\]}])\s*```", re.DOTALL)

# Del primer '{' al último '}' (idem con corchetes)
_OBJECT_SPAN_RE = re.compile(r"\{.*\}", re.DOTALL)
_ARRAY_SPAN_RE  = re.compile(r"\[.*\]", re.DOTALL)


class ParseError(ValueError):
    """
    El modelo respondió, pero el contenido no es JSON estructurado
    o no tiene ninguna de las formas reconocidas.
    """
    pass


def _whole(text: str) -> list[str]:
    return [text]


def _fenced(text: str) -> list[str]:
    return [m.group(1) for m in _FENCED_RE.finditer(text)]


def _embedded(text: str) -> list[str]:
    # El que abre antes es el contenedor exterior
    matches = [m for m in (_OBJECT_SPAN_RE.search(text), _ARRAY_SPAN_RE.search(text)) if m]
    return [m.group(0) for m in sorted(matches, key=lambda m: m.start())]


# Estrategias en orden: (nombre, extractor de candidatos, aviso si hace falta)
_STRATEGIES: list[tuple[str, Callable[[str], list[str]], Optional[str]]] = [
    ("directo",  _whole,    None),
    ("markdown", _fenced,   "%s envolvió el JSON en markdown — considera reforzar el prompt"),
    ("embebido", _embedded, "%s devolvió JSON con texto extra alrededor"),
]


def parse_json_payload(raw_text: Optional[str], model_name: str = "classifier") -> Any:
    """
    Decodifica la respuesta del modelo con degradación progresiva:
    JSON directo, luego bloque markdown, luego el primer objeto/array
    que aparezca en texto libre.

    Solo acepta dicts o listas. No hay recuperación de emergencia: si
    nada decodifica se lanza ParseError y quien llama decide qué hacer
    con la ventana.
    """
    if raw_text is None or not raw_text.strip():
        raise ParseError(f"{model_name} devolvió una respuesta vacía")

    text = raw_text.strip()

    for name, extract, warning in _STRATEGIES:
        for candidate in extract(text):
            payload = _decode(candidate)
            if payload is None:
                continue
            if warning:
                logger.warning(warning, model_name)
            logger.debug("Respuesta de %s decodificada (%s)", model_name, name)
            return payload

    preview = text[:120].replace("\n", " ")
    raise ParseError(f"{model_name} devolvió una respuesta no parseable: {preview!r}")


def _decode(text: str) -> Optional[Any]:
    try:
        data = json.loads(text)
    except ValueError:
        return None
    return data if isinstance(data, (dict, list)) else None
