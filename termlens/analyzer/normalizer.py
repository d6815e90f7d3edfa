# analyzer/normalizer.py
import logging
import math
from enum import Enum
from typing import Any, Optional

from termlens.analyzer.models import PossibleMeaning, TermCandidate
from termlens.processor.chunker.models import Window
from termlens.processor.sanitizer import sanitize_text
from termlens.router.response_parser import ParseError, parse_json_payload

logger = logging.getLogger(__name__)


class PayloadShape(Enum):
    """Formas de respuesta que aceptamos, en orden de preferencia."""
    RECORD_LIST   = "record_list"     # [ {...}, {...} ]
    WRAPPED_LIST  = "wrapped_list"    # { "terms": [ {...} ] }
    SINGLE_RECORD = "single_record"   # { "term": "...", ... }


# Claves contenedoras conocidas, se prueban antes que cualquier otra lista
_CONTAINER_KEYS = (
    "terms",
    "ambiguous_terms",
    "ambiguousTerms",
    "results",
    "items",
)

# Alias aceptados por campo, en orden de preferencia.
# El primero presente (y no nulo) gana.
_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "term":                    ("term", "word", "phrase"),
    "context":                 ("context", "snippet", "context_snippet"),
    "possible_meanings":       ("possible_meanings", "possibleMeanings", "meanings"),
    "likely_intended_meaning": (
        "likely_intended_meaning",
        "likelyIntendedMeaning",
        "likely_meaning",
        "intended_meaning",
    ),
    "confidence":              ("confidence", "confidence_score", "score"),
}

_MEANING_ALIASES: dict[str, tuple[str, ...]] = {
    "field":      ("field", "discipline", "domain", "area"),
    "definition": ("definition", "meaning", "description"),
}


def normalize_payload(raw: Any, window: Optional[Window] = None) -> list[TermCandidate]:
    """
    Convierte la salida cruda del clasificador en candidatos canónicos.

    `raw` puede ser el texto devuelto por el modelo o un valor ya
    decodificado (dict/list). La ventana solo se usa para diagnósticos:
    las posiciones las resuelve el locator.

    Raises:
        ParseError: si el payload no es JSON o no tiene ninguna forma reconocida.
    """
    where = f"ventana {window.index}" if window is not None else "clasificador"

    if isinstance(raw, (str, bytes)):
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="replace")
        payload = parse_json_payload(raw, where)
    else:
        payload = raw

    shape, records = detect_shape(payload)
    logger.debug("Payload de %s reconocido como %s (%d registros)", where, shape.value, len(records))

    candidates: list[TermCandidate] = []
    for position, record in enumerate(records):
        if not isinstance(record, dict):
            logger.debug("Registro %d de %s ignorado: no es un objeto", position, where)
            continue
        candidates.append(_to_candidate(record))
    return candidates


def detect_shape(payload: Any) -> tuple[PayloadShape, list]:
    """
    Decide la forma del payload y devuelve los registros que contiene.
    Raises ParseError si no encaja en ninguna forma.
    """
    if isinstance(payload, list):
        return PayloadShape.RECORD_LIST, payload

    if not isinstance(payload, dict):
        raise ParseError(f"Payload de tipo {type(payload).__name__} no reconocido")

    for key in _CONTAINER_KEYS:
        value = payload.get(key)
        if isinstance(value, list):
            return PayloadShape.WRAPPED_LIST, value

    # Un registro suelto también contiene listas (possible_meanings):
    # se reconoce antes de buscar contenedores con nombre desconocido
    if _has_any(payload, _FIELD_ALIASES["term"]):
        return PayloadShape.SINGLE_RECORD, [payload]

    for key, value in payload.items():
        if isinstance(value, list) and _looks_like_records(value):
            logger.info("Lista de términos encontrada bajo la clave no estándar '%s'", key)
            return PayloadShape.WRAPPED_LIST, value

    keys = ", ".join(sorted(str(k) for k in payload)) or "(vacío)"
    raise ParseError(f"Objeto sin lista de términos ni campo 'term'. Claves: {keys}")


# ------------------------------------------------------------------
# Mapeo de campos
# ------------------------------------------------------------------

def _to_candidate(record: dict) -> TermCandidate:
    return TermCandidate(
        term                    = _as_text(_pick(record, _FIELD_ALIASES["term"])),
        context                 = sanitize_text(_as_text(_pick(record, _FIELD_ALIASES["context"]))),
        possible_meanings       = _as_meanings(_pick(record, _FIELD_ALIASES["possible_meanings"])),
        likely_intended_meaning = _as_text(_pick(record, _FIELD_ALIASES["likely_intended_meaning"])),
        confidence              = _as_confidence(_pick(record, _FIELD_ALIASES["confidence"])),
    )


def _pick(record: dict, aliases: tuple[str, ...]) -> Any:
    for alias in aliases:
        value = record.get(alias)
        if value is not None:
            return value
    return None


def _has_any(record: dict, aliases: tuple[str, ...]) -> bool:
    return any(alias in record for alias in aliases)


def _looks_like_records(values: list) -> bool:
    return bool(values) and any(
        isinstance(v, dict) and _has_any(v, _FIELD_ALIASES["term"]) for v in values
    )


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _as_meanings(value: Any) -> list[PossibleMeaning]:
    if not isinstance(value, list):
        return []

    meanings: list[PossibleMeaning] = []
    for item in value:
        if not isinstance(item, dict):
            continue
        field_label = _as_text(_pick(item, _MEANING_ALIASES["field"]))
        if not field_label:
            continue
        meanings.append(PossibleMeaning(
            field      = field_label,
            definition = _as_text(_pick(item, _MEANING_ALIASES["definition"])),
        ))
    return meanings


def _as_confidence(value: Any) -> int:
    """Entero en [0, 100]. Ausente o no numérico → 0."""
    if isinstance(value, bool) or value is None:
        return 0

    if isinstance(value, str):
        try:
            value = float(value.strip().rstrip("%"))
        except ValueError:
            return 0

    if not isinstance(value, (int, float)) or math.isnan(value):
        return 0

    if math.isinf(value):
        return 100 if value > 0 else 0

    return max(0, min(100, int(round(value))))
