# analyzer/merger.py
from termlens.analyzer.models import Term


def merge_terms(terms: list[Term]) -> list[Term]:
    """
    Deduplica términos de ventanas solapadas.

    - Clave: el término en minúsculas, coincidencia exacta.
    - Gana la confianza estrictamente mayor; en empate se queda el primero visto.
    - Orden final: position_start ascendente; los no resueltos al final,
      en el orden en que se descubrieron.
    """
    best: dict[str, Term] = {}

    for term in terms:
        key = term.term.lower()
        existing = best.get(key)
        if existing is None or term.confidence > existing.confidence:
            best[key] = term

    # dict conserva el orden de primera aparición de cada clave y sorted()
    # es estable: los no resueltos quedan en orden de descubrimiento
    return sorted(
        best.values(),
        key=lambda t: (not t.is_resolved, t.position_start or 0),
    )
