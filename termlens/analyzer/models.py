# analyzer/models.py
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class PossibleMeaning:
    field:      str   # disciplina académica, nunca vacía
    definition: str


@dataclass
class TermCandidate:
    """
    Término tal como lo propone el clasificador para una ventana.
    Todavía sin posiciones: eso lo resuelve el locator.
    """
    term:                    str
    context:                 str = ""
    possible_meanings:       list[PossibleMeaning] = field(default_factory=list)
    likely_intended_meaning: str = ""
    confidence:              int = 0


@dataclass(frozen=True)
class Span:
    """Posición absoluta [start, end) dentro del documento."""
    start: int
    end:   int


@dataclass
class Term:
    """
    Registro canónico de un término ambiguo, con posiciones absolutas.

    position_start/position_end son None cuando el término no aparece
    literalmente en su ventana (span no resuelto). Nunca se inventa
    un offset.
    """
    term:                    str
    context:                 str
    position_start:          Optional[int]
    position_end:            Optional[int]
    possible_meanings:       list[PossibleMeaning] = field(default_factory=list)
    likely_intended_meaning: str = ""
    confidence:              int = 0
    window_index:            int = 0

    @property
    def is_resolved(self) -> bool:
        return self.position_start is not None

    @classmethod
    def from_candidate(
        cls,
        candidate:    TermCandidate,
        span:         Optional[Span],
        window_index: int,
    ) -> "Term":
        return cls(
            term                    = candidate.term,
            context                 = candidate.context,
            position_start          = span.start if span else None,
            position_end            = span.end if span else None,
            possible_meanings       = list(candidate.possible_meanings),
            likely_intended_meaning = candidate.likely_intended_meaning,
            confidence              = candidate.confidence,
            window_index            = window_index,
        )

    def to_dict(self) -> dict:
        return {
            "term":                    self.term,
            "context":                 self.context,
            "position_start":          self.position_start,
            "position_end":            self.position_end,
            "resolved":                self.is_resolved,
            "possible_meanings": [
                {"field": m.field, "definition": m.definition}
                for m in self.possible_meanings
            ],
            "likely_intended_meaning": self.likely_intended_meaning,
            "confidence":              self.confidence,
            "window_index":            self.window_index,
        }
