from termlens.analyzer.chunk_analyzer import ChunkAnalyzer, WindowAnalysis
from termlens.analyzer.locator import locate
from termlens.analyzer.merger import merge_terms
from termlens.analyzer.models import PossibleMeaning, Span, Term, TermCandidate
from termlens.analyzer.normalizer import PayloadShape, normalize_payload

__all__ = [
    "ChunkAnalyzer",
    "WindowAnalysis",
    "locate",
    "merge_terms",
    "normalize_payload",
    "PayloadShape",
    "PossibleMeaning",
    "Span",
    "Term",
    "TermCandidate",
]
