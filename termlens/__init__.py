# termlens/__init__.py
from termlens.analyzer.models import PossibleMeaning, Term
from termlens.pipeline import AnalysisPipeline, AnalysisResult, analyze_text

__version__ = "0.1.0"

__all__ = [
    "AnalysisPipeline",
    "AnalysisResult",
    "PossibleMeaning",
    "Term",
    "analyze_text",
]
