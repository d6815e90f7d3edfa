# termlens/factory.py
from typing import Optional

from termlens.pipeline import AnalysisPipeline, WindowErrorPolicy
from termlens.processor.chunker.chunker import Chunker
from termlens.processor.chunker.models import ChunkConfig
from termlens.router.claude import ClaudeAdapter
from termlens.router.classifier import LLMClassifier
from termlens.router.config_loader import load_model_configs
from termlens.router.gemini import GeminiAdapter
from termlens.router.openai_adapter import OpenAIAdapter
from termlens.router.router import Router
from termlens.router.usage import UsageTracker
from termlens.scheduler import SequentialScheduler, ThreadPoolScheduler
from termlens.settings import AnalysisSettings, load_analysis_settings

_ADAPTERS = {
    "claude": ClaudeAdapter,
    "gemini": GeminiAdapter,
    "openai": OpenAIAdapter,
}


def build_pipeline(
    config_path:  Optional[str]  = None,
    chunk_size:   Optional[int]  = None,
    overlap_size: Optional[int]  = None,
    workers:      Optional[int]  = None,
    skip_failed:  Optional[bool] = None,
) -> AnalysisPipeline:
    """
    Ensambla el AnalysisPipeline con todas sus dependencias.
    Punto de entrada único para el CLI y los tests de integración.

    Los argumentos explícitos (flags del CLI) pisan la sección
    `analysis:` del config; lo que no se indique toma su default.
    """
    settings = _apply_overrides(
        load_analysis_settings(config_path),
        chunk_size   = chunk_size,
        overlap_size = overlap_size,
        workers      = workers,
        skip_failed  = skip_failed,
    )
    router = build_router(config_path)

    return AnalysisPipeline(
        classify        = LLMClassifier(router),
        chunker         = Chunker(ChunkConfig(settings.chunk_size, settings.overlap_size)),
        scheduler       = _build_scheduler(settings),
        on_window_error = settings.on_window_error,
    )


def build_router(config_path: Optional[str] = None) -> Router:
    return Router(_build_models(config_path))


def _build_models(config_path: Optional[str]) -> list:
    """
    Carga el config y construye los adaptadores disponibles.
    Si un adaptador no tiene api_key configurada, lo omite con aviso.
    """
    configs = load_model_configs(config_path)
    usage   = UsageTracker()
    models  = []

    for config in configs:
        adapter_class = _ADAPTERS.get(config.name)
        if not adapter_class:
            print(f"[termlens] ⚠ {config.name}: modelo desconocido, omitiendo")
            continue
        if not config.api_key:
            print(f"[termlens] ⚠ {config.name}: sin api_key, omitiendo")
            continue
        models.append(adapter_class(config, usage))

    if not models:
        raise RuntimeError(
            "Ningún modelo configurado. "
            "Revisa ~/.termlens/config.yaml y tus variables de entorno."
        )

    return models


def _build_scheduler(settings: AnalysisSettings):
    if settings.workers <= 1 and settings.window_timeout_seconds is None:
        return SequentialScheduler()
    # Un timeout por ventana solo se puede vigilar desde otro hilo
    return ThreadPoolScheduler(
        max_workers    = settings.workers,
        window_timeout = settings.window_timeout_seconds,
    )


def _apply_overrides(
    settings:     AnalysisSettings,
    chunk_size:   Optional[int],
    overlap_size: Optional[int],
    workers:      Optional[int],
    skip_failed:  Optional[bool],
) -> AnalysisSettings:
    if chunk_size is not None:
        settings.chunk_size = chunk_size
    if overlap_size is not None:
        settings.overlap_size = overlap_size
    if workers is not None:
        settings.workers = workers
    if skip_failed is not None:
        settings.on_window_error = WindowErrorPolicy.SKIP if skip_failed else WindowErrorPolicy.ABORT
    return settings
