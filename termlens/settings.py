# termlens/settings.py
from dataclasses import dataclass
from typing import Optional

from termlens.pipeline import WindowErrorPolicy
from termlens.router.config_loader import ConfigError, read_config


@dataclass
class AnalysisSettings:
    """
    Sección `analysis:` del config. Todo tiene default: el config
    puede no traer la sección o no existir.
    """
    chunk_size:             int = 3000
    overlap_size:           int = 200
    workers:                int = 1
    window_timeout_seconds: Optional[float] = None
    on_window_error:        WindowErrorPolicy = WindowErrorPolicy.ABORT


def load_analysis_settings(config_path: Optional[str] = None) -> AnalysisSettings:
    raw = read_config(config_path, required=False).get("analysis") or {}
    if not isinstance(raw, dict):
        raise ConfigError("La sección 'analysis' debe ser un mapeo")

    defaults = AnalysisSettings()

    policy_value = raw.get("on_window_error", defaults.on_window_error.value)
    try:
        policy = WindowErrorPolicy(str(policy_value).lower())
    except ValueError as e:
        raise ConfigError(
            f"on_window_error inválido: {policy_value!r} (usa 'abort' o 'skip')"
        ) from e

    timeout = raw.get("window_timeout_seconds", defaults.window_timeout_seconds)
    if timeout is not None and (not isinstance(timeout, (int, float)) or timeout <= 0):
        raise ConfigError("window_timeout_seconds debe ser un número positivo")

    return AnalysisSettings(
        chunk_size             = _positive_int(raw, "chunk_size", defaults.chunk_size),
        overlap_size           = _positive_int(raw, "overlap_size", defaults.overlap_size),
        workers                = _positive_int(raw, "workers", defaults.workers),
        window_timeout_seconds = timeout,
        on_window_error        = policy,
    )


def _positive_int(raw: dict, key: str, default: int) -> int:
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{key} debe ser un entero positivo, recibido: {value!r}")
    return value
