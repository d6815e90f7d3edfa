# router/config_loader.py
import os
from pathlib import Path
from typing import Optional

import yaml

from termlens.router.models import ModelConfig

_DEFAULT_CONFIG_PATH = Path.home() / ".termlens" / "config.yaml"

SUPPORTED_MODELS = ("claude", "gemini", "openai")


class ConfigError(ValueError):
    """El YAML existe pero su contenido no es válido."""
    pass


def resolve_config_path(config_path: Optional[str] = None) -> Path:
    return Path(config_path or os.environ.get("TERMLENS_CONFIG_PATH") or _DEFAULT_CONFIG_PATH)


def read_config(config_path: Optional[str] = None, required: bool = True) -> dict:
    """
    Lee el YAML de configuración como dict.
    Si no existe y no es obligatorio devuelve {}.
    """
    path = resolve_config_path(config_path)

    if not path.exists():
        if not required:
            return {}
        raise FileNotFoundError(
            f"Config no encontrada en {path}. "
            f"Copia config.example.yaml a ~/.termlens/config.yaml"
        )

    with path.open(encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"YAML inválido en {path}: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"El config {path} debe ser un mapeo en la raíz")
    return raw


def load_model_configs(config_path: Optional[str] = None) -> list[ModelConfig]:
    """
    Carga la configuración de modelos desde YAML.
    Resuelve variables de entorno en los api_key (${VAR}).
    Devuelve la lista ordenada por prioridad ascendente.
    """
    raw = read_config(config_path)

    configs = []
    for entry in raw.get("models") or []:
        if not isinstance(entry, dict) or "name" not in entry:
            raise ConfigError(f"Entrada de modelo sin 'name': {entry!r}")

        token_budget = entry.get("token_budget")
        if token_budget is not None and (not isinstance(token_budget, int) or token_budget <= 0):
            raise ConfigError(f"{entry['name']}: token_budget debe ser un entero positivo")

        api_key = entry.get("api_key")
        if api_key is not None and not isinstance(api_key, str):
            raise ConfigError(f"{entry['name']}: api_key debe ser texto o ${{VARIABLE}}, recibido: {api_key!r}")

        configs.append(ModelConfig(
            name            = entry["name"],
            priority        = entry.get("priority", 99),
            token_budget    = token_budget,
            api_key         = _resolve_env(api_key),
            timeout_seconds = entry.get("timeout_seconds", 60),
            temperature     = entry.get("temperature", 0.3),
            model           = entry.get("model"),
        ))

    return sorted(configs, key=lambda c: c.priority)


def _resolve_env(value: Optional[str]) -> Optional[str]:
    """Expande ${VAR_NAME} desde el entorno."""
    if not value or not value.startswith("${"):
        return value
    var_name = value.strip("${}").strip()
    return os.environ.get(var_name)
