# router/models.py
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ModelResponse:
    content:       str    # texto crudo devuelto por el modelo (se espera JSON)
    model_used:    str
    tokens_input:  int
    tokens_output: int


@dataclass
class ModelConfig:
    """
    Configuración de un modelo individual.
    Se carga desde ~/.termlens/config.yaml.
    """
    name:            str
    priority:        int
    token_budget:    Optional[int] = None   # None → sin límite en este proceso
    api_key:         Optional[str] = None
    timeout_seconds: int = 60
    temperature:     float = 0.3
    model:           Optional[str] = None   # None → modelo por defecto del adaptador

    # Control de cooldown temporal (no viene del YAML, es runtime)
    _unavailable_until: Optional[float] = field(
        default=None, compare=False, repr=False
    )
