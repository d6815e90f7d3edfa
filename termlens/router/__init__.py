from termlens.router.router import Router, AllModelsExhaustedError, ClassifierCallError
from termlens.router.base import BaseModel
from termlens.router.classifier import LLMClassifier
from termlens.router.models import ModelResponse, ModelConfig
from termlens.router.prompt_builder import build_classify_prompt
from termlens.router.config_loader import load_model_configs, ConfigError
from termlens.router.response_parser import ParseError

__all__ = [
    "Router",
    "AllModelsExhaustedError",
    "ClassifierCallError",
    "BaseModel",
    "LLMClassifier",
    "ModelResponse",
    "ModelConfig",
    "build_classify_prompt",
    "load_model_configs",
    "ConfigError",
    "ParseError",
]
