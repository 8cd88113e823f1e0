from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    e2b_api_key: str = ""
    llm_api_key: str = ""
    promptlayer_api_key: str = ""
    llm_base_url: str = "https://openrouter.ai/api/v1"
    llm_model: str = "google/gemini-2.0-flash-001"
    llm_timeout_sec: float = 120.0
    llm_max_attempts: int = 1

    # Agent loop
    max_iterations: int = 20
    max_sub_steps: int = 5
    completion_phrases: list[str] = ["task completed", "done", "finished"]
    default_task: str = "Open Firefox browser and navigate to https://news.ycombinator.com"

    # Sandbox display
    screen_width: int = 1920
    screen_height: int = 1080
    screen_dpi: int = 96

    log_level: str = "WARNING"


settings = Settings()


@dataclass
class ModelConfig:
    model: str = ""
    temperature: float | None = None
    max_tokens: int | None = None
    base_url: str = ""


_models_config_cache: dict | None = None


def _load_models_yaml() -> dict:
    global _models_config_cache
    if _models_config_cache is not None:
        return _models_config_cache

    config_path = os.environ.get("MODELS_CONFIG_PATH", "models.yaml")
    path = Path(config_path)
    if not path.is_file():
        _models_config_cache = {}
        return _models_config_cache

    import yaml

    with open(path) as f:
        _models_config_cache = yaml.safe_load(f) or {}
    return _models_config_cache


def get_model_config(agent_name: str = "") -> ModelConfig:
    """Get model config for an agent, merging default + agent override.

    Falls back to Settings env variables if models.yaml doesn't exist.
    """
    data = _load_models_yaml()
    merged = {
        "model": settings.llm_model,
        "temperature": None,
        "max_tokens": None,
        "base_url": settings.llm_base_url,
    }
    if not data:
        return ModelConfig(**merged)

    sections = [data.get("default", {})]
    if agent_name:
        sections.append(data.get("agents", {}).get(agent_name, {}))

    for section in sections:
        for key, value in section.items():
            if key in merged:
                merged[key] = value

    return ModelConfig(**merged)
