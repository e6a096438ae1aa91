"""Configuration loading and dataclasses for ChatBridge."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class LLMConfig:
    """Completion service configuration."""

    provider: str = "ollama"
    model: str = "gemma3"
    base_url: str | None = None  # provider default when unset
    api_key: str | None = None  # openai only; falls back to OPENAI_API_KEY
    temperature: float | None = None
    request_timeout: float = 60.0  # seconds, applies to request establishment
    system_prompt: str | None = None
    fake_responses: list[str] = field(default_factory=list)


@dataclass
class UIConfig:
    """Interactive terminal configuration."""

    buffer_size: int = 1024  # max bytes read from the reply stream per poll
    poll_interval: float = 0.05
    assistant_label: str = "Assistant"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"


@dataclass
class BridgeConfig:
    """Top-level configuration for ChatBridge."""

    mode: str = "batch"
    llm: LLMConfig = field(default_factory=LLMConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_config(config_path: str = "config/default.yaml") -> BridgeConfig:
    """
    Load ChatBridge configuration from YAML file.

    Args:
        config_path: Path to the configuration file.

    Returns:
        BridgeConfig with all settings loaded.
    """
    config_file = Path(config_path)

    if not config_file.exists():
        print(f"Warning: Config file not found: {config_path}, using defaults")
        return BridgeConfig()

    data = _load_yaml(config_file)

    # Parse LLM section
    llm_data = data.get("llm", {})
    llm_config = LLMConfig(
        provider=llm_data.get("provider", "ollama"),
        model=llm_data.get("model", "gemma3"),
        base_url=llm_data.get("base_url"),
        api_key=llm_data.get("api_key"),
        temperature=llm_data.get("temperature"),
        request_timeout=llm_data.get("request_timeout", 60.0),
        system_prompt=llm_data.get("system_prompt"),
        fake_responses=llm_data.get("fake_responses", []),
    )

    # Parse UI section
    ui_data = data.get("ui", {})
    ui_config = UIConfig(
        buffer_size=ui_data.get("buffer_size", 1024),
        poll_interval=ui_data.get("poll_interval", 0.05),
        assistant_label=ui_data.get("assistant_label", "Assistant"),
    )

    logging_data = data.get("logging", {})
    logging_config = LoggingConfig(level=logging_data.get("level", "INFO"))

    return BridgeConfig(
        mode=data.get("mode", "batch"),
        llm=llm_config,
        ui=ui_config,
        logging=logging_config,
    )
