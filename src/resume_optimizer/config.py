"""Application configuration loaded from config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass(frozen=True)
class LLMConfig:
    optimize_model: str = "claude-sonnet-4-5-20250929"
    adjust_model: str = "claude-haiku-4-5-20251001"
    convert_model: str = "claude-sonnet-4-5-20250929"
    max_tokens: int = 8192
    temperature: float = 0.2
    max_retries: int = 3
    timeout: int = 60

    def __post_init__(self) -> None:
        if self.timeout < 1:
            raise ValueError(f"llm.timeout must be >= 1, got {self.timeout}")
        if self.max_retries < 1:
            raise ValueError(f"llm.max_retries must be >= 1, got {self.max_retries}")
        if not 0.0 <= self.temperature <= 1.0:
            raise ValueError(f"llm.temperature must be between 0 and 1, got {self.temperature}")


@dataclass(frozen=True)
class PromptConfig:
    # empty string keeps the built-in system prompt
    optimization_prompt: str = ""
    adjustment_prompt: str = ""
    conversion_prompt: str = ""


@dataclass(frozen=True)
class DiffConfig:
    separator: str = " › "
    max_visible: int = 50

    def __post_init__(self) -> None:
        if self.max_visible < 1:
            raise ValueError(f"diff.max_visible must be >= 1, got {self.max_visible}")


@dataclass(frozen=True)
class StorageConfig:
    db_path: str = "~/.resume-optimizer/workspace.db"

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    prompts: PromptConfig = field(default_factory=PromptConfig)
    diff: DiffConfig = field(default_factory=DiffConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        # Look for config.yaml relative to the project root
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}

    return AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        prompts=PromptConfig(**raw.get("prompts", {})),
        diff=DiffConfig(**raw.get("diff", {})),
        storage=StorageConfig(**raw.get("storage", {})),
    )
