"""Configuration loader for content scoring system."""

import json
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field


class RenderPolicy(BaseModel):
    """How pages are rendered before parsing."""

    use_browser: bool = Field(default=True)
    timeout_ms: int = Field(default=30000, ge=1000)
    wait_until: str = Field(default="networkidle")
    max_concurrent_pages: int = Field(default=5, ge=1)
    blocked_resource_types: list[str] = Field(
        default_factory=lambda: ["font", "media"]
    )
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        )
    )


class RetryPolicy(BaseModel):
    """Retry configuration for transient render failures."""

    max_attempts: int = Field(default=3, ge=1)
    backoff_seconds: float = Field(default=2.0, ge=0)


class ValidatorConfig(BaseModel):
    """LLM validator configuration."""

    enabled: bool = Field(default=True)
    provider: str = Field(default="openai")
    model: str = Field(default="gpt-4o-mini")
    api_key_env: str = Field(default="OPENAI_API_KEY")
    base_url: Optional[str] = Field(default=None)
    temperature: float = Field(default=0.0, ge=0, le=2)
    max_tokens: int = Field(default=4000, ge=1)
    timeout_seconds: float = Field(default=60.0, gt=0)


class OutputConfig(BaseModel):
    """Output configuration."""

    storage_path: str = Field(default="./output/scans.jsonl")
    export_format: Optional[str] = Field(default="jsonl")


class Config(BaseModel):
    """Full system configuration."""

    scan_urls: list[str] = Field(default_factory=list)
    render_policy: RenderPolicy = Field(default_factory=RenderPolicy)
    validator: ValidatorConfig = Field(default_factory=ValidatorConfig)
    output_config: OutputConfig = Field(default_factory=OutputConfig)
    retry_policy: RetryPolicy = Field(default_factory=RetryPolicy)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load config from YAML file."""
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Load config from dictionary."""
        return cls(**data)


def load_config(path: str | Path) -> Config:
    """Load configuration from file (YAML or JSON)."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        content = f.read()

    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(content) or {}
    else:
        data = json.loads(content)

    return Config.from_dict(data)
