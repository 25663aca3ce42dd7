"""Configuration management - YAML 설정 로더 및 스키마."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAMES = (".pr-council.yaml", ".pr-council.yml")


@dataclass
class LLMConfig:
    """LLM 설정."""

    provider: str = "openai"
    model: str = "gpt-4"
    api_key_env: str = "OPENAI_API_KEY"
    max_tokens: int = 4096
    temperature: float = 0.3


@dataclass
class ReviewConfig:
    """리뷰 설정."""

    roles: list[str] = field(
        default_factory=lambda: ["syntax", "dependency", "style"]
    )
    parallel: bool = True
    context_lines: int = 3
    token_limits: dict[str, int] = field(default_factory=dict)


@dataclass
class OutputConfig:
    """출력 설정."""

    default_format: str = "xml"


@dataclass
class AppConfig:
    """애플리케이션 전체 설정."""

    llm: LLMConfig = field(default_factory=LLMConfig)
    review: ReviewConfig = field(default_factory=ReviewConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def _dict_to_config(data: dict[str, Any]) -> AppConfig:
    """딕셔너리를 AppConfig로 변환."""
    return AppConfig(
        llm=LLMConfig(**data.get("llm", {})),
        review=ReviewConfig(**data.get("review", {})),
        output=OutputConfig(**data.get("output", {})),
    )


def _search_paths() -> list[Path]:
    return [Path.cwd() / name for name in CONFIG_FILENAMES] + [
        get_global_config_path()
    ]


def load_config(config_path: Path | None = None) -> AppConfig:
    """설정 파일 로드.

    Args:
        config_path: 설정 파일 경로. None이면 기본 경로 탐색.

    Returns:
        AppConfig 인스턴스
    """
    # 설정 파일 탐색 순서
    search_paths = [config_path, *_search_paths()]

    for path in search_paths:
        if path and path.exists():
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            return _dict_to_config(data)

    # 설정 파일 없으면 기본값 사용
    return AppConfig()


def get_config_path() -> Path | None:
    """현재 사용 중인 설정 파일 경로 반환."""
    for path in _search_paths():
        if path.exists():
            return path

    return None


def get_global_config_path() -> Path:
    """전역 설정 파일 경로 반환."""
    return Path.home() / ".config" / "pr-council" / "config.yaml"
