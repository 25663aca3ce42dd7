"""Pytest configuration and shared fixtures."""

from collections.abc import Callable

import pytest

from pr_council.review.budget import TokenBudgetEnforcer, Tokenizer
from pr_council.shared.models import CompletionResult, PRFile


class WhitespaceEncoding:
    """공백 기준으로 토큰을 세는 테스트용 인코딩 (네트워크 불필요)."""

    name = "whitespace"

    def encode(self, text: str, **kwargs) -> list[int]:
        return [0] * len(text.split())


@pytest.fixture
def tokenizer_factory() -> Callable[[str], Tokenizer]:
    """WhitespaceEncoding을 쓰는 토크나이저 팩토리."""

    def factory(model: str) -> Tokenizer:
        return Tokenizer(
            model=model,
            encoding=WhitespaceEncoding(),
            reference_model=model,
            approximate=False,
        )

    return factory


@pytest.fixture
def budget(tokenizer_factory) -> TokenBudgetEnforcer:
    """테스트용 토큰 예산 검사기."""
    return TokenBudgetEnforcer(tokenizer_factory=tokenizer_factory)


@pytest.fixture
def mock_llm(mocker):
    """빈 제안 목록을 돌려주는 Mock LLM."""
    mock = mocker.MagicMock()
    mock.get_model_name.return_value = "gpt-4"
    mock.chat.return_value = CompletionResult(text="[]", had_result=True)
    return mock


@pytest.fixture
def sample_file() -> PRFile:
    """원본 내용이 없는 (raw 전략) 샘플 파일."""
    return PRFile(
        filename="src/app.py",
        patch="@@ -1,3 +1,3 @@\n import os\n-x = 1\n+x = 2\n print(x)",
    )


@pytest.fixture
def sample_config() -> dict:
    """Sample configuration for testing."""
    return {
        "llm": {
            "provider": "groq",
            "model": "llama3-70b-8192",
            "api_key_env": "GROQ_API_KEY",
            "max_tokens": 2048,
            "temperature": 0.2,
        },
        "review": {
            "roles": ["syntax", "style"],
            "parallel": False,
            "context_lines": 5,
            "token_limits": {"my-model": 4096},
        },
        "output": {
            "default_format": "json",
        },
    }
