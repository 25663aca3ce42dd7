"""LLM adapters - 텍스트 완성 서비스 어댑터."""

from .anthropic import AnthropicLLM
from .base import BaseLLM
from .groq import GroqLLM
from .openai import OpenAILLM

__all__ = ["BaseLLM", "OpenAILLM", "GroqLLM", "AnthropicLLM", "get_llm"]

_PROVIDERS: dict[str, type[BaseLLM]] = {
    "openai": OpenAILLM,
    "groq": GroqLLM,
    "anthropic": AnthropicLLM,
}


def get_llm(provider: str = "openai", model: str | None = None, **kwargs) -> BaseLLM:
    """설정에 따라 적절한 LLM 인스턴스 반환.

    Args:
        provider: LLM 제공자. "openai", "groq" 또는 "anthropic".
        model: 사용할 모델명. None이면 제공자별 기본값 사용.
        **kwargs: LLM 생성에 전달할 추가 파라미터
            (api_key, max_tokens, temperature 등)

    Returns:
        BaseLLM 인스턴스

    Raises:
        ValueError: 지원하지 않는 제공자인 경우.

    Examples:
        >>> llm = get_llm("openai")
        >>> llm = get_llm("groq", model="llama3-8b-8192")
        >>> llm = get_llm("anthropic", temperature=0.7, max_tokens=2048)
    """
    provider = provider.lower()

    if provider not in _PROVIDERS:
        available = ", ".join(sorted(_PROVIDERS))
        raise ValueError(
            f"지원하지 않는 LLM 제공자입니다: {provider}. 사용 가능한 제공자: {available}"
        )

    return _PROVIDERS[provider](model=model, **kwargs)
