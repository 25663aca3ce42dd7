"""Groq LLM 어댑터 (OpenAI 호환 엔드포인트)."""

from .openai import OpenAILLM


class GroqLLM(OpenAILLM):
    """Groq의 OpenAI 호환 API를 사용하는 LLM 어댑터.

    환경변수 GROQ_API_KEY에서 API 키를 로드합니다.
    """

    DEFAULT_MODEL = "llama3-70b-8192"
    API_KEY_ENV = "GROQ_API_KEY"
    BASE_URL = "https://api.groq.com/openai/v1"
