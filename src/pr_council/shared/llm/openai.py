"""OpenAI LLM 어댑터 구현."""

import os

from openai import OpenAI

from pr_council.shared.models import CompletionResult

from .base import BaseLLM


class OpenAILLM(BaseLLM):
    """OpenAI API를 사용하는 LLM 어댑터.

    환경변수 OPENAI_API_KEY에서 API 키를 로드합니다.
    """

    DEFAULT_MODEL = "gpt-4"
    API_KEY_ENV = "OPENAI_API_KEY"
    BASE_URL: str | None = None

    def __init__(
        self,
        model: str | None = None,
        api_key: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.3,
        base_url: str | None = None,
    ) -> None:
        """OpenAI LLM 초기화.

        Args:
            model: 사용할 모델명. 기본값은 DEFAULT_MODEL.
            api_key: API 키. None이면 환경변수에서 로드.
            max_tokens: 최대 응답 토큰 수. 기본값 4096.
            temperature: 생성 온도. 기본값 0.3.
            base_url: OpenAI 호환 엔드포인트 URL.

        Raises:
            ValueError: API 키가 설정되지 않은 경우.
        """
        self._api_key = api_key or os.environ.get(self.API_KEY_ENV)
        if not self._api_key:
            raise ValueError(
                f"API 키가 필요합니다. 환경변수 {self.API_KEY_ENV}를 설정하거나 "
                "api_key 파라미터를 전달하세요."
            )

        self._model = model or self.DEFAULT_MODEL
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._client = OpenAI(api_key=self._api_key, base_url=base_url or self.BASE_URL)

    def chat(self, messages: list[dict], **kwargs) -> CompletionResult:
        """대화 형식의 메시지에 대한 응답 생성.

        choices가 비어 있거나 내용이 없으면 had_result=False를 반환합니다.
        """
        temperature = kwargs.get("temperature", self._temperature)
        max_tokens = kwargs.get("max_tokens", self._max_tokens)

        response = self._client.chat.completions.create(
            model=self._model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )

        if not response.choices:
            return CompletionResult.empty()

        content = response.choices[0].message.content
        if content is None:
            return CompletionResult.empty()

        return CompletionResult(text=content.strip(), had_result=True)

    def get_model_name(self) -> str:
        """현재 사용 중인 모델 이름 반환."""
        return self._model
