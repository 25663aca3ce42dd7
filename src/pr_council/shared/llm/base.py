"""LLM 추상 베이스 클래스."""

from abc import ABC, abstractmethod

from pr_council.shared.models import CompletionResult


class BaseLLM(ABC):
    """텍스트 완성 서비스 어댑터의 추상 베이스 클래스.

    재시도, 속도 제한, 인증은 구현체(SDK 클라이언트)의 책임입니다.
    """

    @abstractmethod
    def chat(self, messages: list[dict], **kwargs) -> CompletionResult:
        """대화 형식의 메시지에 대한 최선의 응답 하나를 생성.

        Args:
            messages: 대화 메시지 목록
                각 메시지는 {"role": "user|assistant|system", "content": "..."} 형식
            **kwargs: 추가 파라미터 (temperature, max_tokens 등)

        Returns:
            CompletionResult. 유효한 응답이 없으면 had_result=False.
        """
        ...

    @abstractmethod
    def get_model_name(self) -> str:
        """현재 사용 중인 모델 이름 반환."""
        ...

    def complete(self, prompt: str, **kwargs) -> CompletionResult:
        """단일 프롬프트에 대한 완성 응답 생성. 내부적으로 chat()을 사용합니다."""
        return self.chat([{"role": "user", "content": prompt}], **kwargs)
