"""토큰 예산 검사 모듈.

대화의 토큰 수를 모델별 한도와 비교해 전송 가능 여부만 판단합니다.
자르거나 파일을 빼는 등의 초과 처리 정책은 호출자가 결정합니다.

tiktoken이 모르는 모델(Groq, Anthropic 등)은 gpt-3.5-turbo 인코딩으로 토큰 수를
근사합니다. 이 경우 BudgetCheck.approximate가 True이고 로그에 남습니다.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

import tiktoken

from pr_council.shared.models import ChatMessage, TokenBudget

logger = logging.getLogger(__name__)

MODEL_TOKEN_LIMITS: dict[str, int] = {
    # Groq
    "mixtral-8x7b-32768": 32768,
    "gemma-7b-it": 32768,
    "llama3-70b-8192": 8192,
    "llama3-8b-8192": 8192,
    # OpenAI
    "gpt-3.5-turbo": 16385,
    "gpt-4": 8192,
    "gpt-4-turbo": 128000,
    "gpt-4o": 128000,
    "gpt-4o-mini": 128000,
    # Anthropic
    "claude-3-haiku-20240307": 200000,
    "claude-3-sonnet-20240229": 200000,
    "claude-3-opus-20240229": 200000,
}

FALLBACK_TOKENIZER_MODEL = "gpt-3.5-turbo"

# 메시지마다 붙는 채팅 포맷 토큰 수와 응답 시작 토큰 수
TOKENS_PER_MESSAGE = 3
TOKENS_PER_REPLY = 3


class Encoding(Protocol):
    """토큰 인코더 (tiktoken.Encoding과 호환)."""

    name: str

    def encode(self, text: str, **kwargs) -> list[int]: ...


@dataclass(frozen=True)
class Tokenizer:
    """모델에 사용할 토크나이저. approximate면 다른 모델의 인코딩을 빌려 쓴 것."""

    model: str
    encoding: Encoding
    reference_model: str
    approximate: bool

    def count(self, text: str) -> int:
        """텍스트 토큰 수."""
        return len(self.encoding.encode(text, disallowed_special=()))


@dataclass(frozen=True)
class BudgetCheck:
    """예산 검사 결과. fits일 때만 참으로 평가됩니다."""

    model: str
    tokens: int
    limit: int
    approximate: bool

    @property
    def fits(self) -> bool:
        """대화를 전송해도 되는지 여부."""
        return self.tokens < self.limit

    def __bool__(self) -> bool:
        return self.fits


def approximate_tokenizer(model: str) -> Tokenizer:
    """모델에 맞는 토크나이저 반환.

    tiktoken이 모델을 모르면 gpt-3.5-turbo 인코딩을 근사값으로 사용합니다.

    Args:
        model: 모델 식별자

    Returns:
        Tokenizer (근사 여부 포함)
    """
    try:
        encoding = tiktoken.encoding_for_model(model)
        return Tokenizer(
            model=model, encoding=encoding, reference_model=model, approximate=False
        )
    except KeyError:
        logger.warning(
            f"{model} 전용 토크나이저가 없어 {FALLBACK_TOKENIZER_MODEL} 인코딩으로 "
            "토큰 수를 근사합니다"
        )
        encoding = tiktoken.encoding_for_model(FALLBACK_TOKENIZER_MODEL)
        return Tokenizer(
            model=model,
            encoding=encoding,
            reference_model=FALLBACK_TOKENIZER_MODEL,
            approximate=True,
        )


def count_conversation_tokens(
    conversation: Sequence[ChatMessage], tokenizer: Tokenizer
) -> int:
    """채팅 포맷 오버헤드를 포함한 대화 전체 토큰 수."""
    tokens = TOKENS_PER_REPLY
    for message in conversation:
        tokens += TOKENS_PER_MESSAGE
        tokens += tokenizer.count(message.role.value)
        tokens += tokenizer.count(message.content)
    return tokens


class TokenBudgetEnforcer:
    """대화가 모델 토큰 한도 안에 드는지 검사하는 게이트.

    검사만 하며 대화를 자르지 않습니다. 같은 입력에는 항상 같은 결과를 냅니다.
    """

    def __init__(
        self,
        limits: Mapping[str, int] | None = None,
        tokenizer_factory: Callable[[str], Tokenizer] | None = None,
    ) -> None:
        """TokenBudgetEnforcer 초기화.

        Args:
            limits: 기본 한도에 추가/덮어쓸 모델별 토큰 한도
            tokenizer_factory: 모델 이름으로 Tokenizer를 만드는 함수.
                None이면 approximate_tokenizer 사용.
        """
        self._limits = {**MODEL_TOKEN_LIMITS, **(limits or {})}
        self._tokenizer_factory = tokenizer_factory or approximate_tokenizer
        self._tokenizers: dict[str, Tokenizer] = {}

    def budget_for(self, model: str) -> TokenBudget:
        """모델의 토큰 예산.

        Raises:
            ValueError: 한도가 정의되지 않은 모델인 경우
        """
        if model not in self._limits:
            raise ValueError(
                f"토큰 한도가 정의되지 않은 모델입니다: {model}. "
                "설정의 review.token_limits에 추가하세요."
            )
        return TokenBudget(model=model, limit=self._limits[model])

    def tokenizer_for(self, model: str) -> Tokenizer:
        """모델 토크나이저 (캐시)."""
        if model not in self._tokenizers:
            self._tokenizers[model] = self._tokenizer_factory(model)
        return self._tokenizers[model]

    def count(self, conversation: Sequence[ChatMessage], model: str) -> int:
        """대화의 토큰 수."""
        return count_conversation_tokens(conversation, self.tokenizer_for(model))

    def check(self, conversation: Sequence[ChatMessage], model: str) -> BudgetCheck:
        """대화가 모델 한도 안에 드는지 검사.

        Args:
            conversation: 조립된 대화
            model: 대상 모델

        Returns:
            BudgetCheck
        """
        budget = self.budget_for(model)
        tokenizer = self.tokenizer_for(model)
        tokens = count_conversation_tokens(conversation, tokenizer)
        check = BudgetCheck(
            model=model,
            tokens=tokens,
            limit=budget.limit,
            approximate=tokenizer.approximate,
        )

        logger.debug(
            f"토큰 예산 검사: {model} {tokens}/{budget.limit} "
            f"(fits={check.fits}, tokenizer={tokenizer.reference_model}"
            f"{', 근사' if tokenizer.approximate else ''})"
        )
        return check

    def fits(self, conversation: Sequence[ChatMessage], model: str) -> bool:
        """check()의 bool 버전."""
        return self.check(conversation, model).fits
