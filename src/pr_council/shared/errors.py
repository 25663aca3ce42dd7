"""리뷰 파이프라인 에러 정의."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pr_council.review.budget import BudgetCheck


class ReviewError(Exception):
    """리뷰 파이프라인 에러 베이스."""

    kind = "review"


class ParseError(ReviewError):
    """diff의 chunk 헤더를 해석할 수 없음. 해당 파일에만 치명적."""

    kind = "parse"

    def __init__(self, message: str, line: str | None = None) -> None:
        super().__init__(message)
        self.line = line


class CompletionError(ReviewError):
    """완성 서비스가 쓸 수 있는 응답을 주지 않음."""

    kind = "completion"

    def __init__(self, role: str, message: str) -> None:
        super().__init__(f"[{role}] {message}")
        self.role = role


class BudgetExceededError(ReviewError):
    """조립된 대화가 모델의 토큰 한도를 넘어 전송하지 않음."""

    kind = "budget"

    def __init__(self, check: "BudgetCheck", role: str | None = None) -> None:
        super().__init__(
            f"토큰 한도 초과: {check.tokens} >= {check.limit} ({check.model})"
        )
        self.check = check
        self.role = role


class SerializationError(ReviewError):
    """리뷰 결과를 구조화 문서로 안전하게 인코딩할 수 없음. 배치 전체에 치명적."""

    kind = "serialization"


class ContextRetrievalError(ReviewError):
    """벡터 저장소에서 컨텍스트를 가져오지 못함. 해당 파일에만 치명적."""

    kind = "retrieval"
