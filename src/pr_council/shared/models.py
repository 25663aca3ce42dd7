"""공통 데이터 모델 정의."""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pr_council.shared.errors import ReviewError

# ============================================================
# 공통 Enum
# ============================================================


class MessageRole(Enum):
    """대화 메시지 역할."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class PatchStrategy(Enum):
    """패치 렌더링 전략."""

    RAW = "raw"
    CONTEXT = "context"


class OutputFormat(Enum):
    """출력 형식."""

    CONSOLE = "console"
    JSON = "json"
    XML = "xml"


# ============================================================
# PR 입력 모델
# ============================================================


@dataclass(frozen=True)
class PRFile:
    """PR에서 변경된 파일 하나.

    patch는 unified diff 텍스트이며, old_contents가 없으면 (새 파일이거나
    원본을 가져올 수 없는 경우) raw 전략으로 렌더링됩니다.
    """

    filename: str
    patch: str
    old_contents: str | None = None
    new_contents: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PRFile":
        """딕셔너리(JSON 입력)에서 PRFile 생성."""
        return cls(
            filename=data["filename"],
            patch=data.get("patch") or "",
            old_contents=data.get("old_contents"),
            new_contents=data.get("new_contents"),
        )


@dataclass
class DiffHunk:
    """Diff hunk (변경 블록)."""

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: list[str] = field(default_factory=list)


# ============================================================
# 대화 / 외부 서비스 경계 모델
# ============================================================


@dataclass(frozen=True)
class ChatMessage:
    """대화 메시지. 순서가 있는 리스트가 하나의 Conversation이 됩니다."""

    role: MessageRole
    content: str

    def to_dict(self) -> dict[str, str]:
        """LLM 클라이언트에 전달할 딕셔너리로 변환."""
        return {"role": self.role.value, "content": self.content}


@dataclass(frozen=True)
class CompletionResult:
    """텍스트 완성 서비스 응답."""

    text: str
    had_result: bool

    @classmethod
    def empty(cls) -> "CompletionResult":
        """유효한 응답이 없는 결과."""
        return cls(text="", had_result=False)


@dataclass(frozen=True)
class SimilarityMatch:
    """벡터 저장소 검색 결과."""

    id: str
    score: float
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TokenBudget:
    """모델별 최대 토큰 수."""

    model: str
    limit: int


# ============================================================
# 리뷰 관련 모델
# ============================================================


@dataclass
class ReviewFinding:
    """역할 하나가 파일 하나에 대해 낸 제안."""

    type: str
    suggestion: str


@dataclass
class FileReview:
    """파일별 종합 리뷰."""

    filename: str
    reviews: list[ReviewFinding] = field(default_factory=list)


@dataclass
class FileReviewOutcome:
    """파일 하나의 리뷰 결과 (성공 또는 실패)."""

    filename: str
    review: FileReview | None = None
    error: "ReviewError | None" = None

    @property
    def succeeded(self) -> bool:
        """리뷰가 성공했는지 여부."""
        return self.error is None and self.review is not None


@dataclass
class BatchReviewResult:
    """여러 파일 리뷰 결과. outcomes는 입력 파일 순서를 따릅니다."""

    outcomes: list[FileReviewOutcome] = field(default_factory=list)

    @property
    def reviews(self) -> list[FileReview]:
        """성공한 파일 리뷰 목록."""
        return [o.review for o in self.outcomes if o.succeeded and o.review]

    @property
    def failures(self) -> list[FileReviewOutcome]:
        """실패한 파일 목록."""
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def succeeded(self) -> bool:
        """모든 파일이 성공했는지 여부."""
        return not self.failures

    @property
    def total_findings(self) -> int:
        """전체 제안 수."""
        return sum(len(r.reviews) for r in self.reviews)
