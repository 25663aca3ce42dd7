"""구문/논리 리뷰 역할."""

from pr_council.review.prompt_builder import PromptRole

from .base import ReviewerRole


class SyntaxRole(ReviewerRole):
    """구문/논리 리뷰 역할.

    구문 오류, 논리적 결함, 엣지 케이스, 기능 동작을 리뷰합니다.
    """

    name = "syntax"
    description = "구문 오류, 논리적 정합성, 기능 동작 리뷰"
    prompt_role = PromptRole.SYNTAX
    default_type = "syntax"
