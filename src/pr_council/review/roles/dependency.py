"""의존성/모듈화 리뷰 역할."""

from pr_council.review.prompt_builder import PromptRole

from .base import ReviewerRole


class DependencyRole(ReviewerRole):
    """의존성/모듈화 리뷰 역할.

    불필요하거나 오래된 import, 라이브러리 선택, 모듈 간 결합도를 리뷰합니다.
    """

    name = "dependency"
    description = "외부 라이브러리, import, 모듈화 리뷰"
    prompt_role = PromptRole.DEPENDENCY
    default_type = "dependency"
