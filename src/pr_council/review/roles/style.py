"""스타일/가독성 리뷰 역할."""

from pr_council.review.prompt_builder import PromptRole

from .base import ReviewerRole


class StyleRole(ReviewerRole):
    """스타일/가독성 리뷰 역할.

    포맷팅, 네이밍, 흐름의 이해 용이성 등 유지보수 관점에서 리뷰합니다.
    """

    name = "style"
    description = "코드 포맷팅, 네이밍, 가독성 리뷰"
    prompt_role = PromptRole.STYLE
    default_type = "style"
