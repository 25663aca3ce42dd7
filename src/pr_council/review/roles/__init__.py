"""Review roles - 독립적으로 실행되는 리뷰 역할들."""

from pr_council.review.budget import TokenBudgetEnforcer
from pr_council.shared.llm import BaseLLM

from .base import ReviewerRole
from .dependency import DependencyRole
from .style import StyleRole
from .syntax import SyntaxRole

__all__ = [
    "ReviewerRole",
    "SyntaxRole",
    "DependencyRole",
    "StyleRole",
    "DEFAULT_ROLES",
    "ROLE_REGISTRY",
    "get_role",
    "get_available_roles",
]

# 기본 실행 순서. 결과 병합 순서도 이 순서를 따른다.
DEFAULT_ROLES = ["syntax", "dependency", "style"]

# 역할 레지스트리
ROLE_REGISTRY: dict[str, type[ReviewerRole]] = {
    "syntax": SyntaxRole,
    "dependency": DependencyRole,
    "style": StyleRole,
}


def get_role(
    name: str,
    llm: BaseLLM | None = None,
    budget: TokenBudgetEnforcer | None = None,
) -> ReviewerRole:
    """이름으로 역할 인스턴스 생성.

    Args:
        name: 역할 이름 (예: "syntax", "style")
        llm: 사용할 LLM 인스턴스. None이면 기본 LLM 사용.
        budget: 토큰 예산 검사기.

    Returns:
        ReviewerRole 인스턴스

    Raises:
        ValueError: 지원하지 않는 역할 이름인 경우

    Examples:
        >>> role = get_role("syntax", llm=custom_llm)
    """
    name = name.lower()

    if name not in ROLE_REGISTRY:
        available = ", ".join(get_available_roles())
        raise ValueError(f"지원하지 않는 역할입니다: {name}. 사용 가능한 역할: {available}")

    return ROLE_REGISTRY[name](llm=llm, budget=budget)


def get_available_roles() -> list[str]:
    """사용 가능한 역할 이름 목록 반환.

    Examples:
        >>> get_available_roles()
        ['dependency', 'style', 'syntax']
    """
    return sorted(ROLE_REGISTRY.keys())
