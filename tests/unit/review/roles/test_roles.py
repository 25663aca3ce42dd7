"""역할 레지스트리 및 구체 역할 테스트."""

import pytest

from pr_council.review.prompt_builder import PromptRole
from pr_council.review.roles import (
    DEFAULT_ROLES,
    ROLE_REGISTRY,
    DependencyRole,
    StyleRole,
    SyntaxRole,
    get_available_roles,
    get_role,
)


class TestRegistry:
    """역할 레지스트리 테스트."""

    def test_default_order(self):
        """기본 실행 순서는 syntax, dependency, style."""
        assert DEFAULT_ROLES == ["syntax", "dependency", "style"]

    def test_available_roles_sorted(self):
        """사용 가능한 역할은 이름순."""
        assert get_available_roles() == ["dependency", "style", "syntax"]

    @pytest.mark.parametrize(
        "name,cls",
        [("syntax", SyntaxRole), ("dependency", DependencyRole), ("style", StyleRole)],
    )
    def test_get_role(self, name, cls, mock_llm, budget):
        """이름으로 역할 생성."""
        role = get_role(name, llm=mock_llm, budget=budget)

        assert isinstance(role, cls)
        assert role.llm is mock_llm
        assert role.budget is budget

    def test_get_role_case_insensitive(self, mock_llm, budget):
        """대소문자 무시."""
        assert isinstance(get_role("STYLE", llm=mock_llm, budget=budget), StyleRole)

    def test_unknown_role(self, mock_llm):
        """지원하지 않는 역할은 ValueError."""
        with pytest.raises(ValueError) as exc_info:
            get_role("security", llm=mock_llm)

        assert "dependency, style, syntax" in str(exc_info.value)


class TestConcreteRoles:
    """구체 역할 속성 테스트."""

    @pytest.mark.parametrize("name", sorted(ROLE_REGISTRY))
    def test_role_attributes(self, name):
        """이름, 설명, 프롬프트, 기본 분류."""
        cls = ROLE_REGISTRY[name]

        assert cls.name == name
        assert cls.description
        assert cls.prompt_role is PromptRole(name)
        assert cls.default_type == name

    def test_roles_use_distinct_prompts(self, mock_llm, budget):
        """역할마다 다른 시스템 프롬프트."""
        prompts = {
            get_role(name, llm=mock_llm, budget=budget).system_prompt for name in DEFAULT_ROLES
        }

        assert len(prompts) == 3
