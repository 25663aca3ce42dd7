"""프롬프트 조립 테스트."""

import pytest

from pr_council.prompts import get_available_prompts, load_prompt
from pr_council.review.prompt_builder import (
    PromptRole,
    build_conversation,
    build_user_message,
    construct_prompt,
    get_review_prompt,
    get_system_prompt,
    get_xml_review_prompt,
)
from pr_council.shared.models import MessageRole, PRFile


class TestPrompts:
    """프롬프트 템플릿 로더 테스트."""

    def test_review_prompts_available(self):
        """모든 역할의 템플릿이 존재."""
        prompts = get_available_prompts()

        for role in PromptRole:
            assert role.prompt_name in prompts
        assert "review/user" in prompts

    def test_missing_prompt(self):
        """없는 템플릿은 FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_prompt("review/nonexistent")

    def test_missing_variable(self):
        """필수 변수가 빠지면 KeyError."""
        with pytest.raises(KeyError):
            load_prompt("review/user", diff="x")


class TestSystemPrompt:
    """시스템 프롬프트 테스트."""

    @pytest.mark.parametrize("role", list(PromptRole))
    def test_system_prompt_is_fixed(self, role):
        """역할별 시스템 프롬프트는 고정 텍스트."""
        prompt = get_system_prompt(role)

        assert prompt
        assert prompt == get_system_prompt(role.value)

    def test_roles_have_distinct_prompts(self):
        """역할마다 다른 프롬프트."""
        prompts = {get_system_prompt(role) for role in PromptRole}

        assert len(prompts) == len(PromptRole)

    def test_unknown_role(self):
        """알 수 없는 역할은 ValueError."""
        with pytest.raises(ValueError):
            get_system_prompt("security")


class TestBuildConversation:
    """대화 조립 테스트."""

    def test_system_then_user(self):
        """system 메시지 하나, user 메시지 하나 순서."""
        conversation = build_conversation(PromptRole.SYNTAX, "## a.py\n\n1: x")

        assert [m.role for m in conversation] == [MessageRole.SYSTEM, MessageRole.USER]
        assert conversation[0].content == get_system_prompt(PromptRole.SYNTAX)
        assert conversation[1].content == "## a.py\n\n1: x"

    def test_context_included_in_user_message(self):
        """컨텍스트가 있으면 user 메시지에 함께 포함."""
        conversation = build_conversation("style", "DIFF", context="CTX {not a field}")

        user = conversation[1].content
        assert "CTX {not a field}" in user
        assert user.index("CTX") < user.index("DIFF")

    def test_empty_context_ignored(self):
        """빈 컨텍스트는 무시."""
        assert build_user_message("DIFF", "") == "DIFF"

    def test_to_dict(self):
        """LLM 클라이언트용 딕셔너리 변환."""
        conversation = get_review_prompt("d")

        assert conversation[1].to_dict() == {"role": "user", "content": "d"}

    def test_xml_review_prompt(self):
        """XML 리뷰 프롬프트는 <review> 형식을 요구."""
        conversation = get_xml_review_prompt("d")

        assert "<review>" in conversation[0].content


class TestConstructPrompt:
    """여러 파일 single-shot 프롬프트 테스트."""

    def test_patches_joined_in_order(self):
        """파일 순서대로 patch를 이어 붙임."""
        files = [
            PRFile(filename="a.py", patch="A"),
            PRFile(filename="b.py", patch="B"),
        ]

        conversation = construct_prompt(files, lambda f: f"## {f.filename}\n{f.patch}")

        assert conversation[0].content == get_system_prompt(PromptRole.DIFF)
        assert conversation[1].content == "## a.py\nA\n## b.py\nB"

    def test_builder_called_once_per_file(self, mocker):
        """patch_builder는 파일마다 한 번 호출."""
        builder = mocker.MagicMock(return_value="P")
        files = [PRFile(filename=f"{i}.py", patch="") for i in range(3)]

        construct_prompt(files, builder, PromptRole.XML)

        assert builder.call_count == 3
