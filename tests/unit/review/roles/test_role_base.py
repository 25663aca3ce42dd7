"""ReviewerRole 베이스 클래스 테스트."""

import json
from unittest.mock import MagicMock, patch

import pytest

from pr_council.review.budget import BudgetCheck
from pr_council.review.prompt_builder import PromptRole, get_system_prompt
from pr_council.review.roles.base import ReviewerRole
from pr_council.shared.errors import BudgetExceededError, CompletionError
from pr_council.shared.models import CompletionResult, ReviewFinding


class ConcreteRole(ReviewerRole):
    """테스트용 구체 역할 구현."""

    name = "test_role"
    description = "테스트 역할"
    prompt_role = PromptRole.SYNTAX
    default_type = "test"


@pytest.fixture
def role(mock_llm, budget) -> ConcreteRole:
    """Mock LLM을 쓰는 테스트 역할."""
    return ConcreteRole(llm=mock_llm, budget=budget)


class TestReviewerRole:
    """ReviewerRole 초기화 테스트."""

    def test_uses_default_llm(self, mock_llm, budget) -> None:
        """llm이 없으면 get_llm() 사용."""
        with patch("pr_council.review.roles.base.get_llm", return_value=mock_llm):
            role = ConcreteRole(budget=budget)

        assert role.llm is mock_llm

    def test_system_prompt(self, role) -> None:
        """역할의 시스템 프롬프트."""
        assert role.system_prompt == get_system_prompt(PromptRole.SYNTAX)

    def test_build_conversation(self, role) -> None:
        """시스템 프롬프트와 patch로 대화 생성."""
        conversation = role.build_conversation("1: x", context="ctx")

        assert conversation[0].content == role.system_prompt
        assert "1: x" in conversation[1].content
        assert "ctx" in conversation[1].content


class TestRun:
    """run() 테스트."""

    @pytest.mark.asyncio
    async def test_returns_findings(self, role, mock_llm) -> None:
        """JSON 응답을 제안 목록으로 변환."""
        mock_llm.chat.return_value = CompletionResult(
            text='[{"type": "logic", "suggestion": "Check for None."}]',
            had_result=True,
        )

        findings = await role.run("## a.py\n\n1: x")

        assert findings == [ReviewFinding(type="logic", suggestion="Check for None.")]

    @pytest.mark.asyncio
    async def test_sends_conversation_as_dicts(self, role, mock_llm) -> None:
        """LLM에는 system, user 순서의 딕셔너리 목록을 전달."""
        await role.run("1: x")

        messages = mock_llm.chat.call_args.args[0]
        assert [m["role"] for m in messages] == ["system", "user"]
        assert messages[1]["content"] == "1: x"

    @pytest.mark.asyncio
    async def test_empty_array_means_no_findings(self, role) -> None:
        """빈 배열은 제안 없음."""
        assert await role.run("1: x") == []

    @pytest.mark.asyncio
    async def test_no_result_raises(self, role, mock_llm) -> None:
        """유효한 응답이 없으면 CompletionError."""
        mock_llm.chat.return_value = CompletionResult.empty()

        with pytest.raises(CompletionError) as exc_info:
            await role.run("1: x")

        assert exc_info.value.role == "test_role"
        assert exc_info.value.kind == "completion"

    @pytest.mark.asyncio
    async def test_blank_text_raises(self, role, mock_llm) -> None:
        """공백뿐인 응답도 CompletionError."""
        mock_llm.chat.return_value = CompletionResult(text="  \n", had_result=True)

        with pytest.raises(CompletionError):
            await role.run("1: x")

    @pytest.mark.asyncio
    async def test_llm_exception_wrapped(self, role, mock_llm) -> None:
        """LLM 호출 예외는 CompletionError로 감쌈."""
        mock_llm.chat.side_effect = RuntimeError("connection reset")

        with pytest.raises(CompletionError) as exc_info:
            await role.run("1: x")

        assert "connection reset" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_over_budget_not_sent(self, mock_llm) -> None:
        """한도를 넘는 대화는 전송하지 않고 BudgetExceededError."""
        mock_llm.get_model_name.return_value = "llama3-70b-8192"
        budget = MagicMock()
        budget.check.return_value = BudgetCheck(
            model="llama3-70b-8192", tokens=9000, limit=8192, approximate=True
        )
        role = ConcreteRole(llm=mock_llm, budget=budget)

        with pytest.raises(BudgetExceededError) as exc_info:
            await role.run("1: x")

        mock_llm.chat.assert_not_called()
        assert exc_info.value.role == "test_role"
        assert exc_info.value.check.tokens == 9000
        assert "9000" in str(exc_info.value)


class TestParseFindings:
    """응답 파싱 테스트."""

    def test_json_block(self, role) -> None:
        """```json 블록에서 추출."""
        response = (
            "Here is my review:\n```json\n"
            + json.dumps([{"type": "naming", "suggestion": "Rename x."}])
            + "\n```"
        )

        assert role.parse_findings(response) == [
            ReviewFinding(type="naming", suggestion="Rename x.")
        ]

    def test_wrapped_object(self, role) -> None:
        """{"reviews": [...]} 형식도 허용."""
        response = json.dumps({"reviews": [{"type": "t", "suggestion": "s"}]})

        assert role.parse_findings(response) == [ReviewFinding(type="t", suggestion="s")]

    def test_missing_type_uses_default(self, role) -> None:
        """type이 없으면 역할의 기본 분류."""
        findings = role.parse_findings('[{"suggestion": "Do this."}, "Do that."]')

        assert findings == [
            ReviewFinding(type="test", suggestion="Do this."),
            ReviewFinding(type="test", suggestion="Do that."),
        ]

    def test_items_without_suggestion_skipped(self, role) -> None:
        """suggestion이 없는 항목은 건너뜀."""
        findings = role.parse_findings('[{"type": "t"}, {"type": "t", "suggestion": "ok"}, 3]')

        assert findings == [ReviewFinding(type="t", suggestion="ok")]

    def test_plain_text_becomes_single_finding(self, role) -> None:
        """JSON이 없는 응답은 제안 하나."""
        findings = role.parse_findings("Consider adding a guard clause.")

        assert findings == [
            ReviewFinding(type="test", suggestion="Consider adding a guard clause.")
        ]

    def test_invalid_json_falls_back_to_text(self, role) -> None:
        """JSON 파싱에 실패하면 텍스트로 처리."""
        findings = role.parse_findings("[not json")

        assert findings == [ReviewFinding(type="test", suggestion="[not json")]

    def test_unexpected_shape_raises(self, role) -> None:
        """배열이 아닌 JSON은 CompletionError."""
        with pytest.raises(CompletionError):
            role.parse_findings('{"answer": 42}')

    def test_newlines_normalized(self, role) -> None:
        r"""\r\n은 \n으로 정규화."""
        findings = role.parse_findings('[{"type": "t", "suggestion": "a\\r\\nb"}]')

        assert findings[0].suggestion == "a\nb"
