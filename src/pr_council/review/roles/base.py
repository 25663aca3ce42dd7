"""리뷰 역할 베이스 클래스."""

import asyncio
import json
import logging
import re
from abc import ABC
from typing import Any

from pr_council.review.budget import TokenBudgetEnforcer
from pr_council.review.prompt_builder import PromptRole, build_conversation, get_system_prompt
from pr_council.shared.errors import BudgetExceededError, CompletionError
from pr_council.shared.llm import BaseLLM, get_llm
from pr_council.shared.models import ChatMessage, ReviewFinding

logger = logging.getLogger(__name__)

_JSON_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


class ReviewerRole(ABC):
    """리뷰 역할 베이스 클래스.

    각 역할은 자신의 시스템 프롬프트로 같은 patch를 독립적으로 리뷰하며,
    다른 역할의 결과에 의존하지 않습니다. 하위 클래스는 클래스 속성만 정의합니다.
    """

    name: str  # 역할 이름 (예: "syntax", "style")
    description: str  # 역할 설명
    prompt_role: PromptRole  # 시스템 프롬프트
    default_type: str  # 응답에 type이 없을 때 쓰는 분류

    def __init__(
        self,
        llm: BaseLLM | None = None,
        budget: TokenBudgetEnforcer | None = None,
    ) -> None:
        """역할 초기화.

        Args:
            llm: 사용할 LLM 인스턴스. None이면 기본 LLM 사용.
            budget: 토큰 예산 검사기. None이면 기본 한도 사용.
        """
        self.llm = llm or get_llm()
        self.budget = budget or TokenBudgetEnforcer()

    @property
    def system_prompt(self) -> str:
        """역할의 고정 시스템 프롬프트."""
        return get_system_prompt(self.prompt_role)

    def build_conversation(self, patch: str, context: str | None = None) -> list[ChatMessage]:
        """리뷰 대화 생성."""
        return build_conversation(self.prompt_role, patch, context)

    async def run(self, patch: str, context: str | None = None) -> list[ReviewFinding]:
        """patch를 리뷰하여 제안 목록 반환.

        Args:
            patch: 줄 번호가 붙은 patch 텍스트
            context: 검색된 컨텍스트

        Returns:
            ReviewFinding 리스트 (제안이 없으면 빈 리스트)

        Raises:
            BudgetExceededError: 대화가 모델 토큰 한도를 넘는 경우 (전송하지 않음)
            CompletionError: 완성 서비스가 유효한 응답을 주지 않은 경우
        """
        logger.info(f"[{self.name}] 리뷰 시작")

        conversation = self.build_conversation(patch, context)
        model = self.llm.get_model_name()
        check = self.budget.check(conversation, model)
        if not check.fits:
            logger.warning(
                f"[{self.name}] 토큰 한도 초과로 전송하지 않음: {check.tokens}/{check.limit}"
            )
            raise BudgetExceededError(check, role=self.name)

        messages = [message.to_dict() for message in conversation]
        try:
            result = await asyncio.to_thread(self.llm.chat, messages)
        except Exception as e:
            logger.error(f"[{self.name}] LLM 호출 실패: {e}")
            raise CompletionError(self.name, f"완성 서비스 호출 실패: {e}") from e

        if not result.had_result or not result.text.strip():
            raise CompletionError(self.name, "완성 서비스에서 유효한 응답을 받지 못했습니다")

        findings = self.parse_findings(result.text)
        logger.info(f"[{self.name}] 리뷰 완료: {len(findings)}개 제안")
        return findings

    def parse_findings(self, response: str) -> list[ReviewFinding]:
        """LLM 응답을 ReviewFinding 리스트로 파싱.

        JSON 배열(또는 ``{"reviews": [...]}``)을 기대하며, JSON이 없는 일반 텍스트는
        기본 분류의 제안 하나로 처리합니다.

        Raises:
            CompletionError: JSON이지만 배열/객체 형식이 아닌 경우
        """
        json_content = self._extract_json(response)
        if json_content is None:
            return self._parse_text_response(response)

        try:
            data = json.loads(json_content)
        except json.JSONDecodeError as e:
            logger.warning(f"[{self.name}] JSON 파싱 실패: {e}")
            return self._parse_text_response(response)

        if isinstance(data, dict):
            data = data.get("reviews", data.get("findings"))
        if not isinstance(data, list):
            raise CompletionError(self.name, f"예상하지 못한 응답 형식: {json_content[:80]!r}")

        findings = []
        for item in data:
            finding = self._parse_finding(item)
            if finding:
                findings.append(finding)
        return findings

    def _extract_json(self, text: str) -> str | None:
        """텍스트에서 JSON 블록 추출."""
        # ```json ... ``` 블록 찾기
        match = _JSON_BLOCK_PATTERN.search(text)
        if match and match.group(1).strip().startswith(("[", "{")):
            return match.group(1).strip()

        # [ ... ] 또는 { ... } 직접 찾기
        text = text.strip()
        if text.startswith("[") or text.startswith("{"):
            return text

        return None

    def _parse_finding(self, item: Any) -> ReviewFinding | None:
        """응답 항목 하나를 ReviewFinding으로 변환. 제안이 없으면 None."""
        if isinstance(item, str):
            item = {"suggestion": item}
        if not isinstance(item, dict):
            logger.warning(f"[{self.name}] 제안 항목 형식 오류: {item!r}")
            return None

        suggestion = item.get("suggestion")
        if not isinstance(suggestion, str) or not suggestion.strip():
            logger.warning(f"[{self.name}] suggestion이 없는 항목 건너뜀: {item!r}")
            return None

        finding_type = item.get("type")
        if not isinstance(finding_type, str) or not finding_type.strip():
            finding_type = self.default_type

        return ReviewFinding(
            type=_normalize_newlines(finding_type.strip()),
            suggestion=_normalize_newlines(suggestion.strip()),
        )

    def _parse_text_response(self, response: str) -> list[ReviewFinding]:
        """구조화되지 않은 응답을 제안 하나로 처리."""
        text = response.strip()
        if not text:
            return []
        return [ReviewFinding(type=self.default_type, suggestion=_normalize_newlines(text))]


def _normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")
