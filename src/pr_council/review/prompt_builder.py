"""역할별 시스템 프롬프트와 diff를 대화(Conversation)로 조립하는 모듈."""

from collections.abc import Callable, Sequence
from enum import Enum

from pr_council.prompts import load_prompt
from pr_council.shared.models import ChatMessage, MessageRole, PRFile


class PromptRole(Enum):
    """시스템 프롬프트 종류."""

    SYNTAX = "syntax"
    DEPENDENCY = "dependency"
    STYLE = "style"
    DIFF = "diff"
    XML = "xml"

    @property
    def prompt_name(self) -> str:
        """프롬프트 템플릿 이름."""
        return f"review/{self.value}"


def get_system_prompt(role: PromptRole | str) -> str:
    """역할의 고정 시스템 프롬프트 반환.

    Raises:
        ValueError: 알 수 없는 역할인 경우
    """
    return load_prompt(PromptRole(role).prompt_name)


def build_user_message(diff: str, context: str | None = None) -> str:
    """diff와 (있으면) 검색된 컨텍스트로 사용자 메시지 생성."""
    if not context:
        return diff
    return load_prompt("review/user", context=context, diff=diff)


def build_conversation(
    role: PromptRole | str, diff: str, context: str | None = None
) -> list[ChatMessage]:
    """시스템 메시지 하나와 사용자 메시지 하나로 된 대화 생성.

    Args:
        role: 시스템 프롬프트 역할
        diff: 렌더링된 diff 텍스트 (파일마다 ``## filename`` 헤더 포함)
        context: 벡터 저장소에서 가져온 컨텍스트

    Returns:
        [system, user] 순서의 ChatMessage 리스트
    """
    return [
        ChatMessage(role=MessageRole.SYSTEM, content=get_system_prompt(role)),
        ChatMessage(role=MessageRole.USER, content=build_user_message(diff, context)),
    ]


def get_review_prompt(diff: str) -> list[ChatMessage]:
    """일반 diff 리뷰 대화."""
    return build_conversation(PromptRole.DIFF, diff)


def get_xml_review_prompt(diff: str) -> list[ChatMessage]:
    """XML 구조 응답을 요구하는 리뷰 대화."""
    return build_conversation(PromptRole.XML, diff)


def construct_prompt(
    files: Sequence[PRFile],
    patch_builder: Callable[[PRFile], str],
    role: PromptRole | str = PromptRole.DIFF,
    context: str | None = None,
) -> list[ChatMessage]:
    """여러 파일의 patch를 하나로 이어 붙여 단일 대화를 생성 (single-shot 모드).

    Args:
        files: 리뷰할 파일 목록
        patch_builder: 파일을 ``## filename`` 헤더가 붙은 patch 텍스트로 바꾸는 함수
        role: 시스템 프롬프트 역할
        context: 추가 컨텍스트

    Returns:
        조립된 대화
    """
    patches = [patch_builder(file) for file in files]
    diff = "\n".join(patches)
    return build_conversation(role, diff, context)
