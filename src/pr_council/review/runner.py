"""Review Runner - 역할별 리뷰 실행 및 결과 종합."""

import asyncio
import logging
from collections.abc import Sequence

from pr_council.shared.errors import ReviewError
from pr_council.shared.llm import BaseLLM, get_llm
from pr_council.shared.models import (
    BatchReviewResult,
    ChatMessage,
    FileReviewOutcome,
    PRFile,
    ReviewFinding,
)

from .budget import BudgetCheck, TokenBudgetEnforcer
from .context import ContextRetriever
from .patch_strategy import DEFAULT_CONTEXT_LINES, build_patch_prompt
from .prompt_builder import PromptRole, construct_prompt
from .roles import DEFAULT_ROLES, ReviewerRole, get_available_roles, get_role
from .serializer import aggregate_findings, serialize_batch

logger = logging.getLogger(__name__)


class ReviewRunner:
    """Multi-Role 코드 리뷰 실행기.

    파일마다 모든 역할을 독립적으로 실행하고, 모든 역할이 끝난 뒤 역할 순서대로
    결과를 합칩니다. 한 파일의 실패는 다른 파일에 영향을 주지 않습니다.
    """

    def __init__(
        self,
        roles: list[str] | None = None,
        llm: BaseLLM | None = None,
        parallel: bool = True,
        budget: TokenBudgetEnforcer | None = None,
        context_lines: int = DEFAULT_CONTEXT_LINES,
        retriever: ContextRetriever | None = None,
    ) -> None:
        """ReviewRunner 초기화.

        Args:
            roles: 사용할 역할 이름 목록 (실행/병합 순서). None이면 기본 역할 사용.
            llm: 사용할 LLM 인스턴스. None이면 기본 LLM 사용.
            parallel: True면 역할과 파일을 동시에 실행.
            budget: 토큰 예산 검사기.
            context_lines: context 전략에서 hunk 앞뒤로 덧붙일 줄 수.
            retriever: 벡터 저장소 컨텍스트 검색기.
        """
        self.role_names = roles or list(DEFAULT_ROLES)
        self.llm = llm
        self.parallel = parallel
        self.budget = budget or TokenBudgetEnforcer()
        self.context_lines = context_lines
        self.retriever = retriever
        self._roles: list[ReviewerRole] | None = None

    @property
    def roles(self) -> list[ReviewerRole]:
        """역할 인스턴스 목록.

        Raises:
            ValueError: LLM 모델의 토큰 한도가 정의되지 않은 경우
        """
        if self._roles is None:
            if self.llm is None:
                self.llm = get_llm()
            # 한도가 없는 모델은 파일별 실패가 아니라 설정 오류
            self.budget.budget_for(self.llm.get_model_name())
            self._roles = [get_role(name, self.llm, self.budget) for name in self.role_names]
        return self._roles

    async def review_file(
        self, file: PRFile, context: str | None = None
    ) -> FileReviewOutcome:
        """파일 하나를 모든 역할로 리뷰.

        Args:
            file: 리뷰할 파일
            context: 추가 컨텍스트. None이고 retriever가 있으면 검색해서 사용.

        Returns:
            FileReviewOutcome. 실패한 경우 첫 번째로 실패한 역할(역할 순서 기준)의 에러를 담음.
        """
        try:
            patch = build_patch_prompt(file, self.context_lines)
            if context is None and self.retriever is not None:
                context = await self.retriever.retrieve(file)
        except ReviewError as e:
            logger.error(f"{file.filename} 리뷰 준비 실패: {e}")
            return FileReviewOutcome(filename=file.filename, error=e)

        if self.parallel:
            results = await self._run_parallel(patch, context)
        else:
            results = await self._run_sequential(patch, context)

        errors = [r for r in results if isinstance(r, ReviewError)]
        if errors:
            for error in errors:
                logger.error(f"{file.filename} 역할 리뷰 실패: {error}")
            return FileReviewOutcome(filename=file.filename, error=errors[0])

        findings = [r for r in results if not isinstance(r, ReviewError)]
        review = aggregate_findings(file.filename, findings)
        logger.info(f"{file.filename} 리뷰 완료: {len(review.reviews)}개 제안")
        return FileReviewOutcome(filename=file.filename, review=review)

    async def _run_parallel(
        self, patch: str, context: str | None
    ) -> list[list[ReviewFinding] | ReviewError]:
        """역할을 병렬로 실행. 모든 역할이 끝날 때까지 기다립니다."""
        tasks = [role.run(patch, context) for role in self.roles]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        for result in results:
            if isinstance(result, BaseException) and not isinstance(result, ReviewError):
                raise result
        return list(results)

    async def _run_sequential(
        self, patch: str, context: str | None
    ) -> list[list[ReviewFinding] | ReviewError]:
        """역할을 순차적으로 실행. 실패한 역할이 있어도 나머지 역할은 실행합니다."""
        results: list[list[ReviewFinding] | ReviewError] = []
        for role in self.roles:
            try:
                results.append(await role.run(patch, context))
            except ReviewError as e:
                results.append(e)
        return results

    async def review_files(
        self,
        files: Sequence[PRFile],
        contexts: Sequence[str | None] | None = None,
    ) -> BatchReviewResult:
        """여러 파일을 리뷰. 결과는 완료 순서와 관계없이 입력 순서를 따릅니다.

        Args:
            files: 리뷰할 파일 목록
            contexts: 파일별 컨텍스트 (files와 같은 길이)

        Returns:
            BatchReviewResult

        Raises:
            ValueError: contexts 길이가 다르거나 모델의 토큰 한도가 정의되지 않은 경우
        """
        if contexts is not None and len(contexts) != len(files):
            raise ValueError(
                f"contexts 길이({len(contexts)})가 files 길이({len(files)})와 다릅니다"
            )
        _ = self.roles
        file_contexts = list(contexts) if contexts is not None else [None] * len(files)

        if self.parallel:
            outcomes = await asyncio.gather(
                *(self.review_file(f, c) for f, c in zip(files, file_contexts))
            )
        else:
            outcomes = [await self.review_file(f, c) for f, c in zip(files, file_contexts)]

        result = BatchReviewResult(outcomes=list(outcomes))
        logger.info(
            f"배치 리뷰 완료: 파일 {len(files)}개, 실패 {len(result.failures)}개, "
            f"제안 {result.total_findings}개"
        )
        return result

    def review_files_sync(
        self,
        files: Sequence[PRFile],
        contexts: Sequence[str | None] | None = None,
    ) -> BatchReviewResult:
        """review_files()의 동기 버전."""
        return asyncio.run(self.review_files(files, contexts))

    def build_single_shot_prompt(
        self,
        files: Sequence[PRFile],
        role: PromptRole | str = PromptRole.XML,
        context: str | None = None,
    ) -> list[ChatMessage]:
        """모든 파일을 하나의 대화로 묶은 single-shot 프롬프트."""
        return construct_prompt(
            files,
            lambda file: build_patch_prompt(file, self.context_lines),
            role,
            context,
        )

    def check_single_shot(
        self,
        files: Sequence[PRFile],
        model: str,
        role: PromptRole | str = PromptRole.XML,
    ) -> BudgetCheck:
        """single-shot 프롬프트가 모델 한도 안에 드는지 검사."""
        return self.budget.check(self.build_single_shot_prompt(files, role), model)

    @staticmethod
    def list_available_roles() -> list[str]:
        """사용 가능한 역할 목록."""
        return get_available_roles()


async def review_files(
    files: Sequence[PRFile],
    roles: list[str] | None = None,
    llm: BaseLLM | None = None,
    parallel: bool = True,
    budget: TokenBudgetEnforcer | None = None,
    context_lines: int = DEFAULT_CONTEXT_LINES,
    retriever: ContextRetriever | None = None,
) -> str:
    """파일들을 리뷰하고 XML 문서를 반환합니다.

    실패한 파일은 문서 안에 ``<error>`` 요소로 보고되며 다른 파일은 정상 출력됩니다.

    Raises:
        SerializationError: 결과를 XML로 표현할 수 없는 경우 (배치 전체 실패)
    """
    runner = ReviewRunner(
        roles=roles,
        llm=llm,
        parallel=parallel,
        budget=budget,
        context_lines=context_lines,
        retriever=retriever,
    )
    result = await runner.review_files(files)
    return serialize_batch(result)


def review_files_sync(
    files: Sequence[PRFile],
    roles: list[str] | None = None,
    llm: BaseLLM | None = None,
    parallel: bool = True,
    budget: TokenBudgetEnforcer | None = None,
    context_lines: int = DEFAULT_CONTEXT_LINES,
    retriever: ContextRetriever | None = None,
) -> str:
    """review_files()의 동기 버전."""
    return asyncio.run(
        review_files(files, roles, llm, parallel, budget, context_lines, retriever)
    )
