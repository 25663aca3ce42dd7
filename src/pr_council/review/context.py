"""벡터 저장소에서 리뷰 컨텍스트를 가져오는 모듈."""

import asyncio
import logging
from collections.abc import Callable

from pr_council.shared.errors import ContextRetrievalError
from pr_council.shared.models import PRFile, SimilarityMatch
from pr_council.shared.vector_store import BaseVectorStore, VectorStoreError

logger = logging.getLogger(__name__)

Embedder = Callable[[str], list[float]]


class ContextRetriever:
    """파일 patch와 유사한 코드 청크를 검색해 컨텍스트 문자열로 만듭니다.

    임베딩 함수는 외부에서 주입받습니다.
    """

    def __init__(
        self,
        store: BaseVectorStore,
        embed: Embedder,
        namespace: str = "default",
        top_k: int = 5,
    ) -> None:
        self.store = store
        self.embed = embed
        self.namespace = namespace
        self.top_k = top_k

    async def retrieve(self, file: PRFile) -> str:
        """파일의 patch로 검색한 컨텍스트 문자열. 결과가 없으면 빈 문자열.

        Raises:
            ContextRetrievalError: 임베딩 또는 벡터 저장소 검색이 실패한 경우
        """
        try:
            matches = await asyncio.to_thread(self._query, file.patch)
        except VectorStoreError as e:
            raise ContextRetrievalError(f"{file.filename}: 컨텍스트 검색 실패: {e}") from e
        except Exception as e:
            logger.error(f"{file.filename}: 임베딩/검색 호출 실패: {e}")
            raise ContextRetrievalError(f"{file.filename}: 컨텍스트 검색 실패: {e}") from e

        logger.debug(f"{file.filename}: 컨텍스트 {len(matches)}건 검색")
        return format_matches(matches)

    def _query(self, text: str) -> list[SimilarityMatch]:
        vector = self.embed(text)
        return self.store.query(self.namespace, vector, top_k=self.top_k)

    async def index_chunk(
        self,
        id: str,
        chunk: str,
        filename: str,
        start_line: int | None = None,
        end_line: int | None = None,
    ) -> None:
        """코드 청크를 임베딩해 저장."""
        metadata: dict[str, str | int] = {"chunk": chunk, "filename": filename}
        if start_line is not None:
            metadata["startLine"] = start_line
        if end_line is not None:
            metadata["endLine"] = end_line

        def _upsert() -> None:
            self.store.upsert(self.namespace, id, self.embed(chunk), metadata)

        await asyncio.to_thread(_upsert)


def format_matches(matches: list[SimilarityMatch]) -> str:
    """검색 결과를 프롬프트용 텍스트로 포맷."""
    lines = []
    for match in matches:
        chunk = match.metadata.get("chunk")
        if not chunk:
            continue

        location = str(match.metadata.get("filename", match.id))
        start = match.metadata.get("startLine")
        end = match.metadata.get("endLine")
        if start is not None and end is not None:
            location += f":{start}-{end}"

        lines.append(f"### {location}")
        lines.append("```")
        lines.append(str(chunk))
        lines.append("```")
        lines.append("")
    return "\n".join(lines).strip()
