"""벡터 유사도 저장소 어댑터.

리뷰 프롬프트에 덧붙일 코드 컨텍스트를 검색하는 데 사용합니다.
임베딩은 계산하지 않으며 벡터를 받아 저장/검색만 합니다.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any

from qdrant_client import QdrantClient
from qdrant_client.http.models import (
    Distance,
    FieldCondition,
    Filter,
    MatchValue,
    PointStruct,
    VectorParams,
)

from pr_council.shared.models import SimilarityMatch

logger = logging.getLogger(__name__)

# 원래 ID와 네임스페이스를 보관하는 payload 키
_ID_KEY = "_id"
_NAMESPACE_KEY = "_namespace"


class VectorStoreError(Exception):
    """벡터 저장소 관련 에러."""

    pass


class BaseVectorStore(ABC):
    """벡터 저장소 추상 베이스 클래스."""

    @abstractmethod
    def upsert(
        self,
        namespace: str,
        id: str,
        vector: list[float],
        metadata: dict[str, Any],
    ) -> None:
        """벡터 하나를 네임스페이스에 저장 (같은 ID면 덮어씀)."""
        ...

    @abstractmethod
    def query(
        self,
        namespace: str,
        vector: list[float],
        top_k: int = 5,
        filter: dict[str, Any] | None = None,
    ) -> list[SimilarityMatch]:
        """유사도 순으로 정렬된 검색 결과 반환.

        Args:
            namespace: 검색할 네임스페이스
            vector: 질의 벡터
            top_k: 최대 결과 수
            filter: 메타데이터 필터 (키-값 일치). 비어 있으면 무시.
        """
        ...


class QdrantVectorStore(BaseVectorStore):
    """Qdrant를 사용하는 벡터 저장소.

    네임스페이스는 하나의 컬렉션 안에서 payload 필드로 구분합니다.
    """

    def __init__(
        self,
        collection_name: str = "code-chunks",
        host: str = "localhost",
        port: int = 6333,
        client: QdrantClient | None = None,
    ) -> None:
        """QdrantVectorStore 초기화.

        Args:
            collection_name: 사용할 컬렉션 이름
            host: Qdrant 서버 호스트
            port: Qdrant 서버 포트
            client: 미리 만든 클라이언트. None이면 host/port로 생성.
        """
        self.collection_name = collection_name
        self.client = client or QdrantClient(host=host, port=port)
        self._collection_ready = False

    def _ensure_collection(self, dimension: int) -> None:
        """컬렉션이 없으면 생성."""
        if self._collection_ready:
            return

        try:
            if not self.client.collection_exists(self.collection_name):
                logger.info(f"컬렉션 생성: {self.collection_name} (dim={dimension})")
                self.client.create_collection(
                    collection_name=self.collection_name,
                    vectors_config=VectorParams(size=dimension, distance=Distance.COSINE),
                )
        except Exception as e:
            raise VectorStoreError(f"컬렉션 준비 실패: {e}") from e

        self._collection_ready = True

    @staticmethod
    def _point_id(namespace: str, id: str) -> str:
        # Qdrant는 UUID/정수 ID만 허용하므로 (namespace, id)에서 결정적 UUID 생성
        return str(uuid.uuid5(uuid.NAMESPACE_URL, f"{namespace}/{id}"))

    def upsert(
        self,
        namespace: str,
        id: str,
        vector: list[float],
        metadata: dict[str, Any],
    ) -> None:
        """벡터 하나를 저장."""
        self._ensure_collection(len(vector))

        payload = {**metadata, _ID_KEY: id, _NAMESPACE_KEY: namespace}
        point = PointStruct(id=self._point_id(namespace, id), vector=vector, payload=payload)

        try:
            self.client.upsert(collection_name=self.collection_name, points=[point])
        except Exception as e:
            raise VectorStoreError(f"벡터 저장 실패 ({namespace}/{id}): {e}") from e

        logger.debug(f"벡터 저장: {namespace}/{id}")

    def query(
        self,
        namespace: str,
        vector: list[float],
        top_k: int = 5,
        filter: dict[str, Any] | None = None,
    ) -> list[SimilarityMatch]:
        """유사도 검색."""
        conditions = [FieldCondition(key=_NAMESPACE_KEY, match=MatchValue(value=namespace))]
        for key, value in (filter or {}).items():
            conditions.append(FieldCondition(key=key, match=MatchValue(value=value)))

        try:
            response = self.client.query_points(
                collection_name=self.collection_name,
                query=vector,
                query_filter=Filter(must=conditions),
                limit=top_k,
                with_payload=True,
            )
        except Exception as e:
            raise VectorStoreError(f"벡터 검색 실패 ({namespace}): {e}") from e

        return [self._to_match(point) for point in response.points]

    @staticmethod
    def _to_match(point: Any) -> SimilarityMatch:
        """검색 결과 포인트를 SimilarityMatch로 변환.

        Raises:
            VectorStoreError: 포인트 형식이 예상과 다른 경우
        """
        payload = getattr(point, "payload", None)
        score = getattr(point, "score", None)
        if not isinstance(payload, dict) or _ID_KEY not in payload:
            raise VectorStoreError(f"예상하지 못한 검색 결과 payload: {payload!r}")
        if not isinstance(score, (int, float)):
            raise VectorStoreError(f"예상하지 못한 검색 결과 score: {score!r}")

        metadata = {
            k: v for k, v in payload.items() if k not in (_ID_KEY, _NAMESPACE_KEY)
        }
        return SimilarityMatch(id=str(payload[_ID_KEY]), score=float(score), metadata=metadata)
