"""리뷰 결과 종합 및 XML 직렬화 모듈.

문서 구조::

    <reviews>
      <file>
        <filename>...</filename>
        <reviews>
          <review><type>...</type><suggestion>...</suggestion></review>
        </reviews>
      </file>
    </reviews>
"""

import logging
import re
import xml.etree.ElementTree as ET
from collections.abc import Sequence

from pr_council.shared.errors import SerializationError
from pr_council.shared.models import (
    BatchReviewResult,
    FileReview,
    FileReviewOutcome,
    ReviewFinding,
)

logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'

# XML 1.0에서 표현할 수 없는 문자. \r은 파서가 \n으로 정규화하므로 함께 거부한다.
_INVALID_XML_CHARS = re.compile(
    "[\x00-\x08\x0b-\x1f\ud800-\udfff\ufffe\uffff]"
)


def aggregate_findings(
    filename: str, per_role: Sequence[Sequence[ReviewFinding]]
) -> FileReview:
    """역할 실행 순서대로 제안 목록을 이어 붙여 FileReview 생성."""
    reviews = [finding for findings in per_role for finding in findings]
    return FileReview(filename=filename, reviews=reviews)


def _check_text(value: str, where: str) -> str:
    if not isinstance(value, str):
        raise SerializationError(f"{where}: 문자열이 아닙니다 ({type(value).__name__})")
    match = _INVALID_XML_CHARS.search(value)
    if match:
        raise SerializationError(
            f"{where}: XML로 표현할 수 없는 문자 {match.group()!r} (위치 {match.start()})"
        )
    return value


def _text_element(parent: ET.Element, tag: str, text: str, where: str) -> ET.Element:
    element = ET.SubElement(parent, tag)
    element.text = _check_text(text, where)
    return element


def _file_element(root: ET.Element, filename: str) -> ET.Element:
    file_el = ET.SubElement(root, "file")
    _text_element(file_el, "filename", filename, "filename")
    return file_el


def _append_review(root: ET.Element, review: FileReview) -> None:
    file_el = _file_element(root, review.filename)
    reviews_el = ET.SubElement(file_el, "reviews")
    for index, finding in enumerate(review.reviews):
        where = f"{review.filename} #{index}"
        review_el = ET.SubElement(reviews_el, "review")
        _text_element(review_el, "type", finding.type, f"{where} type")
        _text_element(review_el, "suggestion", finding.suggestion, f"{where} suggestion")


def _append_failure(root: ET.Element, outcome: FileReviewOutcome) -> None:
    file_el = _file_element(root, outcome.filename)
    error_el = ET.SubElement(file_el, "error")
    error = outcome.error
    error_el.set("kind", getattr(error, "kind", "review"))
    role = getattr(error, "role", None)
    if role:
        error_el.set("role", _check_text(role, f"{outcome.filename} role"))
    error_el.text = _check_text(str(error), f"{outcome.filename} error")


def _to_string(root: ET.Element) -> str:
    ET.indent(root)
    return XML_DECLARATION + ET.tostring(root, encoding="unicode")


def serialize_reviews(file_reviews: Sequence[FileReview]) -> str:
    """FileReview 목록을 XML 문서로 직렬화.

    제안이 없는 파일도 빈 ``<reviews/>`` 와 함께 항상 포함됩니다.

    Raises:
        SerializationError: XML로 표현할 수 없는 문자가 포함된 경우
    """
    root = ET.Element("reviews")
    for review in file_reviews:
        _append_review(root, review)
    return _to_string(root)


def serialize_batch(result: BatchReviewResult) -> str:
    """배치 결과를 입력 파일 순서대로 XML 문서로 직렬화.

    실패한 파일은 ``<reviews>`` 대신 ``<error kind=".." role="..">`` 요소를 가집니다.

    Raises:
        SerializationError: XML로 표현할 수 없는 문자가 포함된 경우
    """
    root = ET.Element("reviews")
    for outcome in result.outcomes:
        if outcome.succeeded and outcome.review is not None:
            _append_review(root, outcome.review)
        else:
            _append_failure(root, outcome)

    logger.debug(
        f"XML 직렬화: 파일 {len(result.outcomes)}개 (실패 {len(result.failures)}개)"
    )
    return _to_string(root)


def parse_reviews(document: str) -> list[FileReview]:
    """serialize_reviews()로 만든 XML 문서를 다시 FileReview 목록으로 읽습니다.

    ``<error>`` 만 있는 실패 파일은 건너뜁니다.

    Raises:
        SerializationError: 문서 형식이 올바르지 않은 경우
    """
    try:
        root = ET.fromstring(document)
    except ET.ParseError as e:
        raise SerializationError(f"XML 파싱 실패: {e}") from e

    if root.tag != "reviews":
        raise SerializationError(f"루트 요소가 reviews가 아닙니다: {root.tag}")

    file_reviews = []
    for file_el in root.findall("file"):
        reviews_el = file_el.find("reviews")
        if reviews_el is None:
            continue
        findings = [
            ReviewFinding(
                type=review_el.findtext("type") or "",
                suggestion=review_el.findtext("suggestion") or "",
            )
            for review_el in reviews_el.findall("review")
        ]
        file_reviews.append(
            FileReview(filename=file_el.findtext("filename") or "", reviews=findings)
        )
    return file_reviews
