"""출력 포매터 테스트."""

import json

import pytest

from pr_council.review.budget import BudgetCheck
from pr_council.shared.errors import BudgetExceededError
from pr_council.shared.models import (
    BatchReviewResult,
    FileReview,
    FileReviewOutcome,
    ReviewFinding,
)
from pr_council.shared.output import (
    ConsoleFormatter,
    JSONFormatter,
    XMLFormatter,
    get_formatter,
)


@pytest.fixture
def batch_result() -> BatchReviewResult:
    """성공 1개, 실패 1개인 배치 결과."""
    check = BudgetCheck(model="gpt-4", tokens=9000, limit=8192, approximate=False)
    return BatchReviewResult(
        outcomes=[
            FileReviewOutcome(
                filename="src/foo.py",
                review=FileReview(
                    filename="src/foo.py",
                    reviews=[ReviewFinding(type="style", suggestion="Use [snake_case].")],
                ),
            ),
            FileReviewOutcome(
                filename="src/big.py", error=BudgetExceededError(check, role="syntax")
            ),
        ]
    )


class TestJSONFormatter:
    """JSON 포매터 테스트."""

    def test_format(self, batch_result):
        """성공 파일은 reviews, 실패 파일은 error."""
        data = json.loads(JSONFormatter().format(batch_result))

        assert data["files"][0] == {
            "filename": "src/foo.py",
            "reviews": [{"type": "style", "suggestion": "Use [snake_case]."}],
        }
        assert data["files"][1]["error"]["kind"] == "budget"
        assert data["files"][1]["error"]["role"] == "syntax"
        assert "9000" in data["files"][1]["error"]["message"]


class TestXMLFormatter:
    """XML 포매터 테스트."""

    def test_format(self, batch_result):
        """XML 문서 출력."""
        output = XMLFormatter().format(batch_result)

        assert output.startswith("<?xml")
        assert 'kind="budget"' in output


class TestConsoleFormatter:
    """콘솔 포매터 테스트."""

    def test_format(self, batch_result):
        """파일별 결과와 통계."""
        output = ConsoleFormatter().format(batch_result)

        assert "src/foo.py" in output
        assert "Use [snake_case]." in output
        assert "src/big.py" in output
        assert "토큰 한도 초과" in output


class TestGetFormatter:
    """get_formatter 테스트."""

    @pytest.mark.parametrize(
        "name,cls",
        [("xml", XMLFormatter), ("json", JSONFormatter), ("CONSOLE", ConsoleFormatter)],
    )
    def test_known_formats(self, name, cls):
        """형식 이름으로 포매터 생성."""
        assert isinstance(get_formatter(name), cls)

    def test_unknown_format(self):
        """지원하지 않는 형식은 ValueError."""
        with pytest.raises(ValueError):
            get_formatter("yaml")
