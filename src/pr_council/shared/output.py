"""출력 포매터 모듈."""

import json
from abc import ABC, abstractmethod
from dataclasses import asdict

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from pr_council.review.serializer import serialize_batch
from pr_council.shared.models import BatchReviewResult, FileReviewOutcome, OutputFormat


class BaseFormatter(ABC):
    """출력 포매터 추상 클래스."""

    @abstractmethod
    def format(self, data: BatchReviewResult) -> str:
        """배치 리뷰 결과를 포맷된 문자열로 변환."""
        ...


class XMLFormatter(BaseFormatter):
    """XML 리뷰 문서 포매터 (기본 출력)."""

    def format(self, data: BatchReviewResult) -> str:
        """배치 리뷰 결과를 XML 문서로 변환."""
        return serialize_batch(data)


class JSONFormatter(BaseFormatter):
    """JSON 출력 포매터 (파이프라인 친화적)."""

    def __init__(self, indent: int = 2) -> None:
        self.indent = indent

    def format(self, data: BatchReviewResult) -> str:
        """배치 리뷰 결과를 JSON 문자열로 변환."""
        files = [self._outcome_to_dict(outcome) for outcome in data.outcomes]
        return json.dumps({"files": files}, indent=self.indent, ensure_ascii=False)

    def _outcome_to_dict(self, outcome: FileReviewOutcome) -> dict:
        if outcome.succeeded and outcome.review is not None:
            return {
                "filename": outcome.filename,
                "reviews": [asdict(finding) for finding in outcome.review.reviews],
            }
        error = outcome.error
        return {
            "filename": outcome.filename,
            "error": {
                "kind": getattr(error, "kind", "review"),
                "role": getattr(error, "role", None),
                "message": str(error),
            },
        }


class ConsoleFormatter(BaseFormatter):
    """Rich를 사용한 터미널 출력 포매터."""

    def __init__(self) -> None:
        self.console = Console(record=True)

    def format(self, data: BatchReviewResult) -> str:
        """배치 리뷰 결과를 Rich 포맷으로 콘솔에 출력하고 문자열 반환."""
        self.console.print(Panel("[bold]Code Review Results[/bold]", border_style="blue"))

        stats_table = Table(title="Statistics", show_header=True)
        stats_table.add_column("Metric", style="cyan")
        stats_table.add_column("Value", style="green")
        stats_table.add_row("Files", str(len(data.outcomes)))
        stats_table.add_row("Failed", f"[red]{len(data.failures)}[/red]")
        stats_table.add_row("Suggestions", str(data.total_findings))
        self.console.print(stats_table)

        for outcome in data.outcomes:
            self._print_outcome(outcome)

        return self.console.export_text()

    def _print_outcome(self, outcome: FileReviewOutcome) -> None:
        if not outcome.succeeded or outcome.review is None:
            self.console.print(
                f"\n[bold magenta]{outcome.filename}[/bold magenta] [red]실패[/red]"
            )
            self.console.print(f"  [red]{outcome.error}[/red]", markup=False)
            return

        findings = outcome.review.reviews
        self.console.print(
            f"\n[bold magenta]{outcome.filename}[/bold magenta] "
            f"[dim]({len(findings)} suggestions)[/dim]"
        )
        if not findings:
            self.console.print("  [dim]No issues found.[/dim]")
        for finding in findings:
            self.console.print(f"  [yellow]\\[{finding.type}][/yellow] ", end="")
            self.console.print(finding.suggestion, markup=False)


def get_formatter(format_type: str = "xml") -> BaseFormatter:
    """형식 이름으로 포매터 반환.

    Raises:
        ValueError: 지원하지 않는 형식인 경우
    """
    formatters: dict[OutputFormat, type[BaseFormatter]] = {
        OutputFormat.XML: XMLFormatter,
        OutputFormat.JSON: JSONFormatter,
        OutputFormat.CONSOLE: ConsoleFormatter,
    }
    try:
        output_format = OutputFormat(format_type.lower())
    except ValueError:
        available = ", ".join(f.value for f in OutputFormat)
        raise ValueError(
            f"지원하지 않는 출력 형식입니다: {format_type}. 사용 가능: {available}"
        ) from None
    return formatters[output_format]()
