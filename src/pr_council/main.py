"""PR-Council CLI 엔트리포인트."""

import json
import logging
import os
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from pr_council import __version__
from pr_council.shared.config import get_config_path, load_config
from pr_council.shared.models import OutputFormat, PRFile

console = Console()


class Context:
    """CLI 컨텍스트."""

    def __init__(self):
        self.config = None
        self.format = None
        self.verbose = False


pass_context = click.make_pass_decorator(Context, ensure=True)


def load_pr_files(path: str) -> list[PRFile]:
    """JSON 파일에서 PRFile 목록 로드.

    최상위가 리스트이거나 ``{"files": [...]}`` 형식이어야 합니다.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("files", [])
    if not isinstance(data, list):
        raise click.BadParameter("PR 파일 목록은 JSON 배열이어야 합니다", param_hint="FILES_JSON")
    return [PRFile.from_dict(item) for item in data]


def _build_llm(ctx: Context):
    from pr_council.shared.llm import get_llm

    llm_config = ctx.config.llm
    return get_llm(
        llm_config.provider,
        model=llm_config.model,
        api_key=os.environ.get(llm_config.api_key_env),
        max_tokens=llm_config.max_tokens,
        temperature=llm_config.temperature,
    )


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    help="설정 파일 경로",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice([f.value for f in OutputFormat]),
    default=None,
    help="출력 형식 (기본: 설정의 output.default_format)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="상세 출력",
)
@click.version_option(version=__version__, prog_name="pr-council")
@pass_context
def cli(ctx: Context, config: str | None, format: str | None, verbose: bool):
    """PR-Council: PR diff를 역할별 Multi-Role 리뷰로 검토하는 도구."""
    ctx.config = load_config(Path(config) if config else None)
    ctx.format = format or ctx.config.output.default_format
    ctx.verbose = verbose

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ============================================================
# Review 명령어
# ============================================================


@cli.command()
@click.argument("files_json", type=click.Path(exists=True))
@click.option(
    "--role",
    "-r",
    "roles",
    multiple=True,
    help="사용할 역할 (기본: syntax, dependency, style)",
)
@click.option("--sequential", is_flag=True, help="역할과 파일을 순차적으로 실행")
@click.option("--context-lines", type=int, default=None, help="hunk 앞뒤로 덧붙일 줄 수")
@pass_context
def review(
    ctx: Context,
    files_json: str,
    roles: tuple,
    sequential: bool,
    context_lines: int | None,
):
    """PR 파일들을 Multi-Role 리뷰하고 결과를 출력."""
    from pr_council.review import ReviewRunner, TokenBudgetEnforcer
    from pr_council.shared.output import get_formatter

    review_config = ctx.config.review
    role_list = list(roles) if roles else review_config.roles
    parallel = not sequential and review_config.parallel

    try:
        files = load_pr_files(files_json)
        console.print(f"[dim]파일 {len(files)}개, 역할: {', '.join(role_list)}[/dim]")

        runner = ReviewRunner(
            roles=role_list,
            llm=_build_llm(ctx),
            parallel=parallel,
            budget=TokenBudgetEnforcer(review_config.token_limits),
            context_lines=context_lines
            if context_lines is not None
            else review_config.context_lines,
        )
        with console.status("[bold green]리뷰 진행 중..."):
            result = runner.review_files_sync(files)

        formatter = get_formatter(ctx.format)
        output = formatter.format(result)
        if ctx.format != "console":
            click.echo(output)
    except Exception as e:
        console.print(f"[red]오류:[/red] {e}")
        if ctx.verbose:
            import traceback

            console.print(traceback.format_exc())
        raise click.Abort()

    if not result.succeeded:
        for outcome in result.failures:
            console.print(f"[red]실패:[/red] {outcome.filename}: {outcome.error}")
        raise click.exceptions.Exit(1)


@cli.command()
@click.argument("files_json", type=click.Path(exists=True))
@click.option(
    "--role",
    "-r",
    type=click.Choice(["syntax", "dependency", "style", "diff", "xml"]),
    default="xml",
    help="시스템 프롬프트 역할",
)
@click.option("--model", "-m", default=None, help="대상 모델 (기본: 설정의 llm.model)")
@pass_context
def budget(ctx: Context, files_json: str, role: str, model: str | None):
    """조립된 프롬프트의 토큰 수를 모델 한도와 비교."""
    from pr_council.review import ReviewRunner, TokenBudgetEnforcer
    from pr_council.review.patch_strategy import build_patch_prompt
    from pr_council.review.prompt_builder import build_conversation

    model = model or ctx.config.llm.model
    enforcer = TokenBudgetEnforcer(ctx.config.review.token_limits)
    context_lines = ctx.config.review.context_lines

    try:
        files = load_pr_files(files_json)

        table = Table(title=f"Token Budget ({model}, {role})", show_header=True)
        table.add_column("File", style="cyan")
        table.add_column("Tokens", style="green")
        table.add_column("Limit")
        table.add_column("Fits")

        for file in files:
            conversation = build_conversation(role, build_patch_prompt(file, context_lines))
            check = enforcer.check(conversation, model)
            table.add_row(
                file.filename,
                str(check.tokens),
                str(check.limit),
                "[green]yes[/green]" if check.fits else "[red]no[/red]",
            )

        runner = ReviewRunner(budget=enforcer, context_lines=context_lines)
        total = runner.check_single_shot(files, model, role)
        table.add_row(
            "[bold]single-shot[/bold]",
            str(total.tokens),
            str(total.limit),
            "[green]yes[/green]" if total.fits else "[red]no[/red]",
        )
        console.print(table)

        if total.approximate:
            console.print(
                f"[yellow]{model} 전용 토크나이저가 없어 근사값입니다.[/yellow]"
            )
    except Exception as e:
        console.print(f"[red]오류:[/red] {e}")
        raise click.Abort()


@cli.command()
def roles():
    """사용 가능한 리뷰 역할 목록."""
    from pr_council.review.roles import ROLE_REGISTRY

    for name in sorted(ROLE_REGISTRY):
        console.print(f"[bold]{name}[/bold]: {ROLE_REGISTRY[name].description}")


# ============================================================
# Config 명령어 그룹
# ============================================================


@cli.group()
@pass_context
def config(ctx: Context):
    """설정 관리."""
    pass


@config.command("show")
@pass_context
def config_show(ctx: Context):
    """현재 설정 표시."""
    config_path = get_config_path()

    if config_path:
        console.print(f"[bold]설정 파일:[/bold] {config_path}")
    else:
        console.print("[dim]설정 파일 없음 (기본값 사용)[/dim]")

    console.print()
    console.print("[bold]LLM 설정:[/bold]")
    console.print(f"  Provider: {ctx.config.llm.provider}")
    console.print(f"  Model: {ctx.config.llm.model}")

    console.print()
    console.print("[bold]리뷰 설정:[/bold]")
    console.print(f"  역할: {', '.join(ctx.config.review.roles)}")
    console.print(f"  병렬 실행: {ctx.config.review.parallel}")
    console.print(f"  컨텍스트 줄 수: {ctx.config.review.context_lines}")


if __name__ == "__main__":
    cli()
