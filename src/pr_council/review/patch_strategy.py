"""패치 렌더링 전략 선택 모듈.

원본 파일 내용(old_contents)이 있으면 hunk 주변의 변경되지 않은 줄을 덧붙인
context 전략을, 없으면 저장된 patch를 그대로 쓰는 raw 전략을 사용합니다.
"""

import logging
from dataclasses import dataclass, field

from pr_council.shared.models import DiffHunk, PatchStrategy, PRFile

from .line_mapper import assign_line_numbers, parse_hunk_header

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_LINES = 3


def select_patch_strategy(file: PRFile) -> PatchStrategy:
    """파일에 적용할 패치 전략 선택. old_contents 유무만으로 결정됩니다."""
    if file.old_contents is None:
        return PatchStrategy.RAW
    return PatchStrategy.CONTEXT


def raw_patch_strategy(file: PRFile) -> str:
    """저장된 patch를 그대로 ``## filename`` 헤더와 함께 렌더링."""
    return f"## {file.filename}\n\n{file.patch}"


def smarter_context_patch_strategy(
    file: PRFile, context_lines: int = DEFAULT_CONTEXT_LINES
) -> str:
    """hunk 앞뒤로 변경되지 않은 줄을 덧붙여 렌더링.

    주변 줄은 new_contents에서 (없으면 old_contents에서) 가져오며 파일 범위를
    넘지 않습니다. 확장 후 겹치거나 맞닿는 hunk는 하나로 합쳐지고,
    헤더는 확장된 범위로 다시 계산됩니다.

    Args:
        file: 변경 파일
        context_lines: hunk 앞뒤로 덧붙일 줄 수

    Returns:
        ``## filename`` 헤더가 붙은 확장 patch 텍스트
    """
    if context_lines < 0:
        raise ValueError(f"context_lines는 0 이상이어야 합니다: {context_lines}")

    preamble, hunks = parse_hunks(file.patch)
    if not hunks:
        return raw_patch_strategy(file)

    if file.new_contents is not None:
        source = _split_lines(file.new_contents)
        use_new_side = True
    else:
        source = _split_lines(file.old_contents or "")
        use_new_side = False

    expanded = _expand_hunks(hunks, source, context_lines, use_new_side)
    body = "\n".join(preamble + [line for group in expanded for line in group.render()])

    logger.debug(
        f"{file.filename}: hunk {len(hunks)}개 -> 확장 hunk {len(expanded)}개 "
        f"(context_lines={context_lines})"
    )
    return f"## {file.filename}\n\n{body}"


def render_patch(file: PRFile, context_lines: int = DEFAULT_CONTEXT_LINES) -> str:
    """선택된 전략으로 파일 patch를 렌더링."""
    if select_patch_strategy(file) is PatchStrategy.RAW:
        return raw_patch_strategy(file)
    return smarter_context_patch_strategy(file, context_lines)


def build_patch_prompt(file: PRFile, context_lines: int = DEFAULT_CONTEXT_LINES) -> str:
    """전략 선택 후 줄 번호까지 붙인 프롬프트용 patch 텍스트.

    Raises:
        ParseError: patch의 hunk 헤더를 해석할 수 없는 경우
    """
    return assign_line_numbers(render_patch(file, context_lines))


def parse_hunks(patch: str) -> tuple[list[str], list[DiffHunk]]:
    """patch를 (첫 hunk 이전 줄들, hunk 목록)으로 분리.

    Raises:
        ParseError: hunk 헤더를 해석할 수 없는 경우
    """
    lines = patch.split("\n")
    if lines and lines[-1] == "":
        lines.pop()

    preamble: list[str] = []
    hunks: list[DiffHunk] = []

    for line in lines:
        if line.startswith("@@"):
            old_start, old_count, new_start, new_count = parse_hunk_header(line)
            hunks.append(
                DiffHunk(
                    old_start=old_start,
                    old_count=old_count,
                    new_start=new_start,
                    new_count=new_count,
                )
            )
        elif hunks:
            hunks[-1].lines.append(line)
        else:
            preamble.append(line)

    return preamble, hunks


@dataclass
class _ExpandedHunk:
    """확장 중인 hunk. 첫 줄의 old/new 줄 번호와 본문을 보관."""

    first_old: int
    first_new: int
    source_end: int
    lines: list[str] = field(default_factory=list)

    def render(self) -> list[str]:
        old_count = sum(1 for line in self.lines if not line.startswith(("+", "\\")))
        new_count = sum(1 for line in self.lines if not line.startswith(("-", "\\")))
        old_start = self.first_old if old_count else self.first_old - 1
        new_start = self.first_new if new_count else self.first_new - 1
        header = f"@@ -{old_start},{old_count} +{new_start},{new_count} @@"
        return [header, *self.lines]


def _before_end(start: int, count: int) -> int:
    # count가 0이면 start는 변경 위치 바로 앞 줄을 가리킨다
    return start - 1 if count > 0 else start


def _expand_hunks(
    hunks: list[DiffHunk], source: list[str], context_lines: int, use_new_side: bool
) -> list[_ExpandedHunk]:
    total = len(source)
    expanded: list[_ExpandedHunk] = []
    current: _ExpandedHunk | None = None
    after_start = 0

    def context(first: int, last: int) -> list[str]:
        return [f" {source[i - 1]}" for i in range(max(first, 1), min(last, total) + 1)]

    for hunk in hunks:
        old_before = _before_end(hunk.old_start, hunk.old_count)
        new_before = _before_end(hunk.new_start, hunk.new_count)
        if use_new_side:
            before, count = new_before, hunk.new_count
        else:
            before, count = old_before, hunk.old_count
        lead_from = max(1, before - context_lines + 1)

        if current is not None and lead_from <= current.source_end + context_lines + 1:
            # 확장 범위가 겹치거나 맞닿으면 사이의 줄을 컨텍스트로 채워 합친다
            current.lines.extend(context(after_start, before))
        else:
            if current is not None:
                current.lines.extend(context(after_start, after_start + context_lines - 1))
                expanded.append(current)
            leading = context(lead_from, before)
            current = _ExpandedHunk(
                first_old=old_before - len(leading) + 1,
                first_new=new_before - len(leading) + 1,
                source_end=before,
                lines=leading,
            )

        current.lines.extend(hunk.lines)
        current.source_end = before + count
        after_start = current.source_end + 1

    if current is not None:
        current.lines.extend(context(after_start, after_start + context_lines - 1))
        expanded.append(current)

    return expanded


def _split_lines(contents: str) -> list[str]:
    lines = contents.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines
