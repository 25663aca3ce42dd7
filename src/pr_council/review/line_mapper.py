"""Unified diff에 새 파일 기준 줄 번호를 붙이는 모듈."""

import re

from pr_council.shared.errors import ParseError

# Hunk 헤더 패턴: @@ -old_start[,old_count] +new_start[,new_count] @@ context
HUNK_HEADER_PATTERN = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$")

_NO_NEWLINE_MARKER = "\\"


def parse_hunk_header(line: str) -> tuple[int, int, int, int]:
    """Hunk 헤더에서 (old_start, old_count, new_start, new_count) 추출.

    count가 생략된 경우 git 규칙에 따라 1로 간주합니다.

    Raises:
        ParseError: 헤더 형식이 올바르지 않은 경우
    """
    match = HUNK_HEADER_PATTERN.match(line)
    if not match:
        raise ParseError(f"Hunk 헤더를 해석할 수 없습니다: {line!r}", line=line)

    old_start = int(match.group(1))
    old_count = int(match.group(2)) if match.group(2) is not None else 1
    new_start = int(match.group(3))
    new_count = int(match.group(4)) if match.group(4) is not None else 1
    return old_start, old_count, new_start, new_count


def assign_line_numbers(diff: str) -> str:
    """diff의 추가/컨텍스트 줄에 새 파일 기준 줄 번호를 붙입니다.

    - chunk 헤더는 그대로 두고 카운터를 헤더의 새 파일 시작 줄로 재설정
    - ``-`` 로 시작하는 줄은 제거
    - 나머지 hunk 줄은 diff 마커(``+`` 또는 공백)를 떼고 ``{n}: {text}`` 형식으로 변환
    - 첫 hunk 이전의 줄 (``## filename`` 등)은 번호 없이 유지

    Args:
        diff: unified diff 텍스트

    Returns:
        줄 번호가 붙은 diff 텍스트

    Raises:
        ParseError: ``@@`` 로 시작하지만 해석할 수 없는 헤더가 있는 경우

    Examples:
        >>> assign_line_numbers("@@ -1,3 +1,3 @@\\n a\\n-b\\n+c\\n d")
        '@@ -1,3 +1,3 @@\\n1: a\\n2: c\\n3: d'
    """
    lines = diff.split("\n")
    if lines and lines[-1] == "" and len(lines) > 1:
        lines.pop()

    numbered: list[str] = []
    new_line: int | None = None

    for line in lines:
        if line.startswith("@@"):
            _, _, new_line, _ = parse_hunk_header(line)
            numbered.append(line)
        elif new_line is None:
            numbered.append(line)
        elif line.startswith("-") or line.startswith(_NO_NEWLINE_MARKER):
            continue
        else:
            text = line[1:] if line[:1] in ("+", " ") else line
            numbered.append(f"{new_line}: {text}")
            new_line += 1

    return "\n".join(numbered)
