from __future__ import annotations

import re


BATCH_SEPARATOR_TOKEN = "GO"
# 行の区切りは \n のみ。splitlines は \x0c や \u2028 でも切ってしまう
LINE_BREAK = re.compile(r"(?<=\n)")


def is_batch_separator(line: str) -> bool:
    return line.strip().upper() == BATCH_SEPARATOR_TOKEN


def split_batches(sql_text: str) -> list[str]:
    """`GO` 行でSQLテキストをバッチ断片へ分割する。

    断片は元の行を改行込みでそのまま連結したもの。区切り行自体は含めない。
    最後の区切り以降の断片は空文字でも必ず返す。
    """
    fragments: list[str] = []
    current: list[str] = []
    for line in LINE_BREAK.split(sql_text):
        if not line:
            continue
        if is_batch_separator(line):
            fragments.append("".join(current))
            current = []
            continue
        current.append(line)
    fragments.append("".join(current))
    return fragments
