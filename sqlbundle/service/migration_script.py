from __future__ import annotations

from sqlbundle.service.sql_guard import BATCH_SEPARATOR, close_guard, completion_statement, wrap_migration_guard
from sqlbundle.service.sql_split import split_batches
from sqlbundle.service.version_parse import MigrationFile


def _effective_batches(raw_sql: str) -> list[str]:
    # 空の BEGIN/END は構文エラーになるため、空白だけの断片は捨てる
    batches = [fragment for fragment in split_batches(raw_sql) if fragment.strip()]
    return batches or [""]


def build_migration_script(migration: MigrationFile, *, print_on_apply: bool = True) -> str:
    """1ファイル分のマイグレーションを冪等ガード付きのテキストにする。

    バッチごとに同じ識別子でガードを開き直すので、GO をまたいでも
    未適用判定が全バッチに掛かる。適用記録は最後のバッチの中で行う。
    適用通知（PRINT）は最初のバッチだけに出す。
    """
    batches = _effective_batches(migration.raw_sql)
    parts: list[str] = []
    last = len(batches) - 1
    for index, batch in enumerate(batches):
        parts.append(wrap_migration_guard(migration.name, batch, print_on_apply and index == 0))
        if index == last:
            parts.append(completion_statement(migration.name))
            parts.append(close_guard())
        else:
            parts.append(close_guard())
            parts.append(BATCH_SEPARATOR)
    return "\n".join(parts)
