from __future__ import annotations


BATCH_SEPARATOR = "GO"
MIGRATIONS_SCHEMA = "dbo"
MIGRATIONS_TABLE = "_Migrations"


def sql_literal(value: str) -> str:
    return "N'" + value.replace("'", "''") + "'"


def migrations_table_ref() -> str:
    return f"[{MIGRATIONS_SCHEMA}].[{MIGRATIONS_TABLE}]"


def _body(block: str) -> str:
    # 末尾の改行は呼び出し側で付け直すので落とす
    return block.rstrip("\r\n")


def open_migration_guard(name: str, print_on_apply: bool) -> str:
    lines = [
        f"IF NOT EXISTS (SELECT 1 FROM {migrations_table_ref()} WHERE [Name] = {sql_literal(name)})",
        "BEGIN",
    ]
    if print_on_apply:
        lines.append(f"    PRINT {sql_literal('Applying migration ' + name)}")
    return "\n".join(lines)


def close_guard() -> str:
    return "END"


def wrap_migration_guard(name: str, block: str, print_on_apply: bool) -> str:
    """未適用のときだけ block を実行する条件ブロックを開く。

    BEGIN のスコープは開いたまま返す。閉じるのは呼び出し側（close_guard）。
    """
    parts = [open_migration_guard(name, print_on_apply)]
    body = _body(block)
    if body:
        parts.append(body)
    return "\n".join(parts)


def wrap_existence_guard(object_name: str, block: str) -> str:
    parts = [
        f"IF NOT EXISTS (SELECT 1 FROM sys.objects WHERE [name] = {sql_literal(object_name)})",
        "BEGIN",
    ]
    body = _body(block)
    if body:
        parts.append(body)
    parts.append(close_guard())
    return "\n".join(parts)


def completion_statement(name: str) -> str:
    return (
        f"INSERT INTO {migrations_table_ref()} ([Name], [DateApplied]) "
        f"VALUES ({sql_literal(name)}, GETDATE())"
    )
