from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from sqlbundle.errors import BundleError
from sqlbundle.infra.discover import DatabaseSource
from sqlbundle.usecase.assemble import DatabaseScript


@dataclass(frozen=True)
class DatabaseOutcome:
    database: str
    status: str
    migrations: int = 0
    out_path: Path | None = None
    error: str | None = None


@dataclass(frozen=True)
class BundleRunResult:
    """1回の build 実行の結果を呼び出し元へ返すDTO。"""

    outcomes: tuple[DatabaseOutcome, ...]
    aborted: bool = False

    @property
    def failed(self) -> tuple[DatabaseOutcome, ...]:
        return tuple(o for o in self.outcomes if o.status == "failed")

    @property
    def ok(self) -> bool:
        return not self.aborted and not self.failed


def execute_bundle_run(
    databases: Sequence[DatabaseSource],
    *,
    build: Callable[[DatabaseSource], DatabaseScript],
    write: Callable[[DatabaseScript], Path] | None,
    keep_going: bool,
    logger: logging.Logger,
) -> BundleRunResult:
    """データベースごとに組み立て→書き込みを順に実行する。

    1データベースの失敗はそのデータベースだけの失敗として記録する。
    keep_going=False なら最初の失敗で残りを skipped にして終える。
    write=None はドライラン（組み立てと検証のみ）。
    """
    outcomes: list[DatabaseOutcome] = []
    aborted = False

    for source in databases:
        if aborted:
            outcomes.append(DatabaseOutcome(database=source.name, status="skipped"))
            continue

        try:
            script = build(source)
            out_path = write(script) if write is not None else None
        except BundleError as e:
            logger.error("database_failed database=%s error_type=%s error=%s", source.name, type(e).__name__, e)
            outcomes.append(DatabaseOutcome(database=source.name, status="failed", error=str(e)))
            if not keep_going:
                aborted = True
            continue

        status = "written" if out_path is not None else "checked"
        logger.info(
            "database_%s database=%s migrations=%s out=%s",
            status,
            source.name,
            len(script.migrations),
            out_path,
        )
        outcomes.append(
            DatabaseOutcome(
                database=source.name,
                status=status,
                migrations=len(script.migrations),
                out_path=out_path,
            )
        )

    return BundleRunResult(outcomes=tuple(outcomes), aborted=aborted)
