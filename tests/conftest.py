from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import Callable

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import main
from sqlbundle.infra.loggers import reset_logger


MakeDatabase = Callable[[str, dict[str, str]], Path]


@pytest.fixture
def source_root(tmp_path: Path) -> Path:
    root = tmp_path / "migrations"
    root.mkdir()
    return root


@pytest.fixture
def make_database(source_root: Path) -> MakeDatabase:
    def _make(name: str, files: dict[str, str]) -> Path:
        db_dir = source_root / name
        db_dir.mkdir()
        for filename, text in files.items():
            (db_dir / filename).write_text(text, encoding="utf-8")
        return db_dir

    return _make


@pytest.fixture
def app_paths(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, source_root: Path) -> Path:
    dest_dir = tmp_path / "build"
    monkeypatch.setattr(main, "SOURCE_DIR", source_root)
    monkeypatch.setattr(main, "DEST_DIR", dest_dir)
    monkeypatch.setattr(main, "LOG_PATH", tmp_path / "data" / "logs" / "sqlbundle.log")
    monkeypatch.setattr(main, "KEEP_GOING", False)
    monkeypatch.setattr(main, "PRINT_ON_APPLY", True)
    reset_logger()
    yield dest_dir
    reset_logger()


_HISTORY_GUARD = re.compile(r"^IF NOT EXISTS \(SELECT 1 FROM \[dbo\]\.\[_Migrations\] WHERE \[Name\] = N'(.*)'\)$")
_OBJECT_GUARD = re.compile(r"^IF NOT EXISTS \(SELECT 1 FROM sys\.objects WHERE \[name\] = N'(.*)'\)$")
_DATABASE_GUARD = re.compile(r"^IF NOT EXISTS \(SELECT 1 FROM sys\.databases WHERE \[name\] = N'(.*)'\)$")
_RECORD = re.compile(r"^INSERT INTO \[dbo\]\.\[_Migrations\] \(\[Name\], \[DateApplied\]\) VALUES \(N'(.*)', GETDATE\(\)\)$")
_CREATE_TABLE = re.compile(r"^CREATE TABLE \[dbo\]\.\[(.+)\] \($")
_CREATE_DATABASE = re.compile(r"^CREATE DATABASE \[(.+)\]$")


class SimulatedTarget:
    """生成スクリプトの IF/BEGIN/END と履歴テーブルだけを解釈する簡易実行器。"""

    def __init__(self) -> None:
        self.databases: set[str] = set()
        self.objects: set[str] = set()
        self.history: list[str] = []
        self.printed: list[str] = []
        self.executed: list[str] = []

    def _condition(self, line: str) -> bool | None:
        if match := _HISTORY_GUARD.match(line):
            return match.group(1) not in self.history
        if match := _OBJECT_GUARD.match(line):
            return match.group(1) not in self.objects
        if match := _DATABASE_GUARD.match(line):
            return match.group(1) not in self.databases
        return None

    def _run_statement(self, line: str) -> None:
        if match := _RECORD.match(line):
            assert "_Migrations" in self.objects, "history table must exist before recording"
            self.history.append(match.group(1))
        elif line.startswith("PRINT "):
            self.printed.append(line)
        elif match := _CREATE_TABLE.match(line):
            self.objects.add(match.group(1))
        elif match := _CREATE_DATABASE.match(line):
            self.databases.add(match.group(1))
        else:
            self.executed.append(line)

    def run_batch(self, batch: list[str]) -> None:
        stack: list[bool] = []
        pending: bool | None = None
        for raw in batch:
            line = raw.strip()
            if not line:
                continue
            condition = self._condition(line)
            if condition is not None:
                pending = condition
                continue
            if line == "BEGIN":
                stack.append(bool(pending) if pending is not None else True)
                pending = None
                continue
            if line == "END":
                assert stack, "END without BEGIN"
                stack.pop()
                continue
            active = all(stack) and (pending is None or pending)
            pending = None
            if active and not line.startswith((")", "[")):
                self._run_statement(line)
        assert not stack, "BEGIN left open at end of batch"

    def run(self, script: str) -> None:
        batch: list[str] = []
        for line in script.splitlines():
            if line.strip().upper() == "GO":
                self.run_batch(batch)
                batch = []
                continue
            batch.append(line)
        self.run_batch(batch)


@pytest.fixture
def simulated_target() -> SimulatedTarget:
    target = SimulatedTarget()
    # 既定ではブートストラップ済みの状態から始める
    target.objects.add("_Migrations")
    return target
