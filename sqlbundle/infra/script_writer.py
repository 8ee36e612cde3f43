from __future__ import annotations

import os
import tempfile
from pathlib import Path

from sqlbundle.errors import DestinationWriteFailure


DEFAULT_FILE_SUFFIX = "-migrations.sql"


def _default_file_mode() -> int:
    # mkstemp は 0600 で作るので、通常の open と同じ umask 適用後のモードへ揃える
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def output_filename(database: str, suffix: str = DEFAULT_FILE_SUFFIX) -> str:
    return f"{database}{suffix}"


def write_script(
    dest_dir: Path,
    database: str,
    text: str,
    *,
    suffix: str = DEFAULT_FILE_SUFFIX,
    encoding: str = "utf-8",
) -> Path:
    """一時ファイルへ書いてから rename する。途中で失敗しても既存の出力は壊さない。"""
    target = dest_dir / output_filename(database, suffix)
    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{database}-", suffix=".tmp", dir=dest_dir)
    except OSError as e:
        raise DestinationWriteFailure(f"cannot prepare destination {dest_dir}: {e}") from e

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="\n") as f:
            f.write(text)
        os.chmod(tmp_path, _default_file_mode())
        os.replace(tmp_path, target)
    except (OSError, UnicodeEncodeError) as e:
        tmp_path.unlink(missing_ok=True)
        raise DestinationWriteFailure(f"cannot write {target}: {e}") from e
    return target
