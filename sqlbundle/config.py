from __future__ import annotations

import configparser
from dataclasses import dataclass
from pathlib import Path


ROOT_DIR = Path(__file__).resolve().parent.parent
CONFIG_DIR = ROOT_DIR / "config"
HELP_DIR = CONFIG_DIR / "Help"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "app.conf"


@dataclass(frozen=True)
class AppConfig:
    source_dir: str
    dest_dir: str
    source_encoding: str
    file_suffix: str
    output_encoding: str
    print_on_apply: bool
    keep_going: bool
    log_level: str
    log_path: str


def _read_config(path: Path) -> configparser.ConfigParser:
    parser = configparser.ConfigParser()
    parser.read(path, encoding="utf-8")
    return parser


def load_app_config(path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    parser = _read_config(path)
    return AppConfig(
        source_dir=parser.get("paths", "source_dir", fallback="migrations"),
        dest_dir=parser.get("paths", "dest_dir", fallback="build"),
        source_encoding=parser.get("source", "encoding", fallback="utf-8-sig"),
        file_suffix=parser.get("output", "file_suffix", fallback="-migrations.sql"),
        output_encoding=parser.get("output", "encoding", fallback="utf-8"),
        print_on_apply=parser.getboolean("output", "print_on_apply", fallback=True),
        keep_going=parser.getboolean("run", "keep_going", fallback=False),
        log_level=parser.get("logging", "log_level", fallback="INFO").upper(),
        log_path=parser.get("logging", "log_path", fallback="data/logs/sqlbundle.log"),
    )


def load_help_text(filename: str, fallback: str = "") -> str:
    help_path = HELP_DIR / filename
    if not help_path.exists():
        return fallback
    return help_path.read_text(encoding="utf-8").strip()
