from __future__ import annotations


class BundleError(Exception):
    """データベース単位で処理を打ち切るべき入力・出力エラーの基底クラス。"""


class InvalidFilenameFormat(BundleError, ValueError):
    """マイグレーションファイル名が `<major>.<minor>.<patch>-<label>.sql` に一致しない。"""

    def __init__(self, filename: str) -> None:
        super().__init__(f"invalid migration filename: {filename}")
        self.filename = filename


class DuplicateVersion(BundleError, ValueError):
    """同一データベース内で同じバージョンを宣言するファイルが複数ある。"""

    def __init__(self, version: str, first: str, second: str) -> None:
        super().__init__(f"duplicate migration version {version}: {first}, {second}")
        self.version = version
        self.filenames = (first, second)


class UnreadableFile(BundleError, OSError):
    """マイグレーションファイルの読み込み・デコードに失敗した。"""


class DestinationWriteFailure(BundleError, OSError):
    """出力スクリプトを書き込めなかった。"""


class InvalidDatabaseName(BundleError, ValueError):
    """生成SQLへそのまま埋め込めないデータベース名。"""


class SourceLayoutError(BundleError, ValueError):
    """ソースルートや指定データベースのディレクトリが見つからない。"""
