"""AUR repository builder exceptions.

カスタム例外クラスを定義します。
いずれも「その定義（PKGBUILD ディレクトリ）の処理は続行不能」を意味し、リトライは行いません。
"""

from __future__ import annotations

from collections.abc import Sequence


class AurBuildError(Exception):
    """ビルド/公開処理で発生する致命的エラーの基底クラス."""


class SrcinfoParseError(AurBuildError):
    """.SRCINFO の必須フィールドが欠落している、または不正な形式の場合の例外.

    Attributes:
        source: 解析対象（定義ディレクトリ等）
        field: 問題のあったフィールド名
    """

    def __init__(self, source: str, field: str, detail: str = "missing") -> None:
        self.source = source
        self.field = field
        super().__init__(f"Failed to parse srcinfo for {source}: {field} is {detail}")


class RepositoryConsistencyError(AurBuildError):
    """リポジトリ（またはビルドディレクトリ）の状態が想定と矛盾する場合の例外.

    ちょうど1件を期待する箇所で0件/複数件が見つかった場合や、
    命名規則に従わないファイルが見つかった場合に送出します。
    曖昧さを自動で解消することはしません。

    Attributes:
        name: 対象パッケージ名
        matches: 見つかったファイル名
    """

    def __init__(self, message: str, name: str | None = None, matches: Sequence[str] = ()) -> None:
        self.name = name
        self.matches = list(matches)
        if self.matches:
            message = f"{message}: {', '.join(self.matches)}"
        super().__init__(message)


class ExternalCommandError(AurBuildError):
    """外部コマンド（makepkg / repo-add / git 等）が失敗した場合の例外.

    Attributes:
        command: 実行したコマンドライン
        returncode: 終了ステータス（起動できなかった場合は None）
        output: 取得できた出力（標準出力/標準エラー）
    """

    def __init__(
        self,
        message: str,
        command: Sequence[str],
        returncode: int | None = None,
        output: str = "",
    ) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.output = output
        super().__init__(f"{message} (command={' '.join(self.command)}, returncode={returncode})")


class VersionComparisonError(ExternalCommandError):
    """バージョン比較ツールが起動できない、または解釈不能な結果を返した場合の例外."""
