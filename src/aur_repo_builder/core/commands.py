"""外部ツール（makepkg / vercmp / repo-add / git）の呼び出し.

各ツールは「引数を渡し、終了ステータスと出力を受け取る」だけの協調者として扱う。
実行は CommandRunner を経由するため、テストでは偽のランナーに差し替えられる。
タイムアウトは設けず、プロセスの終了を同期的に待つ。
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from loguru import logger

from .exceptions import ExternalCommandError, VersionComparisonError

MAKEPKG_BUILD_FLAGS = ("-s", "--noconfirm", "--skippgpcheck")


class CommandRunner(Protocol):
    def run(
        self,
        args: Sequence[str],
        cwd: Path | None = None,
        capture: bool = False,
    ) -> subprocess.CompletedProcess[str]: ...


class SubprocessRunner:
    """subprocess.run による実行（終了まで待機、タイムアウトなし）."""

    def run(
        self,
        args: Sequence[str],
        cwd: Path | None = None,
        capture: bool = False,
    ) -> subprocess.CompletedProcess[str]:
        logger.debug(f"Running: {' '.join(args)} (cwd={cwd})")
        try:
            return subprocess.run(
                list(args),
                cwd=cwd,
                capture_output=capture,
                text=True,
                check=False,
            )
        except OSError as e:
            raise ExternalCommandError(f"Failed to start {args[0]}: {e}", command=args) from e


def _output(result: subprocess.CompletedProcess[str]) -> str:
    return "".join(part for part in (result.stdout, result.stderr) if part)


class Makepkg:
    """makepkg の呼び出し."""

    def __init__(self, runner: CommandRunner | None = None, executable: str = "makepkg") -> None:
        self.runner = runner or SubprocessRunner()
        self.executable = executable

    def print_srcinfo(self, definition_dir: Path) -> str:
        """`makepkg --printsrcinfo` の出力を返す.

        Raises:
            ExternalCommandError: makepkg が失敗した場合
        """
        args = [self.executable, "--printsrcinfo"]
        result = self.runner.run(args, cwd=definition_dir, capture=True)
        if result.returncode != 0:
            raise ExternalCommandError(
                f"Failed to print srcinfo for {definition_dir}",
                command=args,
                returncode=result.returncode,
                output=_output(result),
            )
        return result.stdout or ""

    def build(self, definition_dir: Path, install: bool = False) -> None:
        """非対話フラグで makepkg を実行する（install=True なら -i を付与）.

        Raises:
            ExternalCommandError: 終了ステータスが 0 以外の場合
        """
        args = [self.executable, *MAKEPKG_BUILD_FLAGS]
        if install:
            args.append("-i")
        result = self.runner.run(args, cwd=definition_dir)
        if result.returncode != 0:
            raise ExternalCommandError(
                f"Failed to build package in {definition_dir}",
                command=args,
                returncode=result.returncode,
                output=_output(result),
            )


class VercmpCommand:
    """外部の `vercmp` による比較器."""

    def __init__(self, runner: CommandRunner | None = None, executable: str = "vercmp") -> None:
        self.runner = runner or SubprocessRunner()
        self.executable = executable

    def compare(self, a: str, b: str) -> int:
        """`vercmp a b` の出力（負/0/正の整数）を返す.

        Raises:
            VersionComparisonError: 起動失敗、非0終了、数値以外の出力の場合
        """
        args = [self.executable, a, b]
        try:
            result = self.runner.run(args, capture=True)
        except ExternalCommandError as e:
            raise VersionComparisonError(str(e), command=args) from e

        if result.returncode != 0:
            raise VersionComparisonError(
                "vercmp failed",
                command=args,
                returncode=result.returncode,
                output=_output(result),
            )
        text = (result.stdout or "").strip()
        try:
            return int(text)
        except ValueError as e:
            raise VersionComparisonError(
                f"Unparseable vercmp output: {text!r}",
                command=args,
                returncode=result.returncode,
                output=text,
            ) from e


class RepoAdd:
    """repo-add によるリポジトリデータベースの更新."""

    def __init__(self, runner: CommandRunner | None = None, executable: str = "repo-add") -> None:
        self.runner = runner or SubprocessRunner()
        self.executable = executable

    def add(self, database: Path, package: Path) -> None:
        """データベースに1パッケージを追加する（データベースのあるディレクトリで実行）.

        Raises:
            ExternalCommandError: 終了ステータスが 0 以外の場合
        """
        args = [self.executable, str(database), str(package)]
        result = self.runner.run(args, cwd=database.parent)
        if result.returncode != 0:
            raise ExternalCommandError(
                f"Failed to add {package.name} to {database.name}",
                command=args,
                returncode=result.returncode,
                output=_output(result),
            )


class Git:
    """git の呼び出し（AUR からの取得用）."""

    def __init__(self, runner: CommandRunner | None = None, executable: str = "git") -> None:
        self.runner = runner or SubprocessRunner()
        self.executable = executable

    def run(self, *args: str, cwd: Path | None = None, capture: bool = False) -> str:
        """git サブコマンドを実行し、capture=True なら標準出力を返す.

        Raises:
            ExternalCommandError: 終了ステータスが 0 以外の場合
        """
        command = [self.executable, *args]
        result = self.runner.run(command, cwd=cwd, capture=capture)
        if result.returncode != 0:
            raise ExternalCommandError(
                f"git {args[0]} failed",
                command=command,
                returncode=result.returncode,
                output=_output(result),
            )
        return (result.stdout or "").strip() if capture else ""
